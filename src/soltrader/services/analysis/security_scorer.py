"""Security scoring for DexScreener trading pairs.

Baseline 50 with additive adjustments for liquidity, 24h volume,
24h price change and pool age, clamped to [0, 100]. The volume/liquidity
turnover check only adds notes. Every check runs, so warnings co-occur.
"""

from __future__ import annotations

from datetime import datetime

import structlog

from soltrader.constants.security import (
    ACTIVE_TURNOVER_RATIO,
    BASELINE_SCORE,
    DROP_CHANGE_PCT,
    DROP_PENALTY,
    DUMP_CHANGE_PCT,
    DUMP_PENALTY,
    ESTABLISHED_POOL_DAYS,
    ESTABLISHED_POOL_POINTS,
    GOOD_LIQUIDITY_POINTS,
    GOOD_LIQUIDITY_USD,
    HIGH_LIQUIDITY_POINTS,
    HIGH_LIQUIDITY_USD,
    HIGH_VOLUME_POINTS,
    HIGH_VOLUME_USD,
    LOW_LIQUIDITY_PENALTY,
    LOW_LIQUIDITY_USD,
    LOW_VOLUME_PENALTY,
    LOW_VOLUME_USD,
    MAX_SCORE,
    MIN_SCORE,
    MODERATE_MIN_SCORE,
    NEW_POOL_DAYS,
    NEW_POOL_PENALTY,
    PUMP_CHANGE_PCT,
    RISKY_MIN_SCORE,
    SAFE_MIN_SCORE,
    STALE_TURNOVER_RATIO,
)
from soltrader.models.analysis import SecurityAssessment, SecurityRating
from soltrader.services.dexscreener.models import TokenPair

logger = structlog.get_logger(__name__)


def rating_for_score(score: int) -> SecurityRating:
    """Map a clamped score to its rating. Lower bounds are inclusive."""
    if score >= SAFE_MIN_SCORE:
        return SecurityRating.SAFE
    if score >= MODERATE_MIN_SCORE:
        return SecurityRating.MODERATE
    if score >= RISKY_MIN_SCORE:
        return SecurityRating.RISKY
    return SecurityRating.DANGER


class SecurityScorer:
    """Turns market data into a 0-100 risk score.

    Stateless: scoring the same pair at the same ``now`` always yields an
    identical assessment.
    """

    def score(self, pair: TokenPair, now: datetime | None = None) -> SecurityAssessment:
        """Score a trading pair.

        Args:
            pair: Highest-liquidity pool for the token
            now: Reference time for pool age (defaults to current UTC time)

        Returns:
            SecurityAssessment with clamped score and rating
        """
        score = BASELINE_SCORE
        warnings: list[str] = []
        positives: list[str] = []

        liquidity = pair.liquidity_usd
        if liquidity > HIGH_LIQUIDITY_USD:
            score += HIGH_LIQUIDITY_POINTS
            positives.append("High liquidity")
        elif liquidity > GOOD_LIQUIDITY_USD:
            score += GOOD_LIQUIDITY_POINTS
            positives.append("Good liquidity")
        elif liquidity < LOW_LIQUIDITY_USD:
            score -= LOW_LIQUIDITY_PENALTY
            warnings.append("Low liquidity")

        volume = pair.volume_24h_usd
        if volume > HIGH_VOLUME_USD:
            score += HIGH_VOLUME_POINTS
            positives.append("High 24h volume")
        elif volume < LOW_VOLUME_USD:
            score -= LOW_VOLUME_PENALTY
            warnings.append("Low 24h volume")

        change_24h = pair.price_change_24h
        if change_24h < DUMP_CHANGE_PCT:
            score -= DUMP_PENALTY
            warnings.append("RUG ALERT: major dump detected")
        elif change_24h < DROP_CHANGE_PCT:
            score -= DROP_PENALTY
            warnings.append("Significant price drop")
        elif change_24h > PUMP_CHANGE_PCT:
            positives.append("Strong 24h momentum")

        age_days = pair.age_days(now)
        if age_days < NEW_POOL_DAYS:
            score -= NEW_POOL_PENALTY
            warnings.append("New token (<24h)")
        elif age_days > ESTABLISHED_POOL_DAYS:
            score += ESTABLISHED_POOL_POINTS
            positives.append("Established pool (>7 days)")

        if liquidity > 0:
            turnover = volume / liquidity
            if turnover > ACTIVE_TURNOVER_RATIO:
                positives.append("Active trading relative to liquidity")
            elif turnover < STALE_TURNOVER_RATIO:
                warnings.append("Thin trading relative to liquidity")

        score = max(MIN_SCORE, min(MAX_SCORE, score))
        rating = rating_for_score(score)

        logger.debug(
            "security_scored",
            pair=pair.pair_address[:8],
            score=score,
            rating=rating.value,
            warnings=len(warnings),
        )

        return SecurityAssessment(
            score=score,
            warnings=warnings,
            positives=positives,
            rating=rating,
        )
