"""Entry signal generation as an ordered rule table.

Rules are evaluated top to bottom and the first match wins. Each tier
ends with an unconditional default, so every (pair, score) input matches
exactly one rule.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import structlog

from soltrader.constants.security import MODERATE_SIGNAL_MIN_SCORE, STRONG_SIGNAL_MIN_SCORE
from soltrader.models.analysis import EntryAction, PriceTarget, TradingSignal
from soltrader.services.dexscreener.models import TokenPair

logger = structlog.get_logger(__name__)

# (score, 1h change %, 24h change %) -> matches
Predicate = Callable[[int, float, float], bool]


def _strong(score: int) -> bool:
    return score >= STRONG_SIGNAL_MIN_SCORE


def _moderate(score: int) -> bool:
    return MODERATE_SIGNAL_MIN_SCORE <= score < STRONG_SIGNAL_MIN_SCORE


def _weak(score: int) -> bool:
    return score < MODERATE_SIGNAL_MIN_SCORE


@dataclass(frozen=True)
class SignalRule:
    """One row of the signal table."""

    name: str
    predicate: Predicate
    action: EntryAction
    reason: str
    take_profit_pct: float
    stop_loss_pct: float

    def matches(self, score: int, change_1h: float, change_24h: float) -> bool:
        return self.predicate(score, change_1h, change_24h)


SIGNAL_RULES: tuple[SignalRule, ...] = (
    SignalRule(
        name="strong_dip_in_uptrend",
        predicate=lambda s, h1, h24: _strong(s) and h1 < -5 and h24 > 0,
        action=EntryAction.BUY_NOW,
        reason="Short-term dip in a 24h uptrend on a solid token",
        take_profit_pct=25,
        stop_loss_pct=10,
    ),
    SignalRule(
        name="strong_overextended",
        predicate=lambda s, h1, h24: _strong(s) and h24 > 50,
        action=EntryAction.WAIT,
        reason="Solid token but already up more than 50% in 24h",
        take_profit_pct=15,
        stop_loss_pct=10,
    ),
    SignalRule(
        name="strong_default",
        predicate=lambda s, h1, h24: _strong(s),
        action=EntryAction.GOOD_ENTRY,
        reason="Solid liquidity and activity",
        take_profit_pct=20,
        stop_loss_pct=10,
    ),
    SignalRule(
        name="moderate_dip_in_uptrend",
        predicate=lambda s, h1, h24: _moderate(s) and h1 < -5 and h24 > 0,
        action=EntryAction.GOOD_ENTRY,
        reason="Pullback in a 24h uptrend",
        take_profit_pct=20,
        stop_loss_pct=10,
    ),
    SignalRule(
        name="moderate_pumping",
        predicate=lambda s, h1, h24: _moderate(s) and h1 > 10,
        action=EntryAction.WAIT,
        reason="Pumping in the last hour, wait for a pullback",
        take_profit_pct=15,
        stop_loss_pct=8,
    ),
    SignalRule(
        name="moderate_default",
        predicate=lambda s, h1, h24: _moderate(s),
        action=EntryAction.CAUTION,
        reason="Moderate risk, size the position small",
        take_profit_pct=15,
        stop_loss_pct=8,
    ),
    SignalRule(
        name="weak_dumping",
        predicate=lambda s, h1, h24: _weak(s) and h24 < -30,
        action=EntryAction.HIGH_RISK,
        reason="Low score and dumping, no safe exit plan",
        take_profit_pct=0,
        stop_loss_pct=0,
    ),
    SignalRule(
        name="weak_default",
        predicate=lambda s, h1, h24: _weak(s),
        action=EntryAction.AVOID,
        reason="Low security score",
        take_profit_pct=30,
        stop_loss_pct=15,
    ),
)


class SignalGenerator:
    """Picks an entry action and exit targets from the rule table."""

    def __init__(self, rules: tuple[SignalRule, ...] = SIGNAL_RULES) -> None:
        self._rules = rules

    def match(self, score: int, change_1h: float, change_24h: float) -> SignalRule:
        """Return the first rule matching the inputs."""
        for rule in self._rules:
            if rule.matches(score, change_1h, change_24h):
                return rule
        raise LookupError(f"No signal rule matches score={score}")

    def signal(self, pair: TokenPair, score: int) -> TradingSignal:
        """Build the trading signal for a pair and its security score.

        Args:
            pair: Trading pair with current price and price changes
            score: Security score in [0, 100]

        Returns:
            TradingSignal with targets at price * (1 +/- pct / 100)
        """
        rule = self.match(score, pair.price_change_1h, pair.price_change_24h)
        price = pair.current_price_usd

        logger.debug(
            "signal_generated",
            pair=pair.pair_address[:8],
            score=score,
            rule=rule.name,
            action=rule.action.value,
        )

        return TradingSignal(
            entry_action=rule.action,
            entry_reason=rule.reason,
            rule_name=rule.name,
            take_profit=PriceTarget(
                percent=rule.take_profit_pct,
                price=price * (1 + rule.take_profit_pct / 100),
            ),
            stop_loss=PriceTarget(
                percent=rule.stop_loss_pct,
                price=price * (1 - rule.stop_loss_pct / 100),
            ),
        )
