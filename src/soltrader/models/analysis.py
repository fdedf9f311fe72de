"""Token analysis models: security assessment and entry signal."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SecurityRating(str, Enum):
    """Qualitative rating derived from the security score."""

    SAFE = "SAFE"
    MODERATE = "MODERATE"
    RISKY = "RISKY"
    DANGER = "DANGER"


class EntryAction(str, Enum):
    """Entry recommendation produced by the signal table."""

    BUY_NOW = "BUY_NOW"
    GOOD_ENTRY = "GOOD_ENTRY"
    WAIT = "WAIT"
    CAUTION = "CAUTION"
    AVOID = "AVOID"
    HIGH_RISK = "HIGH_RISK"


class SecurityAssessment(BaseModel):
    """Risk score for a trading pair. Recomputed on every analysis."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    warnings: list[str] = Field(default_factory=list)
    positives: list[str] = Field(default_factory=list)
    rating: SecurityRating


class PriceTarget(BaseModel):
    """Exit target relative to the current price."""

    model_config = ConfigDict(frozen=True)

    percent: float = Field(..., ge=0)
    price: float = Field(..., ge=0)

    @property
    def is_set(self) -> bool:
        """A zero percent target means no target is offered."""
        return self.percent > 0


class TradingSignal(BaseModel):
    """Entry recommendation with take-profit and stop-loss targets."""

    model_config = ConfigDict(frozen=True)

    entry_action: EntryAction
    entry_reason: str
    rule_name: str
    take_profit: PriceTarget
    stop_loss: PriceTarget

    @property
    def has_exit_plan(self) -> bool:
        """False when neither target is offered."""
        return self.take_profit.is_set or self.stop_loss.is_set
