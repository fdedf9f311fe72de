"""Token analysis: security scoring and entry signals."""

from soltrader.services.analysis.security_scorer import SecurityScorer, rating_for_score
from soltrader.services.analysis.signal_generator import (
    SIGNAL_RULES,
    SignalGenerator,
    SignalRule,
)

__all__ = [
    "SIGNAL_RULES",
    "SecurityScorer",
    "SignalGenerator",
    "SignalRule",
    "rating_for_score",
]
