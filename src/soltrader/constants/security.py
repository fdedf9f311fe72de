"""Security scoring and entry signal constants."""

from typing import Final

BASELINE_SCORE: Final[int] = 50
MIN_SCORE: Final[int] = 0
MAX_SCORE: Final[int] = 100

# Liquidity (USD)
HIGH_LIQUIDITY_USD: Final[float] = 100_000.0
GOOD_LIQUIDITY_USD: Final[float] = 50_000.0
LOW_LIQUIDITY_USD: Final[float] = 10_000.0
HIGH_LIQUIDITY_POINTS: Final[int] = 20
GOOD_LIQUIDITY_POINTS: Final[int] = 10
LOW_LIQUIDITY_PENALTY: Final[int] = 20

# 24h volume (USD)
HIGH_VOLUME_USD: Final[float] = 100_000.0
LOW_VOLUME_USD: Final[float] = 5_000.0
HIGH_VOLUME_POINTS: Final[int] = 10
LOW_VOLUME_PENALTY: Final[int] = 10

# 24h price change (%)
DUMP_CHANGE_PCT: Final[float] = -50.0
DROP_CHANGE_PCT: Final[float] = -30.0
PUMP_CHANGE_PCT: Final[float] = 20.0
DUMP_PENALTY: Final[int] = 25
DROP_PENALTY: Final[int] = 15

# Pool age (days)
NEW_POOL_DAYS: Final[float] = 1.0
ESTABLISHED_POOL_DAYS: Final[float] = 7.0
NEW_POOL_PENALTY: Final[int] = 15
ESTABLISHED_POOL_POINTS: Final[int] = 10

# Volume / liquidity ratio (informational only)
ACTIVE_TURNOVER_RATIO: Final[float] = 2.0
STALE_TURNOVER_RATIO: Final[float] = 0.1

# Rating ladder (lower bound inclusive)
SAFE_MIN_SCORE: Final[int] = 80
MODERATE_MIN_SCORE: Final[int] = 60
RISKY_MIN_SCORE: Final[int] = 40

# Signal tiers (lower bound inclusive)
STRONG_SIGNAL_MIN_SCORE: Final[int] = 70
MODERATE_SIGNAL_MIN_SCORE: Final[int] = 50
