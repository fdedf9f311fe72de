"""Trade execution constants."""

from typing import Final

# Bounds accepted by the Jupiter quote endpoint (0.01% - 100%)
QUOTE_MIN_SLIPPAGE_BPS: Final[int] = 1
QUOTE_MAX_SLIPPAGE_BPS: Final[int] = 10_000

# Safe band applied before requesting a quote (0.5% - 50%)
TRADE_MIN_SLIPPAGE_BPS: Final[int] = 50
TRADE_MAX_SLIPPAGE_BPS: Final[int] = 5_000

# Priority fee bounds in SOL
MIN_PRIORITY_FEE_SOL: Final[float] = 0.0001
MAX_PRIORITY_FEE_SOL: Final[float] = 0.1

# SOL kept aside for base network fees on buys
FEE_BUFFER_SOL: Final[float] = 0.005

# Trade history
TRADE_HISTORY_LIMIT: Final[int] = 100

# Confirmation
CONFIRMATION_TIMEOUT_SECONDS: Final[float] = 60.0
CONFIRMATION_POLL_SECONDS: Final[float] = 0.5
SUBMIT_MAX_RETRIES: Final[int] = 3
