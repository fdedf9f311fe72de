"""Amount conversions and clamps.

Conversions go through Decimal(str(x)) so that e.g. 0.3 SOL becomes
300_000_000 lamports rather than 299_999_999.
"""

from decimal import ROUND_FLOOR, Decimal

from soltrader.constants.solana import LAMPORTS_PER_SOL, SOL_DECIMALS


def _decimal(value: float | int | Decimal) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def to_atomic(amount: float | Decimal, decimals: int) -> int:
    """Convert a UI amount to atomic units, rounding down."""
    scaled = _decimal(amount) * (Decimal(10) ** decimals)
    return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def from_atomic(amount: int, decimals: int) -> float:
    """Convert atomic units to a UI amount."""
    return float(Decimal(amount) / (Decimal(10) ** decimals))


def sol_to_lamports(amount_sol: float | Decimal) -> int:
    return to_atomic(amount_sol, SOL_DECIMALS)


def lamports_to_sol(lamports: int) -> float:
    return float(Decimal(lamports) / Decimal(LAMPORTS_PER_SOL))


def percentage_of(amount: int, percentage: float) -> int:
    """floor(amount * percentage / 100) in exact arithmetic."""
    share = Decimal(amount) * _decimal(percentage) / Decimal(100)
    return int(share.to_integral_value(rounding=ROUND_FLOOR))


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
