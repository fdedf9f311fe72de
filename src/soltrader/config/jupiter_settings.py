"""Jupiter API and trade execution configuration."""

from functools import lru_cache

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from soltrader.constants.trading import (
    CONFIRMATION_POLL_SECONDS,
    CONFIRMATION_TIMEOUT_SECONDS,
    FEE_BUFFER_SOL,
    MAX_PRIORITY_FEE_SOL,
    MIN_PRIORITY_FEE_SOL,
    SUBMIT_MAX_RETRIES,
    TRADE_HISTORY_LIMIT,
    TRADE_MAX_SLIPPAGE_BPS,
    TRADE_MIN_SLIPPAGE_BPS,
)


class JupiterSettings(BaseSettings):
    """Jupiter API and trade execution configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API endpoints
    jupiter_api_url: str = Field(
        default="https://quote-api.jup.ag/v6",
        description="Jupiter V6 API base URL (quote + swap)",
    )
    jupiter_price_api_url: str = Field(
        default="https://price.jup.ag/v6",
        description="Jupiter price API base URL",
    )

    # Slippage band enforced by the orchestrator
    min_slippage_bps: int = Field(default=TRADE_MIN_SLIPPAGE_BPS, ge=1, le=10000)
    max_slippage_bps: int = Field(default=TRADE_MAX_SLIPPAGE_BPS, ge=1, le=10000)
    default_slippage_bps: int = Field(
        default=100,  # 1%
        ge=1,
        le=10000,
        description="Slippage used when the caller has no preference",
    )

    # Priority fee bounds (SOL)
    min_priority_fee_sol: float = Field(default=MIN_PRIORITY_FEE_SOL, gt=0)
    max_priority_fee_sol: float = Field(default=MAX_PRIORITY_FEE_SOL, gt=0)
    default_priority_fee_sol: float = Field(default=0.001, gt=0)

    # Platform fee (commission)
    platform_fee_bps: int = Field(
        default=0,
        ge=0,
        le=1000,
        description="Platform fee charged on swaps, in basis points",
    )
    platform_fee_account: str | None = Field(
        default=None,
        description="Token account receiving the platform fee",
    )

    # Timeouts
    quote_timeout_seconds: float = Field(default=10.0, ge=1, le=60)
    swap_timeout_seconds: float = Field(default=30.0, ge=5, le=120)
    confirmation_timeout_seconds: float = Field(
        default=CONFIRMATION_TIMEOUT_SECONDS, ge=10, le=180
    )
    confirmation_poll_seconds: float = Field(
        default=CONFIRMATION_POLL_SECONDS, gt=0, le=10
    )
    submit_max_retries: int = Field(default=SUBMIT_MAX_RETRIES, ge=0, le=10)

    # Safety
    fee_buffer_sol: float = Field(
        default=FEE_BUFFER_SOL,
        ge=0,
        description="SOL kept aside for base network fees on buys",
    )
    serialize_wallet_trades: bool = Field(
        default=True,
        description="Run trades on the same wallet one at a time",
    )

    # History and caches
    trade_history_limit: int = Field(default=TRADE_HISTORY_LIMIT, ge=1, le=10000)
    balance_cache_ttl_seconds: int = Field(default=30, ge=1, le=3600)
    price_cache_ttl_seconds: int = Field(default=60, ge=1, le=3600)

    @field_validator("max_slippage_bps")
    @classmethod
    def validate_max_slippage(cls, v: int, info: ValidationInfo) -> int:
        """Validate max slippage is >= min slippage."""
        minimum = info.data.get("min_slippage_bps", TRADE_MIN_SLIPPAGE_BPS)
        if v < minimum:
            raise ValueError("max_slippage_bps must be >= min_slippage_bps")
        return v

    @field_validator("max_priority_fee_sol")
    @classmethod
    def validate_max_priority_fee(cls, v: float, info: ValidationInfo) -> float:
        """Validate max priority fee is >= min priority fee."""
        minimum = info.data.get("min_priority_fee_sol", MIN_PRIORITY_FEE_SOL)
        if v < minimum:
            raise ValueError("max_priority_fee_sol must be >= min_priority_fee_sol")
        return v


@lru_cache
def get_jupiter_settings() -> JupiterSettings:
    """Get Jupiter settings singleton."""
    return JupiterSettings()
