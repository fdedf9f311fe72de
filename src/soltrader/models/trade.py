"""Trade execution data models.

Models for:
- Trade intents coming from the chat layer
- Swap quotes from Jupiter
- Swap execution results
- Trade history records
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from soltrader.constants.solana import WSOL_MINT
from soltrader.core.wallet.validator import is_valid_solana_address


class SwapDirection(str, Enum):
    """Direction of swap."""

    BUY = "buy"  # SOL -> Token
    SELL = "sell"  # Token -> SOL


class TradeIntent(BaseModel):
    """A single buy or sell request, consumed immediately by the orchestrator."""

    model_config = ConfigDict(frozen=True)

    direction: SwapDirection
    token_address: str
    amount_sol: float | None = Field(None, gt=0, description="SOL to spend (buy)")
    percentage: float | None = Field(
        None, gt=0, le=100, description="Share of holdings to sell (sell)"
    )

    @field_validator("token_address")
    @classmethod
    def validate_token(cls, v: str) -> str:
        """Validate token address is a Solana public key."""
        if not is_valid_solana_address(v):
            raise ValueError("Invalid token address")
        return v.strip()

    @model_validator(mode="after")
    def validate_size(self) -> TradeIntent:
        """Buys are sized in SOL, sells in percent of holdings."""
        if self.direction == SwapDirection.BUY and self.amount_sol is None:
            raise ValueError("Buy requires amount_sol")
        if self.direction == SwapDirection.SELL and self.percentage is None:
            raise ValueError("Sell requires percentage")
        return self

    def mints(self) -> tuple[str, str]:
        """Return (input_mint, output_mint) for this direction."""
        if self.direction == SwapDirection.BUY:
            return WSOL_MINT, self.token_address
        return self.token_address, WSOL_MINT


class SwapQuote(BaseModel):
    """Quote from Jupiter for a swap.

    Immutable and single-use: a quote goes stale within seconds, so every
    execution must start from a fresh one.
    """

    model_config = ConfigDict(frozen=True)

    input_mint: str = Field(..., description="Input token mint")
    output_mint: str = Field(..., description="Output token mint")
    in_amount: int = Field(..., ge=0, description="Input amount in atomic units")
    out_amount: int = Field(..., ge=0, description="Expected output in atomic units")
    other_amount_threshold: int = Field(
        ..., ge=0, description="Minimum output after slippage"
    )
    slippage_bps: int = Field(..., ge=0, le=10000)
    price_impact_pct: float = Field(default=0.0)
    platform_fee_amount: int = Field(default=0, ge=0, description="Fee in output atomic units")
    platform_fee_bps: int = Field(default=0, ge=0)
    route_plan: list[dict[str, Any]] = Field(default_factory=list)
    output_decimals: int | None = Field(None, ge=0, le=18)
    raw: dict[str, Any] = Field(
        default_factory=dict, description="Upstream payload, sent back verbatim to /swap"
    )
    quoted_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def has_route(self) -> bool:
        """A quote with no output amount means no route was found."""
        return self.out_amount > 0

    @property
    def route_labels(self) -> list[str]:
        """AMM labels along the route, for display."""
        labels = []
        for step in self.route_plan:
            label = (step.get("swapInfo") or {}).get("label")
            if label:
                labels.append(label)
        return labels


class SwapResult(BaseModel):
    """Result of a confirmed swap execution."""

    success: bool
    tx_signature: str
    input_amount: int = Field(..., ge=0)
    output_amount: int = Field(..., ge=0)
    priority_fee_lamports: int = Field(default=0, ge=0)
    platform_fee_amount: int = Field(
        default=0, ge=0, description="Platform fee collected, 0 when no fee account was attached"
    )
    execution_time_ms: float = Field(default=0.0, ge=0)
    confirmed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class TradeRecord(BaseModel):
    """History entry written after every successful trade. Never mutated."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    direction: SwapDirection
    wallet_address: str
    token_address: str
    token_symbol: str = Field(default="")
    amount_sol: float = Field(..., ge=0, description="SOL spent (buy) or received (sell)")
    token_amount: float = Field(..., ge=0, description="Tokens received (buy) or sold (sell)")
    usd_value: float | None = Field(None, description="amount_sol in USD at trade time")
    realized_pnl_sol: float = Field(default=0.0)
    realized_pnl_usd: float | None = Field(None)
    tx_signature: str
    fee_taken: int = Field(default=0, ge=0, description="Platform fee, output atomic units")

    @property
    def is_buy(self) -> bool:
        """Check if this record is a buy."""
        return self.direction == SwapDirection.BUY
