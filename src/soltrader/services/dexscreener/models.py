"""Pydantic models for DexScreener API responses.

API Documentation: https://docs.dexscreener.com/api/reference
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

MS_PER_DAY = 1000 * 60 * 60 * 24


class TokenInfo(BaseModel):
    """Base or quote token within a trading pair."""

    address: str
    name: str | None = None
    symbol: str | None = None


class VolumeInfo(BaseModel):
    """Trading volume in USD per window."""

    h24: float | None = None
    h6: float | None = None
    h1: float | None = None
    m5: float | None = None


class PriceChangeInfo(BaseModel):
    """Price change in percent per window."""

    h24: float | None = None
    h6: float | None = None
    h1: float | None = None
    m5: float | None = None


class LiquidityInfo(BaseModel):
    """Pool liquidity."""

    usd: float | None = None
    base: float | None = None
    quote: float | None = None


class TokenPair(BaseModel):
    """Trading pair with full market data.

    Missing numeric fields read as zero through the helper properties so the
    scorer never has to special-case partial upstream data.
    """

    model_config = ConfigDict(populate_by_name=True)

    chain_id: str = Field(alias="chainId")
    dex_id: str = Field(alias="dexId")
    pair_address: str = Field(alias="pairAddress")
    url: str | None = None
    base_token: TokenInfo = Field(alias="baseToken")
    quote_token: TokenInfo | None = Field(default=None, alias="quoteToken")
    price_native: str | None = Field(default=None, alias="priceNative")
    price_usd: str | None = Field(default=None, alias="priceUsd")
    price_change: PriceChangeInfo | None = Field(default=None, alias="priceChange")
    volume: VolumeInfo | None = None
    liquidity: LiquidityInfo | None = None
    fdv: float | None = None
    market_cap: float | None = Field(default=None, alias="marketCap")
    pair_created_at: int | None = Field(default=None, alias="pairCreatedAt")

    @property
    def liquidity_usd(self) -> float:
        return (self.liquidity.usd if self.liquidity else None) or 0.0

    @property
    def volume_24h_usd(self) -> float:
        return (self.volume.h24 if self.volume else None) or 0.0

    @property
    def price_change_1h(self) -> float:
        return (self.price_change.h1 if self.price_change else None) or 0.0

    @property
    def price_change_24h(self) -> float:
        return (self.price_change.h24 if self.price_change else None) or 0.0

    @property
    def current_price_usd(self) -> float:
        try:
            return float(self.price_usd) if self.price_usd else 0.0
        except ValueError:
            return 0.0

    @property
    def symbol(self) -> str:
        return self.base_token.symbol or ""

    def age_days(self, now: datetime | None = None) -> float:
        """Pool age in days; a pair without creation time counts as brand new."""
        if self.pair_created_at is None:
            return 0.0
        now_ms = (now or datetime.now(UTC)).timestamp() * 1000
        return max(0.0, (now_ms - self.pair_created_at) / MS_PER_DAY)


class TokenPairsResponse(BaseModel):
    """Response from token pairs endpoint."""

    pairs: list[TokenPair] | None = None
