"""Models for Solana RPC results."""

from pydantic import BaseModel, ConfigDict, Field


class TokenBalance(BaseModel):
    """SPL token balance of one owner for one mint.

    Amounts are summed across every token account the owner holds for the
    mint. ``decimals`` is None when the owner holds no account at all.
    """

    model_config = ConfigDict(frozen=True)

    owner: str
    mint_address: str
    amount: int = Field(..., ge=0, description="Balance in atomic units")
    decimals: int | None = Field(None, ge=0, le=18)

    @property
    def ui_amount(self) -> float:
        """Human-readable amount."""
        if not self.amount or self.decimals is None:
            return 0.0
        return self.amount / 10**self.decimals

    @property
    def is_empty(self) -> bool:
        return self.amount == 0
