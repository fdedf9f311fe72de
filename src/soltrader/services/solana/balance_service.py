"""Wallet balance reads on top of the RPC client.

Display paths may use the cache; trade paths always read fresh
(``use_cache=False``) and invalidate the cached value afterwards.
"""

from __future__ import annotations

import structlog

from soltrader.constants.solana import DEFAULT_TOKEN_DECIMALS
from soltrader.core.exceptions import ExternalServiceError
from soltrader.services.solana.balance_cache import BalanceCache
from soltrader.services.solana.models import TokenBalance
from soltrader.services.solana.rpc_client import SolanaRPCClient

logger = structlog.get_logger(__name__)


class BalanceService:
    """Reads SOL and SPL balances for wallets."""

    def __init__(self, rpc: SolanaRPCClient, cache: BalanceCache | None = None) -> None:
        self._rpc = rpc
        self._cache = cache or BalanceCache()

    async def get_sol_balance(self, address: str, use_cache: bool = True) -> int:
        """Get SOL balance in lamports.

        Args:
            address: Wallet public key.
            use_cache: Serve from cache when fresh; always refreshes the cache.
        """
        if use_cache:
            cached = self._cache.get(address)
            if cached is not None:
                return cached

        lamports = await self._rpc.get_balance(address)
        self._cache.set(address, lamports)
        logger.debug("sol_balance_fetched", wallet=address[:8], lamports=lamports)
        return lamports

    async def get_token_balance(self, owner: str, mint: str) -> TokenBalance:
        """Get the owner's balance for one mint. Never cached."""
        return await self._rpc.get_token_balance(owner, mint)

    async def get_mint_decimals(self, mint: str) -> int:
        """Get mint decimals, falling back to 9 when the chain lookup fails."""
        try:
            return await self._rpc.get_mint_decimals(mint)
        except ExternalServiceError as e:
            logger.warning(
                "mint_decimals_fallback",
                mint=mint[:8],
                fallback=DEFAULT_TOKEN_DECIMALS,
                error=str(e),
            )
            return DEFAULT_TOKEN_DECIMALS

    def invalidate(self, address: str) -> None:
        self._cache.invalidate(address)
