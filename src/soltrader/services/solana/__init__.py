"""Solana RPC client and balance reads."""

from soltrader.services.solana.balance_cache import BalanceCache
from soltrader.services.solana.balance_service import BalanceService
from soltrader.services.solana.rpc_client import SolanaRPCClient

__all__ = ["BalanceCache", "BalanceService", "SolanaRPCClient"]
