"""TTL cache for SOL balances, keyed by wallet address.

Owned and injected by whichever component reads balances, never a
module-level singleton. Pass a custom ``timer`` to make expiry
deterministic in tests.
"""

import time
from collections.abc import Callable

import structlog
from cachetools import TTLCache

logger = structlog.get_logger(__name__)


class BalanceCache:
    """In-memory TTL cache of lamport balances."""

    def __init__(
        self,
        ttl_seconds: float = 30,
        max_size: int = 10_000,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize balance cache.

        Args:
            ttl_seconds: Entry lifetime
            max_size: Maximum number of cached addresses
            timer: Clock used for expiry
        """
        self.ttl_seconds = ttl_seconds
        self._cache: TTLCache = TTLCache(maxsize=max_size, ttl=ttl_seconds, timer=timer)
        self._hits = 0
        self._misses = 0

    def get(self, address: str) -> int | None:
        """Get cached lamports, or None if absent or expired."""
        lamports = self._cache.get(address)
        if lamports is None:
            self._misses += 1
        else:
            self._hits += 1
        return lamports

    def set(self, address: str, lamports: int) -> None:
        self._cache[address] = lamports

    def invalidate(self, address: str) -> None:
        """Remove an address, e.g. after a trade changed its balance."""
        self._cache.pop(address, None)

    def clear(self) -> None:
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def get_stats(self) -> dict:
        """Get cache statistics."""
        total = self._hits + self._misses
        return {
            "size": len(self._cache),
            "ttl_seconds": self.ttl_seconds,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 4) if total else 0.0,
        }
