"""Append-only trade history, most recent first, capped per owner."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Protocol

import structlog

from soltrader.constants.trading import TRADE_HISTORY_LIMIT
from soltrader.models.trade import SwapDirection, TradeRecord

logger = structlog.get_logger(__name__)


class TradeHistoryStore(Protocol):
    """Protocol for trade history storage."""

    async def append(self, owner_id: int, record: TradeRecord) -> None:
        """Store a record as the owner's most recent trade."""
        ...

    async def recent(self, owner_id: int, limit: int | None = None) -> list[TradeRecord]:
        """Get the owner's trades, most recent first."""
        ...

    async def buys_for_token(self, owner_id: int, token_address: str) -> list[TradeRecord]:
        """Get the owner's buy records for one token."""
        ...


class InMemoryTradeHistory:
    """Process-local history store.

    Each owner gets a bounded deque; the oldest records fall off once
    ``max_records`` is reached.
    """

    def __init__(self, max_records: int = TRADE_HISTORY_LIMIT) -> None:
        if max_records < 1:
            raise ValueError("max_records must be positive")
        self.max_records = max_records
        self._records: dict[int, deque[TradeRecord]] = {}
        self._lock = asyncio.Lock()

    async def append(self, owner_id: int, record: TradeRecord) -> None:
        async with self._lock:
            records = self._records.setdefault(owner_id, deque(maxlen=self.max_records))
            records.appendleft(record)
            size = len(records)

        logger.debug(
            "trade_recorded",
            owner_id=owner_id,
            direction=record.direction.value,
            token=record.token_address[:8],
            history_size=size,
        )

    async def recent(self, owner_id: int, limit: int | None = None) -> list[TradeRecord]:
        async with self._lock:
            records = list(self._records.get(owner_id, ()))
        return records if limit is None else records[:limit]

    async def buys_for_token(self, owner_id: int, token_address: str) -> list[TradeRecord]:
        async with self._lock:
            records = list(self._records.get(owner_id, ()))
        return [
            r
            for r in records
            if r.direction == SwapDirection.BUY and r.token_address == token_address
        ]

    async def clear(self, owner_id: int | None = None) -> None:
        """Drop one owner's history, or everything."""
        async with self._lock:
            if owner_id is None:
                self._records.clear()
            else:
                self._records.pop(owner_id, None)
