"""Tests for InMemoryTradeHistory."""

import asyncio

import pytest

from soltrader.services.trade.history import InMemoryTradeHistory
from tests.factories.trade import TradeRecordFactory

TOKEN = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


class TestInMemoryTradeHistory:
    """Tests for ordering, capping and per-owner isolation."""

    def test_default_limit(self):
        assert InMemoryTradeHistory().max_records == 100

    @pytest.mark.parametrize("max_records", [0, -1])
    def test_rejects_non_positive_limit(self, max_records):
        with pytest.raises(ValueError):
            InMemoryTradeHistory(max_records=max_records)

    @pytest.mark.asyncio
    async def test_most_recent_first(self):
        history = InMemoryTradeHistory()
        first, second, third = TradeRecordFactory.build_batch(3)

        for record in (first, second, third):
            await history.append(1, record)

        assert await history.recent(1) == [third, second, first]
        assert await history.recent(1, limit=2) == [third, second]

    @pytest.mark.asyncio
    async def test_oldest_dropped_at_capacity(self):
        history = InMemoryTradeHistory(max_records=3)
        records = TradeRecordFactory.build_batch(5)

        for record in records:
            await history.append(1, record)

        recent = await history.recent(1)
        assert len(recent) == 3
        assert recent == list(reversed(records[2:]))

    @pytest.mark.asyncio
    async def test_owners_are_isolated(self):
        history = InMemoryTradeHistory()
        mine = TradeRecordFactory()
        theirs = TradeRecordFactory()

        await history.append(1, mine)
        await history.append(2, theirs)

        assert await history.recent(1) == [mine]
        assert await history.recent(2) == [theirs]
        assert await history.recent(3) == []

    @pytest.mark.asyncio
    async def test_buys_for_token(self):
        history = InMemoryTradeHistory()
        buy = TradeRecordFactory(token_address=TOKEN)
        sell = TradeRecordFactory(token_address=TOKEN, sell=True)
        other = TradeRecordFactory()

        for record in (buy, sell, other):
            await history.append(1, record)

        assert await history.buys_for_token(1, TOKEN) == [buy]
        assert await history.buys_for_token(2, TOKEN) == []

    @pytest.mark.asyncio
    async def test_concurrent_appends_all_recorded(self):
        history = InMemoryTradeHistory()
        records = TradeRecordFactory.build_batch(20)

        await asyncio.gather(*(history.append(1, r) for r in records))

        assert len(await history.recent(1)) == 20

    @pytest.mark.asyncio
    async def test_clear(self):
        history = InMemoryTradeHistory()
        await history.append(1, TradeRecordFactory())
        await history.append(2, TradeRecordFactory())

        await history.clear(1)
        assert await history.recent(1) == []
        assert len(await history.recent(2)) == 1

        await history.clear()
        assert await history.recent(2) == []
