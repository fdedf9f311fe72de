"""Trade execution services."""

from soltrader.services.trade.history import InMemoryTradeHistory, TradeHistoryStore
from soltrader.services.trade.orchestrator import (
    TradeOrchestrator,
    get_trade_orchestrator,
    reset_trade_orchestrator,
)
from soltrader.services.trade.pnl import average_cost, realized_pnl

__all__ = [
    "InMemoryTradeHistory",
    "TradeHistoryStore",
    "TradeOrchestrator",
    "average_cost",
    "get_trade_orchestrator",
    "realized_pnl",
    "reset_trade_orchestrator",
]
