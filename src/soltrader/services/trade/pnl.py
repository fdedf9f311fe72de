"""Weighted-average cost basis and realized PnL."""

from __future__ import annotations

from collections.abc import Iterable

from soltrader.models.trade import TradeRecord


def average_cost(buys: Iterable[TradeRecord]) -> float | None:
    """SOL paid per token across buy records.

    Returns:
        total SOL spent / total tokens bought, or None without usable history.
    """
    spent = 0.0
    bought = 0.0
    for record in buys:
        if not record.is_buy:
            continue
        spent += record.amount_sol
        bought += record.token_amount

    if bought <= 0:
        return None
    return spent / bought


def realized_pnl(
    proceeds_sol: float,
    tokens_sold: float,
    buys: Iterable[TradeRecord],
) -> float:
    """PnL in SOL for a sell: proceeds minus the cost basis of the tokens sold.

    An unknown cost basis reports 0 rather than failing.
    """
    cost = average_cost(buys)
    if cost is None:
        return 0.0
    return proceeds_sol - tokens_sold * cost
