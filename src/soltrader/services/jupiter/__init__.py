"""Jupiter aggregator: quotes, swap building and execution."""

from soltrader.services.jupiter.client import JupiterClient, clamp_quote_slippage
from soltrader.services.jupiter.executor import SwapExecutor

__all__ = ["JupiterClient", "SwapExecutor", "clamp_quote_slippage"]
