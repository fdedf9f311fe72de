#!/usr/bin/env python3
"""
Token analysis script.

Fetches the highest-liquidity Solana pool for a token from DexScreener,
scores it and prints the entry signal.

Usage:
    python scripts/analyze_token.py <token_address>

Exit codes:
    0 - Analysis printed
    1 - Invalid address or no market data
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from soltrader.config.logging import configure_logging
from soltrader.core.wallet.validator import is_valid_solana_address
from soltrader.services.analysis import SecurityScorer, SignalGenerator
from soltrader.services.dexscreener.client import DexScreenerClient

log = structlog.get_logger(__name__)


def _format_usd(value: float) -> str:
    if value >= 1_000_000:
        return f"${value / 1_000_000:.2f}M"
    if value >= 1_000:
        return f"${value / 1_000:.2f}K"
    return f"${value:.2f}"


async def analyze(token_address: str) -> int:
    """Print the analysis for one token. Returns the process exit code."""
    if not is_valid_solana_address(token_address):
        print(f"Invalid Solana address: {token_address}")
        return 1

    client = DexScreenerClient()
    try:
        pair = await client.fetch_trading_pair(token_address)
    finally:
        await client.close()

    if pair is None:
        print("Token not found or no liquidity pools available.")
        return 1

    assessment = SecurityScorer().score(pair)
    signal = SignalGenerator().signal(pair, assessment.score)

    print(f"{pair.base_token.name or '?'} ({pair.symbol})  on {pair.dex_id}")
    print(f"Price:      ${pair.current_price_usd:.8g}")
    print(f"1h / 24h:   {pair.price_change_1h:+.2f}% / {pair.price_change_24h:+.2f}%")
    print(f"Liquidity:  {_format_usd(pair.liquidity_usd)}")
    print(f"Volume 24h: {_format_usd(pair.volume_24h_usd)}")
    print(f"Pool age:   {pair.age_days():.1f} days")
    print()
    print(f"Security:   {assessment.score}/100 ({assessment.rating.value})")
    for note in assessment.positives:
        print(f"  + {note}")
    for warning in assessment.warnings:
        print(f"  ! {warning}")
    print()
    print(f"Signal:     {signal.entry_action.value} - {signal.entry_reason}")
    if signal.has_exit_plan:
        print(
            f"Take profit: +{signal.take_profit.percent:g}% "
            f"(${signal.take_profit.price:.8g})"
        )
        print(f"Stop loss:   -{signal.stop_loss.percent:g}% (${signal.stop_loss.price:.8g})")
    else:
        print("No safe exit plan.")

    log.debug("token_analyzed", token=token_address[:8], rule=signal.rule_name)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Score a Solana token and print its signal")
    parser.add_argument("token_address", help="Token mint address")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override LOG_LEVEL from the environment",
    )
    args = parser.parse_args()

    configure_logging(args.log_level)
    sys.exit(asyncio.run(analyze(args.token_address)))


if __name__ == "__main__":
    main()
