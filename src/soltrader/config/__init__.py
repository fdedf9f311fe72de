"""Configuration module for SolTrader.

Usage:
    from soltrader.config import get_settings, get_jupiter_settings

    settings = get_settings()  # Cached singleton
    print(settings.solana_rpc_url)

Note:
    Use the getters rather than module-level instances so that tests can
    set environment variables before the first load.
"""

from soltrader.config.jupiter_settings import JupiterSettings, get_jupiter_settings
from soltrader.config.settings import Settings, get_settings

__all__ = ["JupiterSettings", "Settings", "get_jupiter_settings", "get_settings"]
