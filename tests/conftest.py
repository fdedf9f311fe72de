"""Shared pytest fixtures for SolTrader tests.

This module provides fixtures for:
- Environment isolation and settings cache resets
- Test data factories
- Wallets with real (throwaway) keypairs
- Mocked collaborators for the trade orchestrator

Usage:
    @pytest.mark.unit
    def test_something(token_pair_factory):
        pair = token_pair_factory(liquidity_usd=200_000)
        assert pair.liquidity_usd == 200_000
"""

import os
from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from solders.keypair import Keypair

from soltrader.config.jupiter_settings import JupiterSettings, get_jupiter_settings
from soltrader.config.settings import get_settings
from soltrader.models.wallet import Wallet
from tests.factories.market import TokenPairFactory
from tests.factories.trade import TradeRecordFactory
from tests.factories.wallet import WalletFactory

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Isolate environment variables and settings caches per test."""
    original_env = os.environ.copy()

    os.environ["SOLANA_RPC_URL"] = "https://rpc.test.local"
    os.environ["SOLANA_RPC_FALLBACK_URLS"] = '["https://fallback.test.local"]'
    get_settings.cache_clear()
    get_jupiter_settings.cache_clear()

    yield

    os.environ.clear()
    os.environ.update(original_env)
    get_settings.cache_clear()
    get_jupiter_settings.cache_clear()


# =============================================================================
# Factory Fixtures
# =============================================================================


@pytest.fixture
def token_pair_factory() -> type[TokenPairFactory]:
    """Provide token pair factory for market data."""
    return TokenPairFactory


@pytest.fixture
def trade_record_factory() -> type[TradeRecordFactory]:
    """Provide trade record factory for history entries."""
    return TradeRecordFactory


@pytest.fixture
def wallet_factory() -> type[WalletFactory]:
    """Provide wallet factory."""
    return WalletFactory


# =============================================================================
# Wallets
# =============================================================================


@pytest.fixture
def keypair() -> Keypair:
    return Keypair()


@pytest.fixture
def wallet(keypair: Keypair) -> Wallet:
    """Wallet owned by chat user 42, backed by a real keypair."""
    return Wallet.from_keypair(owner_id=42, keypair=keypair)


# =============================================================================
# Settings and Mocked Collaborators
# =============================================================================


@pytest.fixture
def jupiter_settings() -> JupiterSettings:
    """Trade settings with short confirmation waits."""
    return JupiterSettings(
        confirmation_timeout_seconds=10,
        confirmation_poll_seconds=0.01,
        platform_fee_bps=0,
    )


@pytest.fixture
def mock_jupiter_client() -> MagicMock:
    """Mock Jupiter client: quotes must be set per test, SOL is $150."""
    mock = MagicMock()
    mock.get_quote = AsyncMock()
    mock.build_swap_transaction = AsyncMock()
    mock.get_token_price = AsyncMock(return_value=150.0)
    return mock


@pytest.fixture
def mock_balance_service() -> MagicMock:
    """Mock balance service with 10 SOL and 6-decimal mints."""
    mock = MagicMock()
    mock.get_sol_balance = AsyncMock(return_value=10_000_000_000)
    mock.get_token_balance = AsyncMock()
    mock.get_mint_decimals = AsyncMock(return_value=6)
    mock.invalidate = MagicMock()
    return mock
