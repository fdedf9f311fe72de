"""Test data factories using factory_boy.

These factories generate realistic test data for soltrader models.
"""

from tests.factories.market import REFERENCE_NOW, TokenPairFactory
from tests.factories.trade import TradeRecordFactory
from tests.factories.wallet import WalletFactory, generate_valid_solana_address

__all__ = [
    "REFERENCE_NOW",
    "TokenPairFactory",
    "TradeRecordFactory",
    "WalletFactory",
    "generate_valid_solana_address",
]
