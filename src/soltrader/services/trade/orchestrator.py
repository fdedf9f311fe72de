"""Trade orchestrator: one buy or sell from intent to history record.

Implements:
- Pre-trade validation (address, balance, holdings, dust)
- Slippage clamping into the trade band (50-5000 bps)
- Quote -> execute through SwapExecutor
- Realized PnL on sells from the owner's buy history
- Optional per-wallet serialization of trades

No step is retried: a blind retry after broadcast risks a double spend.
Failures propagate as TradeError subclasses and leave no history record.
"""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

from soltrader.config.jupiter_settings import JupiterSettings, get_jupiter_settings
from soltrader.constants.solana import WSOL_MINT
from soltrader.core.amounts import from_atomic, lamports_to_sol, percentage_of, sol_to_lamports
from soltrader.core.exceptions import (
    DustAmountError,
    InsufficientFundsError,
    InvalidTradeSizeError,
    NoRouteFoundError,
    NoTokensHeldError,
)
from soltrader.core.wallet.validator import require_valid_address
from soltrader.models.trade import SwapDirection, SwapQuote, TradeIntent, TradeRecord
from soltrader.models.wallet import Wallet
from soltrader.services.jupiter.client import JupiterClient
from soltrader.services.jupiter.executor import SwapExecutor
from soltrader.services.solana.balance_cache import BalanceCache
from soltrader.services.solana.balance_service import BalanceService
from soltrader.services.solana.rpc_client import SolanaRPCClient
from soltrader.services.trade.history import InMemoryTradeHistory, TradeHistoryStore
from soltrader.services.trade.pnl import realized_pnl

logger = structlog.get_logger(__name__)


class TradeOrchestrator:
    """Runs complete buy and sell operations.

    Holds no per-trade state: quotes, amounts and the signer stay local to
    each call, so concurrent trades for different users never interfere.
    """

    def __init__(
        self,
        jupiter: JupiterClient,
        executor: SwapExecutor,
        balances: BalanceService,
        history: TradeHistoryStore,
        settings: JupiterSettings | None = None,
    ) -> None:
        self._jupiter = jupiter
        self._executor = executor
        self._balances = balances
        self._history = history
        self._settings = settings or get_jupiter_settings()
        # Locks live only while a trade holds or awaits them
        self._wallet_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def clamp_trade_slippage(self, slippage_bps: float) -> int:
        """Clamp slippage into the trade band. In-range values pass through."""
        low = self._settings.min_slippage_bps
        high = self._settings.max_slippage_bps
        return int(max(low, min(high, round(slippage_bps))))

    def _with_defaults(
        self, slippage_bps: float | None, priority_fee_sol: float | None
    ) -> tuple[float, float]:
        if slippage_bps is None:
            slippage_bps = self._settings.default_slippage_bps
        if priority_fee_sol is None:
            priority_fee_sol = self._settings.default_priority_fee_sol
        return slippage_bps, priority_fee_sol

    @asynccontextmanager
    async def _wallet_guard(self, address: str) -> AsyncIterator[None]:
        """Serialize trades on one wallet when enabled."""
        if not self._settings.serialize_wallet_trades:
            yield
            return

        lock = self._wallet_locks.get(address)
        if lock is None:
            lock = asyncio.Lock()
            self._wallet_locks[address] = lock
        async with lock:
            yield

    async def buy(
        self,
        wallet: Wallet,
        amount_sol: float,
        token_address: str,
        slippage_bps: float | None = None,
        priority_fee_sol: float | None = None,
        token_symbol: str | None = None,
    ) -> TradeRecord:
        """Spend SOL on a token.

        Args:
            wallet: Signing wallet
            amount_sol: SOL to spend
            token_address: Mint to buy
            slippage_bps: Requested slippage, clamped to the trade band (default from settings)
            priority_fee_sol: Priority fee, clamped by the executor (default from settings)
            token_symbol: Symbol for the history record

        Returns:
            TradeRecord of the confirmed buy (zero realized PnL)

        Raises:
            InvalidAddressError: token_address is not a Solana address.
            InvalidTradeSizeError: amount_sol is not positive.
            InsufficientFundsError: Balance below amount + fee + buffer.
            NoRouteFoundError: No route for this token.
            TradeError: Any quote or execution failure.
        """
        token_address = require_valid_address(token_address, field="token address")
        amount_lamports = sol_to_lamports(amount_sol)
        if amount_lamports <= 0:
            raise InvalidTradeSizeError(f"Buy amount must be positive, got {amount_sol}")
        slippage_bps, priority_fee_sol = self._with_defaults(slippage_bps, priority_fee_sol)

        async with self._wallet_guard(wallet.address):
            balance = await self._balances.get_sol_balance(wallet.address, use_cache=False)
            fee_lamports = sol_to_lamports(self._executor.clamp_priority_fee(priority_fee_sol))
            required = (
                amount_lamports + fee_lamports + sol_to_lamports(self._settings.fee_buffer_sol)
            )
            if balance < required:
                logger.info(
                    "buy_rejected_insufficient_funds",
                    wallet=wallet.address[:8],
                    balance=balance,
                    required=required,
                )
                raise InsufficientFundsError(lamports_to_sol(balance), lamports_to_sol(required))

            slippage = self.clamp_trade_slippage(slippage_bps)
            quote = await self._jupiter.get_quote(
                input_mint=WSOL_MINT,
                output_mint=token_address,
                amount=amount_lamports,
                slippage_bps=slippage,
                platform_fee_bps=self._settings.platform_fee_bps,
            )
            self._require_route(quote, token_address)

            try:
                result = await self._executor.execute(
                    quote,
                    wallet,
                    priority_fee_sol,
                    platform_fee_bps=self._settings.platform_fee_bps,
                    fee_recipient=self._settings.platform_fee_account,
                )
            finally:
                self._balances.invalidate(wallet.address)

            decimals = await self._output_decimals(quote, token_address)
            spent_sol = lamports_to_sol(result.input_amount)
            sol_price = await self._jupiter.get_token_price(WSOL_MINT)

            record = TradeRecord(
                direction=SwapDirection.BUY,
                wallet_address=wallet.address,
                token_address=token_address,
                token_symbol=token_symbol or "",
                amount_sol=spent_sol,
                token_amount=from_atomic(result.output_amount, decimals),
                usd_value=spent_sol * sol_price if sol_price is not None else None,
                realized_pnl_sol=0.0,
                realized_pnl_usd=0.0 if sol_price is not None else None,
                tx_signature=result.tx_signature,
                fee_taken=result.platform_fee_amount,
            )
            await self._history.append(wallet.owner_id, record)

        logger.info(
            "buy_completed",
            wallet=wallet.address[:8],
            token=token_address[:8],
            amount_sol=record.amount_sol,
            token_amount=record.token_amount,
            signature=record.tx_signature[:16],
        )
        return record

    async def sell(
        self,
        wallet: Wallet,
        percentage: float,
        token_address: str,
        slippage_bps: float | None = None,
        priority_fee_sol: float | None = None,
        token_symbol: str | None = None,
    ) -> TradeRecord:
        """Sell a share of the wallet's holdings for SOL.

        Args:
            wallet: Signing wallet
            percentage: Share of holdings to sell, in (0, 100]
            token_address: Mint to sell
            slippage_bps: Requested slippage, clamped to the trade band (default from settings)
            priority_fee_sol: Priority fee, clamped by the executor (default from settings)
            token_symbol: Symbol for the history record

        Returns:
            TradeRecord of the confirmed sell, carrying realized PnL

        Raises:
            InvalidAddressError: token_address is not a Solana address.
            InvalidTradeSizeError: percentage is outside (0, 100].
            NoTokensHeldError: Wallet holds none of the token.
            DustAmountError: The share rounds down to zero atomic units.
            NoRouteFoundError: No route for this token.
            TradeError: Any quote or execution failure.
        """
        token_address = require_valid_address(token_address, field="token address")
        if not 0 < percentage <= 100:
            raise InvalidTradeSizeError(f"Sell percentage must be in (0, 100], got {percentage}")
        slippage_bps, priority_fee_sol = self._with_defaults(slippage_bps, priority_fee_sol)

        async with self._wallet_guard(wallet.address):
            holding = await self._balances.get_token_balance(wallet.address, token_address)
            if holding.is_empty:
                raise NoTokensHeldError(token_address)

            sell_amount = percentage_of(holding.amount, percentage)
            if sell_amount <= 0:
                raise DustAmountError(token_address, percentage)

            slippage = self.clamp_trade_slippage(slippage_bps)
            quote = await self._jupiter.get_quote(
                input_mint=token_address,
                output_mint=WSOL_MINT,
                amount=sell_amount,
                slippage_bps=slippage,
                platform_fee_bps=self._settings.platform_fee_bps,
            )
            self._require_route(quote, token_address)

            try:
                result = await self._executor.execute(
                    quote,
                    wallet,
                    priority_fee_sol,
                    platform_fee_bps=self._settings.platform_fee_bps,
                    fee_recipient=self._settings.platform_fee_account,
                )
            finally:
                self._balances.invalidate(wallet.address)

            decimals = holding.decimals
            if decimals is None:
                decimals = await self._balances.get_mint_decimals(token_address)

            tokens_sold = from_atomic(result.input_amount, decimals)
            proceeds_sol = lamports_to_sol(result.output_amount)
            buys = await self._history.buys_for_token(wallet.owner_id, token_address)
            pnl_sol = realized_pnl(proceeds_sol, tokens_sold, buys)
            sol_price = await self._jupiter.get_token_price(WSOL_MINT)

            record = TradeRecord(
                direction=SwapDirection.SELL,
                wallet_address=wallet.address,
                token_address=token_address,
                token_symbol=token_symbol or "",
                amount_sol=proceeds_sol,
                token_amount=tokens_sold,
                usd_value=proceeds_sol * sol_price if sol_price is not None else None,
                realized_pnl_sol=pnl_sol,
                realized_pnl_usd=pnl_sol * sol_price if sol_price is not None else None,
                tx_signature=result.tx_signature,
                fee_taken=result.platform_fee_amount,
            )
            await self._history.append(wallet.owner_id, record)

        logger.info(
            "sell_completed",
            wallet=wallet.address[:8],
            token=token_address[:8],
            percentage=percentage,
            proceeds_sol=record.amount_sol,
            realized_pnl_sol=record.realized_pnl_sol,
            signature=record.tx_signature[:16],
        )
        return record

    async def execute_intent(
        self,
        wallet: Wallet,
        intent: TradeIntent,
        slippage_bps: float | None = None,
        priority_fee_sol: float | None = None,
        token_symbol: str | None = None,
    ) -> TradeRecord:
        """Dispatch a validated intent to buy or sell."""
        if intent.direction == SwapDirection.BUY:
            return await self.buy(
                wallet,
                intent.amount_sol,
                intent.token_address,
                slippage_bps,
                priority_fee_sol,
                token_symbol,
            )
        return await self.sell(
            wallet,
            intent.percentage,
            intent.token_address,
            slippage_bps,
            priority_fee_sol,
            token_symbol,
        )

    @staticmethod
    def _require_route(quote: SwapQuote, token_address: str) -> None:
        if not quote.has_route:
            logger.info("quote_without_route", token=token_address[:8])
            raise NoRouteFoundError(f"Quote for {token_address} has no output amount")

    async def _output_decimals(self, quote: SwapQuote, mint: str) -> int:
        """Decimals for the bought token: quote, then chain, then the 9 fallback."""
        if quote.output_decimals is not None:
            return quote.output_decimals
        return await self._balances.get_mint_decimals(mint)


# Singleton
_orchestrator: TradeOrchestrator | None = None


def get_trade_orchestrator() -> TradeOrchestrator:
    """Get or create the trade orchestrator singleton with default collaborators."""
    global _orchestrator
    if _orchestrator is None:
        settings = get_jupiter_settings()
        jupiter = JupiterClient(settings)
        rpc = SolanaRPCClient()
        _orchestrator = TradeOrchestrator(
            jupiter=jupiter,
            executor=SwapExecutor(jupiter, rpc, settings),
            balances=BalanceService(
                rpc, BalanceCache(ttl_seconds=settings.balance_cache_ttl_seconds)
            ),
            history=InMemoryTradeHistory(max_records=settings.trade_history_limit),
            settings=settings,
        )
        logger.info("trade_orchestrator_initialized")
    return _orchestrator


def reset_trade_orchestrator() -> None:
    """Reset the singleton (for testing)."""
    global _orchestrator
    _orchestrator = None
