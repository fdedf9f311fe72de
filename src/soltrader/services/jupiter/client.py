"""Jupiter V6 API client.

Provides:
- Quote fetching with best route (single attempt, no retry)
- Swap transaction building
- USD price lookup with a short TTL cache

Signing and submission live in SwapExecutor; this client never sees keys.
"""

from __future__ import annotations

import time
from typing import Any

import structlog
from cachetools import TTLCache

from soltrader.config.jupiter_settings import JupiterSettings, get_jupiter_settings
from soltrader.config.settings import get_settings
from soltrader.constants.trading import QUOTE_MAX_SLIPPAGE_BPS, QUOTE_MIN_SLIPPAGE_BPS
from soltrader.core.exceptions import (
    CircuitBreakerOpenError,
    ExternalServiceError,
    NoRouteFoundError,
    QuoteUnavailableError,
    SwapBuildFailedError,
)
from soltrader.core.wallet.validator import require_valid_address
from soltrader.models.trade import SwapQuote
from soltrader.services.base import BaseAPIClient

logger = structlog.get_logger(__name__)

NO_ROUTE_MARKERS = ("COULD_NOT_FIND_ANY_ROUTE", "NO_ROUTES_FOUND", "no route")


def clamp_quote_slippage(slippage_bps: float) -> int:
    """Clamp slippage into the range the quote endpoint accepts (1-10000 bps)."""
    return int(max(QUOTE_MIN_SLIPPAGE_BPS, min(QUOTE_MAX_SLIPPAGE_BPS, round(slippage_bps))))


def _is_no_route(text: str | None) -> bool:
    if not text:
        return False
    lowered = text.lower()
    return any(marker.lower() in lowered for marker in NO_ROUTE_MARKERS)


class JupiterClient(BaseAPIClient):
    """Jupiter V6 API client for quotes, swap building, and prices."""

    def __init__(self, settings: JupiterSettings | None = None) -> None:
        self._settings = settings or get_jupiter_settings()
        app_settings = get_settings()
        super().__init__(
            service="jupiter",
            base_url=self._settings.jupiter_api_url,
            timeout=self._settings.quote_timeout_seconds,
            headers={"Content-Type": "application/json"},
            circuit_breaker_threshold=app_settings.circuit_breaker_threshold,
            circuit_breaker_cooldown=app_settings.circuit_breaker_cooldown,
        )
        self._price_api = BaseAPIClient(
            service="jupiter-price",
            base_url=self._settings.jupiter_price_api_url,
            timeout=self._settings.quote_timeout_seconds,
            circuit_breaker_threshold=app_settings.circuit_breaker_threshold,
            circuit_breaker_cooldown=app_settings.circuit_breaker_cooldown,
        )
        self._price_cache: TTLCache = TTLCache(
            maxsize=1000, ttl=self._settings.price_cache_ttl_seconds
        )

    async def close(self) -> None:
        """Close both HTTP clients."""
        await super().close()
        await self._price_api.close()

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
        platform_fee_bps: int = 0,
    ) -> SwapQuote:
        """Get swap quote from Jupiter V6 API.

        Args:
            input_mint: Input token mint address
            output_mint: Output token mint address
            amount: Amount in atomic units of the input mint
            slippage_bps: Slippage tolerance; clamped into 1-10000
            platform_fee_bps: Platform fee to include in the quote

        Returns:
            SwapQuote with best route

        Raises:
            ValueError: If amount is not positive.
            InvalidAddressError: If either mint is malformed.
            NoRouteFoundError: If no route exists for the pair.
            QuoteUnavailableError: On any other upstream failure.
        """
        if amount <= 0:
            raise ValueError(f"Quote amount must be positive, got {amount}")
        require_valid_address(input_mint, field="input mint")
        require_valid_address(output_mint, field="output mint")

        slippage = clamp_quote_slippage(slippage_bps)
        params: dict[str, Any] = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": slippage,
        }
        if platform_fee_bps > 0:
            params["platformFeeBps"] = platform_fee_bps

        logger.debug(
            "jupiter_quote_request",
            input_mint=input_mint[:8],
            output_mint=output_mint[:8],
            amount=amount,
            slippage_bps=slippage,
        )

        start = time.perf_counter()
        try:
            response = await self.get("/quote", params=params, max_retries=1)
            data = response.json()
        except ExternalServiceError as e:
            if _is_no_route(e.body):
                logger.info("jupiter_no_route", output_mint=output_mint[:8])
                raise NoRouteFoundError(f"No route: {e.body}") from e
            logger.error("jupiter_quote_http_error", status=e.status_code, body=e.body)
            raise QuoteUnavailableError(f"Quote failed: {e}") from e
        except CircuitBreakerOpenError as e:
            raise QuoteUnavailableError(str(e)) from e
        except ValueError as e:
            raise QuoteUnavailableError(f"Quote response is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise QuoteUnavailableError("Quote response has unexpected format")

        if data.get("error"):
            error = str(data["error"])
            if _is_no_route(error) or _is_no_route(str(data.get("errorCode", ""))):
                raise NoRouteFoundError(f"No route: {error}")
            raise QuoteUnavailableError(f"Quote error: {error}")

        if not data.get("outAmount"):
            logger.info("jupiter_quote_missing_output", output_mint=output_mint[:8])
            raise NoRouteFoundError("Quote response has no outAmount")

        quote = self._parse_quote(data, slippage)
        logger.info(
            "jupiter_quote_received",
            in_amount=quote.in_amount,
            out_amount=quote.out_amount,
            price_impact=quote.price_impact_pct,
            route=quote.route_labels,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return quote

    @staticmethod
    def _parse_quote(data: dict[str, Any], slippage: int) -> SwapQuote:
        try:
            platform_fee = data.get("platformFee") or {}
            out_amount = int(data["outAmount"])
            return SwapQuote(
                input_mint=data["inputMint"],
                output_mint=data["outputMint"],
                in_amount=int(data["inAmount"]),
                out_amount=out_amount,
                other_amount_threshold=int(data.get("otherAmountThreshold") or out_amount),
                slippage_bps=int(data.get("slippageBps", slippage)),
                price_impact_pct=float(data.get("priceImpactPct") or 0),
                platform_fee_amount=int(platform_fee.get("amount") or 0),
                platform_fee_bps=int(platform_fee.get("feeBps") or 0),
                route_plan=data.get("routePlan") or [],
                output_decimals=data.get("outputDecimals"),
                raw=data,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise QuoteUnavailableError(f"Malformed quote response: {e}") from e

    async def build_swap_transaction(
        self,
        quote: SwapQuote,
        user_public_key: str,
        priority_fee_lamports: int,
        fee_account: str | None = None,
    ) -> str:
        """Build an unsigned swap transaction from a quote.

        Args:
            quote: SwapQuote from get_quote()
            user_public_key: Trader's wallet public key (fee payer)
            priority_fee_lamports: Prioritization fee in lamports
            fee_account: Token account receiving the platform fee

        Returns:
            Base64-encoded unsigned VersionedTransaction

        Raises:
            SwapBuildFailedError: On upstream failure or missing payload.
        """
        payload: dict[str, Any] = {
            "quoteResponse": quote.raw,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": True,
            "dynamicComputeUnitLimit": True,
            "prioritizationFeeLamports": priority_fee_lamports,
        }
        if fee_account:
            payload["feeAccount"] = fee_account

        try:
            response = await self.post(
                "/swap",
                json=payload,
                timeout=self._settings.swap_timeout_seconds,
                max_retries=1,
            )
            data = response.json()
        except (ExternalServiceError, CircuitBreakerOpenError) as e:
            logger.error("jupiter_swap_build_error", error=str(e))
            raise SwapBuildFailedError(f"Swap build failed: {e}") from e
        except ValueError as e:
            raise SwapBuildFailedError(f"Swap response is not JSON: {e}") from e

        if not isinstance(data, dict) or data.get("error"):
            error = data.get("error") if isinstance(data, dict) else data
            raise SwapBuildFailedError(f"Swap build error: {error}")

        swap_transaction = data.get("swapTransaction")
        if not swap_transaction:
            raise SwapBuildFailedError("Swap response has no swapTransaction")

        logger.debug(
            "jupiter_swap_built",
            last_valid_block_height=data.get("lastValidBlockHeight"),
            priority_fee_lamports=data.get("prioritizationFeeLamports", priority_fee_lamports),
        )
        return swap_transaction

    async def get_token_price(self, mint: str) -> float | None:
        """Get USD price for a mint, cached for a short TTL.

        Single attempt: the price is read after a swap lands, so a slow
        price API must not hold up the trade record.

        Returns:
            Price in USD, or None when unavailable. Prices are advisory,
            so failures are logged, not raised.
        """
        cached = self._price_cache.get(mint)
        if cached is not None:
            return cached

        try:
            response = await self._price_api.get(
                "/price", params={"ids": mint}, max_retries=1
            )
            entry = (response.json().get("data") or {}).get(mint) or {}
            price = float(entry["price"]) if entry.get("price") is not None else None
        except (
            ExternalServiceError,
            CircuitBreakerOpenError,
            AttributeError,
            KeyError,
            TypeError,
            ValueError,
        ) as e:
            logger.warning("jupiter_price_unavailable", mint=mint[:8], error=str(e))
            return None

        if price is None:
            logger.info("jupiter_price_missing", mint=mint[:8])
            return None

        self._price_cache[mint] = price
        return price
