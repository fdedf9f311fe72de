"""DexScreener API client for token market data.

API Documentation: https://docs.dexscreener.com/api/reference
Rate Limits: ~300 requests/minute (no auth required)
"""

import structlog

from soltrader.config.settings import Settings, get_settings
from soltrader.core.exceptions import CircuitBreakerOpenError, ExternalServiceError
from soltrader.services.base import BaseAPIClient
from soltrader.services.dexscreener.models import TokenPair, TokenPairsResponse

log = structlog.get_logger(__name__)


class DexScreenerClient(BaseAPIClient):
    """DexScreener API client for token market data.

    Inherits from BaseAPIClient to provide retry logic and circuit breaker
    protection for API calls.

    Endpoints used:
        - GET /latest/dex/tokens/{address} - Token pair data

    Example:
        client = DexScreenerClient()
        try:
            pair = await client.fetch_trading_pair(mint)
        finally:
            await client.close()
    """

    BASE_URL = "https://api.dexscreener.com"
    SOLANA_CHAIN_ID = "solana"
    DEFAULT_TIMEOUT = 10.0

    def __init__(self, base_url: str = BASE_URL, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        super().__init__(
            service="dexscreener",
            base_url=base_url,
            timeout=self.DEFAULT_TIMEOUT,
            circuit_breaker_threshold=settings.circuit_breaker_threshold,
            circuit_breaker_cooldown=settings.circuit_breaker_cooldown,
        )

    async def fetch_token_pairs(self, address: str) -> list[TokenPair]:
        """Fetch all Solana pairs for a token.

        Args:
            address: Solana token mint address.

        Returns:
            Solana pairs in upstream order (possibly empty).

        Raises:
            ExternalServiceError: If the request or response parsing fails.
        """
        log.debug("fetching_token_pairs", token=address[:8])

        try:
            response = await self.get(f"/latest/dex/tokens/{address}")
            pairs_response = TokenPairsResponse.model_validate(response.json())
        except (ExternalServiceError, CircuitBreakerOpenError):
            raise
        except Exception as e:
            raise ExternalServiceError(
                service=self.service,
                message=f"Failed to parse token pairs: {e}",
            ) from e

        pairs = pairs_response.pairs or []
        solana_pairs = [pair for pair in pairs if pair.chain_id == self.SOLANA_CHAIN_ID]

        log.debug(
            "token_pairs_fetched",
            token=address[:8],
            total=len(pairs),
            solana_count=len(solana_pairs),
        )
        return solana_pairs

    async def fetch_trading_pair(self, address: str) -> TokenPair | None:
        """Fetch the deepest Solana pool for a token.

        Args:
            address: Solana token mint address.

        Returns:
            The pair with the highest USD liquidity, or None when no pool
            exists or the lookup failed. Token analysis is advisory, so
            failures are logged rather than raised.
        """
        try:
            pairs = await self.fetch_token_pairs(address)
        except (ExternalServiceError, CircuitBreakerOpenError) as e:
            log.warning("token_pairs_fetch_failed", token=address[:8], error=str(e))
            return None

        if not pairs:
            log.info("token_pairs_empty", token=address[:8])
            return None

        # sorted() is stable: equal liquidity keeps upstream order
        best = sorted(pairs, key=lambda pair: pair.liquidity_usd, reverse=True)[0]

        log.info(
            "trading_pair_selected",
            token=address[:8],
            dex=best.dex_id,
            pair=best.pair_address[:8],
            liquidity_usd=round(best.liquidity_usd, 2),
        )
        return best
