"""Solana RPC client with fallback endpoints.

Wraps solana-py's AsyncClient. Read calls rotate to the next configured
endpoint on failure and try each endpoint once before giving up; the
rotation sticks, so later calls start from the endpoint that last worked.

Transaction submission is never retried across endpoints here: the RPC
node's own ``max_retries`` covers transient rebroadcast.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
import structlog
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException
from solana.rpc.types import TokenAccountOpts, TxOpts
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction
from solders.transaction_status import TransactionConfirmationStatus

from soltrader.config.settings import Settings, get_settings
from soltrader.core.exceptions import ExternalServiceError, TransactionRejectedError
from soltrader.services.solana.models import TokenBalance

log = structlog.get_logger(__name__)

T = TypeVar("T")

RPC_ERRORS = (SolanaRpcException, RPCException, httpx.HTTPError, OSError)

CONFIRMED_STATUSES = (
    TransactionConfirmationStatus.Confirmed,
    TransactionConfirmationStatus.Finalized,
)


class SolanaRPCClient:
    """Client for Solana RPC operations with endpoint rotation.

    Example:
        client = SolanaRPCClient()
        lamports = await client.get_balance("wallet_address")
        await client.close()
    """

    def __init__(
        self,
        urls: list[str] | None = None,
        commitment: str | None = None,
        timeout: float | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._urls = list(urls or settings.rpc_urls)
        if not self._urls:
            raise ValueError("At least one RPC URL is required")
        self._commitment = Commitment(commitment or settings.rpc_commitment)
        self._timeout = timeout or settings.rpc_timeout_seconds
        self._index = 0
        self._clients: dict[str, AsyncClient] = {}

    @property
    def current_url(self) -> str:
        return self._urls[self._index]

    def _client(self) -> AsyncClient:
        url = self.current_url
        if url not in self._clients:
            self._clients[url] = AsyncClient(
                url, commitment=self._commitment, timeout=self._timeout
            )
        return self._clients[url]

    def _rotate(self) -> None:
        previous = self.current_url
        self._index = (self._index + 1) % len(self._urls)
        if len(self._urls) > 1:
            log.warning("solana_rpc_rotated", previous=previous, current=self.current_url)

    async def _read(self, operation: str, call: Callable[[AsyncClient], Awaitable[T]]) -> T:
        """Run a read-only call, rotating endpoints on failure."""
        last_error: Exception | None = None
        for _ in range(len(self._urls)):
            try:
                return await call(self._client())
            except RPC_ERRORS as e:
                last_error = e
                log.warning(
                    "solana_rpc_call_failed",
                    operation=operation,
                    endpoint=self.current_url,
                    error=str(e),
                )
                self._rotate()

        raise ExternalServiceError(
            service="solana-rpc",
            message=f"{operation} failed on all endpoints: {last_error}",
        )

    async def get_balance(self, address: str) -> int:
        """Get SOL balance in lamports."""
        pubkey = Pubkey.from_string(address)
        response = await self._read(
            "get_balance", lambda client: client.get_balance(pubkey, commitment=self._commitment)
        )
        return int(response.value)

    async def get_token_balance(self, owner: str, mint: str) -> TokenBalance:
        """Get the owner's total balance for one SPL mint.

        Args:
            owner: Wallet public key.
            mint: Token mint address.

        Returns:
            TokenBalance summed across all of the owner's accounts for the mint.
        """
        owner_key = Pubkey.from_string(owner)
        opts = TokenAccountOpts(mint=Pubkey.from_string(mint))
        response = await self._read(
            "get_token_accounts_by_owner",
            lambda client: client.get_token_accounts_by_owner_json_parsed(
                owner_key, opts, commitment=self._commitment
            ),
        )

        amount = 0
        decimals: int | None = None
        for account in response.value:
            try:
                token_amount = account.account.data.parsed["info"]["tokenAmount"]
                amount += int(token_amount["amount"])
                decimals = int(token_amount["decimals"])
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                log.warning(
                    "token_account_parse_error",
                    account=str(account.pubkey)[:8],
                    error=str(e),
                )

        return TokenBalance(owner=owner, mint_address=mint, amount=amount, decimals=decimals)

    async def get_mint_decimals(self, mint: str) -> int:
        """Get a mint's decimals from its supply info."""
        mint_key = Pubkey.from_string(mint)
        response = await self._read(
            "get_token_supply",
            lambda client: client.get_token_supply(mint_key, commitment=self._commitment),
        )
        return int(response.value.decimals)

    async def send_transaction(self, transaction: VersionedTransaction, max_retries: int) -> str:
        """Submit a signed transaction with preflight simulation.

        Returns:
            Transaction signature (base58).

        Raises:
            TransactionRejectedError: If the node rejects it in preflight.
            ExternalServiceError: If the submission fails in transport.
        """
        opts = TxOpts(
            skip_preflight=False,
            preflight_commitment=self._commitment,
            max_retries=max_retries,
        )
        try:
            response = await self._client().send_raw_transaction(bytes(transaction), opts=opts)
        except RPCException as e:
            log.error("solana_transaction_rejected", endpoint=self.current_url, error=str(e))
            raise TransactionRejectedError(
                service="solana-rpc", message=f"Transaction rejected: {e}"
            ) from e
        except RPC_ERRORS as e:
            log.error("solana_send_transaction_failed", endpoint=self.current_url, error=str(e))
            # Start the next submission from a different endpoint
            self._rotate()
            raise ExternalServiceError(
                service="solana-rpc", message=f"send_transaction failed: {e}"
            ) from e
        return str(response.value)

    async def get_signature_status(self, signature: str) -> Any:
        """Get the status of one signature, or None if the node has not seen it."""
        sig = Signature.from_string(signature)
        response = await self._read(
            "get_signature_statuses", lambda client: client.get_signature_statuses([sig])
        )
        return response.value[0] if response.value else None

    async def wait_for_confirmation(
        self,
        signature: str,
        timeout_seconds: float,
        poll_interval: float = 0.5,
    ) -> Any:
        """Poll until the transaction is confirmed or reports an error.

        The wait yields to the event loop between polls and is bounded by
        ``asyncio.wait_for``.

        Returns:
            The chain's error payload, or None if the transaction succeeded.

        Raises:
            TimeoutError: If the transaction is not confirmed in time.
        """

        async def poll() -> Any:
            while True:
                try:
                    status = await self.get_signature_status(signature)
                except ExternalServiceError as e:
                    log.debug("signature_status_poll_failed", error=str(e))
                    status = None

                if status is not None:
                    if status.err is not None:
                        return status.err
                    if status.confirmation_status in CONFIRMED_STATUSES:
                        return None

                await asyncio.sleep(poll_interval)

        return await asyncio.wait_for(poll(), timeout=timeout_seconds)

    async def close(self) -> None:
        """Close every endpoint connection."""
        for client in self._clients.values():
            await client.close()
        self._clients.clear()
        log.debug("solana_rpc_client_closed")
