"""Unit tests for SolanaRPCClient.

Endpoint clients are replaced with mocks so no network is used.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from solana.rpc.core import RPCException
from solders.transaction_status import TransactionConfirmationStatus

from soltrader.core.exceptions import ExternalServiceError, TransactionRejectedError
from soltrader.services.solana.rpc_client import SolanaRPCClient

OWNER = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
SIGNATURE = "5VERv8NMvzbJMEkV8xnrLkEaWRtSz9CosKDYjCJjBRnbJLgp8uirBgmQpjKhoR4tjF3ZpRzrFmBV6UjKdiSZkQUW"
PRIMARY = "https://primary.test.local"
FALLBACK = "https://fallback.test.local"


@pytest.fixture
def endpoints() -> dict[str, MagicMock]:
    return {PRIMARY: MagicMock(), FALLBACK: MagicMock()}


@pytest.fixture
def rpc_client(endpoints) -> SolanaRPCClient:
    client = SolanaRPCClient(urls=[PRIMARY, FALLBACK])
    client._clients.update(endpoints)
    return client


class _SignedTransaction:
    def __bytes__(self) -> bytes:
        return b"\x01signed"


def _token_account(amount: str, decimals: int) -> MagicMock:
    account = MagicMock()
    account.account.data.parsed = {
        "info": {"tokenAmount": {"amount": amount, "decimals": decimals}}
    }
    return account


class TestEndpointRotation:
    """Tests for fallback endpoint rotation on reads."""

    @pytest.mark.asyncio
    async def test_primary_used_when_healthy(self, rpc_client, endpoints):
        endpoints[PRIMARY].get_balance = AsyncMock(return_value=MagicMock(value=2_500_000_000))

        assert await rpc_client.get_balance(OWNER) == 2_500_000_000
        assert rpc_client.current_url == PRIMARY

    @pytest.mark.asyncio
    async def test_rotates_to_fallback_on_failure(self, rpc_client, endpoints):
        endpoints[PRIMARY].get_balance = AsyncMock(side_effect=httpx.ConnectError("down"))
        endpoints[FALLBACK].get_balance = AsyncMock(return_value=MagicMock(value=7))

        assert await rpc_client.get_balance(OWNER) == 7
        assert rpc_client.current_url == FALLBACK

    @pytest.mark.asyncio
    async def test_all_endpoints_failing_raises(self, rpc_client, endpoints):
        for endpoint in endpoints.values():
            endpoint.get_balance = AsyncMock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(ExternalServiceError) as exc_info:
            await rpc_client.get_balance(OWNER)

        assert exc_info.value.service == "solana-rpc"
        for endpoint in endpoints.values():
            endpoint.get_balance.assert_awaited_once()

    def test_endpoints_default_to_settings(self):
        client = SolanaRPCClient()

        assert client.current_url == "https://rpc.test.local"
        assert client._urls == ["https://rpc.test.local", "https://fallback.test.local"]


class TestTokenReads:
    """Tests for SPL balance and mint reads."""

    @pytest.mark.asyncio
    async def test_token_balance_sums_accounts(self, rpc_client, endpoints):
        endpoints[PRIMARY].get_token_accounts_by_owner_json_parsed = AsyncMock(
            return_value=MagicMock(
                value=[_token_account("1500000", 6), _token_account("500000", 6)]
            )
        )

        balance = await rpc_client.get_token_balance(OWNER, MINT)

        assert balance.amount == 2_000_000
        assert balance.decimals == 6
        assert balance.ui_amount == 2.0

    @pytest.mark.asyncio
    async def test_no_accounts_is_empty(self, rpc_client, endpoints):
        endpoints[PRIMARY].get_token_accounts_by_owner_json_parsed = AsyncMock(
            return_value=MagicMock(value=[])
        )

        balance = await rpc_client.get_token_balance(OWNER, MINT)

        assert balance.is_empty
        assert balance.decimals is None

    @pytest.mark.asyncio
    async def test_mint_decimals(self, rpc_client, endpoints):
        endpoints[PRIMARY].get_token_supply = AsyncMock(
            return_value=MagicMock(value=MagicMock(decimals=6))
        )

        assert await rpc_client.get_mint_decimals(MINT) == 6


class TestSendTransaction:
    @pytest.mark.asyncio
    async def test_returns_signature(self, rpc_client, endpoints):
        endpoints[PRIMARY].send_raw_transaction = AsyncMock(
            return_value=MagicMock(value=SIGNATURE)
        )
        transaction = _SignedTransaction()

        signature = await rpc_client.send_transaction(transaction, max_retries=3)

        assert signature == SIGNATURE
        opts = endpoints[PRIMARY].send_raw_transaction.call_args.kwargs["opts"]
        assert opts.skip_preflight is False
        assert opts.max_retries == 3

    @pytest.mark.asyncio
    async def test_failure_is_not_retried(self, rpc_client, endpoints):
        endpoints[PRIMARY].send_raw_transaction = AsyncMock(
            side_effect=httpx.ConnectError("down")
        )
        endpoints[FALLBACK].send_raw_transaction = AsyncMock()
        transaction = _SignedTransaction()

        with pytest.raises(ExternalServiceError):
            await rpc_client.send_transaction(transaction, max_retries=3)

        endpoints[FALLBACK].send_raw_transaction.assert_not_awaited()
        assert rpc_client.current_url == FALLBACK

    @pytest.mark.asyncio
    async def test_transport_failure_is_not_a_rejection(self, rpc_client, endpoints):
        endpoints[PRIMARY].send_raw_transaction = AsyncMock(
            side_effect=httpx.ReadTimeout("timed out")
        )

        with pytest.raises(ExternalServiceError) as exc_info:
            await rpc_client.send_transaction(_SignedTransaction(), max_retries=3)

        assert not isinstance(exc_info.value, TransactionRejectedError)

    @pytest.mark.asyncio
    async def test_preflight_rejection(self, rpc_client, endpoints):
        endpoints[PRIMARY].send_raw_transaction = AsyncMock(
            side_effect=RPCException({"code": -32002, "message": "Transaction simulation failed"})
        )

        with pytest.raises(TransactionRejectedError):
            await rpc_client.send_transaction(_SignedTransaction(), max_retries=3)

        assert rpc_client.current_url == PRIMARY


class TestWaitForConfirmation:
    """Tests for non-blocking confirmation polling."""

    @pytest.mark.asyncio
    async def test_returns_none_when_confirmed(self, rpc_client):
        confirmed = MagicMock(err=None, confirmation_status=TransactionConfirmationStatus.Confirmed)
        rpc_client.get_signature_status = AsyncMock(side_effect=[None, confirmed])

        result = await rpc_client.wait_for_confirmation(SIGNATURE, timeout_seconds=5, poll_interval=0)

        assert result is None
        assert rpc_client.get_signature_status.await_count == 2

    @pytest.mark.asyncio
    async def test_returns_chain_error(self, rpc_client):
        failed = MagicMock(
            err={"InstructionError": [0, {"Custom": 1}]},
            confirmation_status=TransactionConfirmationStatus.Confirmed,
        )
        rpc_client.get_signature_status = AsyncMock(return_value=failed)

        result = await rpc_client.wait_for_confirmation(SIGNATURE, timeout_seconds=5, poll_interval=0)

        assert result == {"InstructionError": [0, {"Custom": 1}]}

    @pytest.mark.asyncio
    async def test_poll_errors_are_tolerated(self, rpc_client):
        confirmed = MagicMock(err=None, confirmation_status=TransactionConfirmationStatus.Finalized)
        rpc_client.get_signature_status = AsyncMock(
            side_effect=[ExternalServiceError(service="solana-rpc", message="down"), confirmed]
        )

        assert await rpc_client.wait_for_confirmation(SIGNATURE, 5, poll_interval=0) is None

    @pytest.mark.asyncio
    async def test_times_out(self, rpc_client):
        processed = MagicMock(err=None, confirmation_status=TransactionConfirmationStatus.Processed)
        rpc_client.get_signature_status = AsyncMock(return_value=processed)

        with pytest.raises(TimeoutError):
            await rpc_client.wait_for_confirmation(SIGNATURE, timeout_seconds=0.05, poll_interval=0.01)
