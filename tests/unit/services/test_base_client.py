"""Unit tests for BaseAPIClient and CircuitBreaker."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
import respx
from httpx import ConnectError, Response

from soltrader.core.exceptions import CircuitBreakerOpenError, ExternalServiceError
from soltrader.services.base import BaseAPIClient, CircuitBreaker, CircuitState

BASE_URL = "https://api.test.local"


class TestCircuitBreaker:
    """Tests for circuit breaker state transitions."""

    def test_opens_at_threshold(self):
        breaker = CircuitBreaker(name="test", failure_threshold=3)

        breaker.record_failure()
        breaker.record_failure()
        assert breaker.can_execute() is True

        breaker.record_failure()
        assert breaker.state == CircuitState.OPEN
        assert breaker.can_execute() is False

    def test_half_open_after_cooldown(self):
        breaker = CircuitBreaker(name="test", failure_threshold=1, cooldown_seconds=30)
        breaker.record_failure()
        breaker.last_failure_time = datetime.now(UTC) - timedelta(seconds=31)

        assert breaker.can_execute() is True
        assert breaker.state == CircuitState.HALF_OPEN

    def test_half_open_failure_reopens(self):
        breaker = CircuitBreaker(name="test", failure_threshold=5)
        breaker.state = CircuitState.HALF_OPEN

        breaker.record_failure()

        assert breaker.state == CircuitState.OPEN

    def test_success_closes(self):
        breaker = CircuitBreaker(name="test", failure_threshold=1)
        breaker.record_failure()

        breaker.record_success()

        assert breaker.state == CircuitState.CLOSED
        assert breaker.failure_count == 0

    def test_raise_if_open(self):
        breaker = CircuitBreaker(name="jupiter", failure_threshold=1)
        breaker.record_failure()

        with pytest.raises(CircuitBreakerOpenError, match="jupiter"):
            breaker.raise_if_open()


class TestBaseAPIClient:
    """Tests for request retry and error mapping."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_success(self):
        respx.get(f"{BASE_URL}/ping").mock(return_value=Response(200, json={"ok": True}))

        client = BaseAPIClient(service="test", base_url=BASE_URL)
        try:
            response = await client.get("/ping")

            assert response.json() == {"ok": True}
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_client_error_not_retried(self):
        route = respx.get(f"{BASE_URL}/bad").mock(
            return_value=Response(400, text='{"error":"bad input"}')
        )

        client = BaseAPIClient(service="test", base_url=BASE_URL)
        try:
            with pytest.raises(ExternalServiceError) as exc_info:
                await client.get("/bad", max_retries=3)

            assert route.call_count == 1
            assert exc_info.value.status_code == 400
            assert "bad input" in exc_info.value.body
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_retried_then_succeeds(self):
        route = respx.get(f"{BASE_URL}/flaky").mock(
            side_effect=[Response(503), Response(200, json={"ok": True})]
        )

        client = BaseAPIClient(service="test", base_url=BASE_URL)
        try:
            with patch("soltrader.services.base.asyncio.sleep", new_callable=AsyncMock):
                response = await client.get("/flaky", max_retries=3)

            assert response.status_code == 200
            assert route.call_count == 2
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_single_attempt_when_retries_disabled(self):
        route = respx.post(f"{BASE_URL}/swap").mock(return_value=Response(500))

        client = BaseAPIClient(service="test", base_url=BASE_URL)
        try:
            with pytest.raises(ExternalServiceError) as exc_info:
                await client.post("/swap", json={}, max_retries=1)

            assert route.call_count == 1
            assert exc_info.value.status_code == 500
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_connection_errors_open_circuit(self):
        respx.get(f"{BASE_URL}/down").mock(side_effect=ConnectError("refused"))

        client = BaseAPIClient(service="test", base_url=BASE_URL, circuit_breaker_threshold=2)
        try:
            for _ in range(2):
                with pytest.raises(ExternalServiceError):
                    await client.get("/down", max_retries=1)

            with pytest.raises(CircuitBreakerOpenError):
                await client.get("/down", max_retries=1)
        finally:
            await client.close()
