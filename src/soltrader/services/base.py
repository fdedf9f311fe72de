"""Base HTTP client with circuit breaker and optional retry.

This module provides:
- CircuitState enum for circuit breaker states
- CircuitBreaker dataclass for tracking consecutive upstream failures
- BaseAPIClient for making resilient HTTP requests

Market-data calls use the default retry budget. Trading calls (quote, swap
build) pass ``max_retries=1`` since retry policy belongs to the caller.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

import httpx
import structlog

from soltrader.core.exceptions import CircuitBreakerOpenError, ExternalServiceError

log = structlog.get_logger(__name__)

MAX_ERROR_BODY_CHARS = 300


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation, requests allowed
    OPEN = "open"  # Circuit tripped, requests blocked
    HALF_OPEN = "half_open"  # Testing if service recovered


@dataclass
class CircuitBreaker:
    """Circuit breaker for protecting against cascading failures.

    Tracks consecutive failures and opens the circuit when threshold is reached.
    After cooldown period, allows a single test request (half-open state).

    Attributes:
        name: Service name used in log events.
        failure_threshold: Number of consecutive failures before opening circuit.
        cooldown_seconds: Seconds to wait before half-open test.
    """

    name: str = "http"
    failure_threshold: int = 5
    cooldown_seconds: int = 30
    failure_count: int = field(default=0, init=False)
    last_failure_time: datetime | None = field(default=None, init=False)
    state: CircuitState = field(default=CircuitState.CLOSED, init=False)

    def record_success(self) -> None:
        """Reset failure count and close the circuit."""
        if self.state != CircuitState.CLOSED:
            log.info("circuit_breaker_closed", service=self.name)
        self.failure_count = 0
        self.state = CircuitState.CLOSED

    def record_failure(self) -> None:
        """Count a failure; open the circuit at threshold or on a half-open failure."""
        self.failure_count += 1
        self.last_failure_time = datetime.now(UTC)

        if self.state == CircuitState.HALF_OPEN:
            self.state = CircuitState.OPEN
            log.warning(
                "circuit_breaker_reopened",
                service=self.name,
                failure_count=self.failure_count,
            )
        elif self.failure_count >= self.failure_threshold:
            self.state = CircuitState.OPEN
            log.warning(
                "circuit_breaker_opened",
                service=self.name,
                failure_count=self.failure_count,
                threshold=self.failure_threshold,
            )

    def can_execute(self) -> bool:
        """Check if a request can be executed.

        State transitions:
            - CLOSED: Always returns True
            - OPEN: False until cooldown elapsed, then transitions to HALF_OPEN
            - HALF_OPEN: Returns True (allows test request)
        """
        if self.state == CircuitState.CLOSED:
            return True

        if self.state == CircuitState.OPEN:
            if self.last_failure_time is None:
                return False

            elapsed = datetime.now(UTC) - self.last_failure_time
            if elapsed > timedelta(seconds=self.cooldown_seconds):
                self.state = CircuitState.HALF_OPEN
                log.info("circuit_breaker_half_open", service=self.name)
                return True
            return False

        return True

    def raise_if_open(self) -> None:
        """Raise CircuitBreakerOpenError if requests are currently blocked."""
        if not self.can_execute():
            raise CircuitBreakerOpenError(
                f"Circuit breaker for {self.name} is open. Next retry in "
                f"{self._time_until_half_open():.1f} seconds."
            )

    def _time_until_half_open(self) -> float:
        if self.last_failure_time is None:
            return 0.0

        elapsed = datetime.now(UTC) - self.last_failure_time
        return max(0.0, self.cooldown_seconds - elapsed.total_seconds())


class BaseAPIClient:
    """Base API client with retry and circuit breaker support.

    Provides resilient HTTP requests with:
    - Lazy client initialization (created on first request)
    - Retry with exponential backoff on 429/5xx/transport errors
    - Circuit breaker pattern for failure protection
    - Proper resource cleanup

    Example:
        client = BaseAPIClient(service="jupiter", base_url="https://quote-api.jup.ag/v6")
        response = await client.get("/quote", params={...}, max_retries=1)
        await client.close()
    """

    def __init__(
        self,
        service: str,
        base_url: str,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        circuit_breaker_threshold: int = 5,
        circuit_breaker_cooldown: int = 30,
    ) -> None:
        """Initialize BaseAPIClient.

        Args:
            service: Service name used in errors and log events.
            base_url: Base URL for all requests.
            timeout: Request timeout in seconds (default: 30).
            headers: Default headers for all requests.
            circuit_breaker_threshold: Failures before circuit opens (default: 5).
            circuit_breaker_cooldown: Seconds before half-open (default: 30).
        """
        self.service = service
        self.base_url = base_url
        self.timeout = timeout
        self.headers = headers or {}
        self._client: httpx.AsyncClient | None = None
        self._circuit_breaker = CircuitBreaker(
            name=service,
            failure_threshold=circuit_breaker_threshold,
            cooldown_seconds=circuit_breaker_cooldown,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
            )
            log.debug("httpx_client_created", service=self.service, base_url=self.base_url)
        return self._client

    async def close(self) -> None:
        """Close the httpx client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.debug("httpx_client_closed", service=self.service)

    async def _request(
        self,
        method: str,
        path: str,
        max_retries: int = 3,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make an HTTP request with retry and circuit breaker.

        Args:
            method: HTTP method.
            path: Request path (appended to base_url).
            max_retries: Total attempts; 1 disables retry.
            **kwargs: Additional arguments passed to httpx.request.

        Returns:
            httpx.Response on success.

        Raises:
            CircuitBreakerOpenError: If circuit breaker is open.
            ExternalServiceError: On a 4xx response or when attempts run out.
        """
        self._circuit_breaker.raise_if_open()

        client = await self._get_client()
        last_error: Exception | None = None
        last_status: int | None = None
        last_body: str | None = None

        for attempt in range(max_retries):
            try:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                self._circuit_breaker.record_success()
                return response

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                body = e.response.text[:MAX_ERROR_BODY_CHARS]

                # 4xx errors (except 429) - the request itself is wrong, no retry
                if 400 <= status_code < 500 and status_code != 429:
                    log.warning(
                        "request_client_error",
                        service=self.service,
                        method=method,
                        path=path,
                        status_code=status_code,
                    )
                    raise ExternalServiceError(
                        service=self.service,
                        message=f"HTTP {status_code}",
                        status_code=status_code,
                        body=body,
                    ) from e

                self._circuit_breaker.record_failure()
                last_error, last_status, last_body = e, status_code, body
                log.warning(
                    "request_server_error",
                    service=self.service,
                    method=method,
                    path=path,
                    status_code=status_code,
                    attempt=attempt + 1,
                    max_retries=max_retries,
                )

            except httpx.RequestError as e:
                self._circuit_breaker.record_failure()
                last_error = e
                log.warning(
                    "request_connection_error",
                    service=self.service,
                    method=method,
                    path=path,
                    error=str(e),
                    attempt=attempt + 1,
                    max_retries=max_retries,
                )

            # Exponential backoff: 1s, 2s, 4s (capped)
            if attempt < max_retries - 1:
                await asyncio.sleep(min(2**attempt, 4))

        log.error(
            "request_attempts_exhausted",
            service=self.service,
            method=method,
            path=path,
            max_retries=max_retries,
        )
        raise ExternalServiceError(
            service=self.service,
            message=f"Request failed after {max_retries} attempt(s): {last_error}",
            status_code=last_status,
            body=last_body,
        )

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a GET request."""
        return await self._request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a POST request."""
        return await self._request("POST", path, **kwargs)
