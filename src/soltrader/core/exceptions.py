"""SolTrader exception hierarchy.

This module defines the base exception class and specialized exceptions
for different error categories across the application.

Trade errors carry a ``user_message`` meant to be shown verbatim by the
chat layer. Every kind maps to a distinct, actionable message.
"""

from typing import Any


class SolTraderError(Exception):
    """Base exception for all SolTrader errors.

    All custom exceptions in SolTrader should inherit from this class
    to enable consistent error handling and logging.
    """

    pass


class ExternalServiceError(SolTraderError):
    """Raised when an external service call fails.

    Use this for API errors from Jupiter, DexScreener, Solana RPC, etc.

    Attributes:
        service: Name of the external service that failed.
        status_code: HTTP status code if available, None otherwise.
        body: Truncated response body if available.

    Example:
        raise ExternalServiceError(service="jupiter", message="Rate limited", status_code=429)
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        self.body = body
        super().__init__(f"{service}: {message}")


class TransactionRejectedError(ExternalServiceError):
    """Raised when the RPC node rejects a transaction in preflight.

    A rejected transaction was never broadcast, unlike a transport failure
    during submission whose outcome is unknown.
    """


class CircuitBreakerOpenError(SolTraderError):
    """Raised when circuit breaker is open.

    Use this when an API client's circuit breaker has tripped due to
    consecutive failures and requests are being blocked.
    """

    pass


# =============================================================================
# Trade errors
# =============================================================================


class TradeError(SolTraderError):
    """Base class for errors that abort a buy or sell.

    Attributes:
        user_message: Human-readable explanation for the end user.
    """

    default_user_message = "Trade failed. Please try again."

    def __init__(self, message: str, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message or self.default_user_message


class InvalidAddressError(TradeError):
    """Raised when text supplied as an address is not a Solana public key."""

    def __init__(self, address: str | None, field: str = "address") -> None:
        self.address = address
        self.field = field
        super().__init__(
            f"Invalid {field}: {address!r}",
            user_message=f"That does not look like a valid Solana {field}.",
        )


class InvalidTradeSizeError(TradeError):
    """Raised when a buy amount or sell percentage is out of range."""

    default_user_message = (
        "Invalid trade size. Buy with a positive SOL amount "
        "or sell a percentage between 0 and 100."
    )


class InsufficientFundsError(TradeError):
    """Raised when the SOL balance cannot cover amount, priority fee and buffer.

    Attributes:
        have_sol: Balance observed at check time.
        need_sol: Amount required for the trade.
    """

    def __init__(self, have_sol: float, need_sol: float) -> None:
        self.have_sol = have_sol
        self.need_sol = need_sol
        super().__init__(
            f"Insufficient SOL balance: have {have_sol:.9f}, need {need_sol:.9f}",
            user_message=(
                f"Insufficient balance: you have {have_sol:.4f} SOL, "
                f"this trade needs {need_sol:.4f} SOL including fees."
            ),
        )


class NoTokensHeldError(TradeError):
    """Raised when a sell is requested for a token the wallet does not hold."""

    def __init__(self, token_address: str) -> None:
        self.token_address = token_address
        super().__init__(
            f"No balance held for token {token_address}",
            user_message="You don't hold any of this token.",
        )


class DustAmountError(TradeError):
    """Raised when the requested sell size rounds down to zero atomic units."""

    def __init__(self, token_address: str, percentage: float) -> None:
        self.token_address = token_address
        self.percentage = percentage
        super().__init__(
            f"Sell of {percentage}% of {token_address} rounds to zero",
            user_message="The amount to sell is too small. Try a larger percentage.",
        )


class QuoteUnavailableError(TradeError):
    """Raised when the aggregator cannot provide a quote."""

    default_user_message = "Could not get a price quote right now. Please retry."


class NoRouteFoundError(QuoteUnavailableError):
    """Raised when the aggregator has no route for the pair.

    Usually caused by a token with little or no liquidity.
    """

    default_user_message = (
        "No liquidity route found for this token. It may have low liquidity."
    )


class InvalidSignerError(TradeError):
    """Raised when the wallet cannot produce a usable keypair."""

    default_user_message = "Your wallet key could not be loaded. Re-import the wallet."


class SwapBuildFailedError(TradeError):
    """Raised when the aggregator fails to build the swap transaction."""

    default_user_message = "Could not build the swap transaction. Please retry."


class SubmissionFailedError(TradeError):
    """Raised when submitting the signed transaction fails.

    The default message covers preflight rejection. Transport failures pass
    UNCONFIRMED_SUBMISSION_MESSAGE since the node may have accepted the
    transaction before the connection dropped.
    """

    default_user_message = (
        "The transaction was rejected by the network. No funds were moved."
    )


UNCONFIRMED_SUBMISSION_MESSAGE = (
    "The network did not acknowledge the transaction, but it may still land. "
    "Check your wallet before retrying."
)


class ConfirmationTimeoutError(TradeError):
    """Raised when a broadcast transaction is not confirmed in time.

    The transaction may still land. The signature lets the user check it.

    Attributes:
        signature: Signature of the broadcast transaction.
        timeout_seconds: How long confirmation was awaited.
    """

    def __init__(self, signature: str, timeout_seconds: float) -> None:
        self.signature = signature
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Transaction {signature} not confirmed within {timeout_seconds}s",
            user_message=(
                "The transaction was sent but not confirmed in time. "
                f"Check its status on an explorer: {signature}"
            ),
        )


class OnChainFailureError(TradeError):
    """Raised when a transaction lands but reports an execution error.

    Attributes:
        signature: Signature of the failed transaction.
        error: Error payload reported by the chain.
    """

    def __init__(self, signature: str, error: Any) -> None:
        self.signature = signature
        self.error = error
        super().__init__(
            f"Transaction {signature} failed on-chain: {error}",
            user_message=(
                "The transaction failed on-chain (often slippage exceeded). "
                f"Signature: {signature}"
            ),
        )


def describe_error(exc: BaseException) -> str:
    """Map any exception to a message suitable for the end user.

    Args:
        exc: Exception raised while handling a user request.

    Returns:
        The trade error's own message, or a generic fallback.
    """
    if isinstance(exc, TradeError):
        return exc.user_message
    if isinstance(exc, (ExternalServiceError, CircuitBreakerOpenError)):
        return "An upstream service is unavailable right now. Please retry shortly."
    return "Something went wrong. Please try again later."
