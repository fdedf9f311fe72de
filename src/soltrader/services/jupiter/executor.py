"""Swap executor: build -> sign -> submit -> confirm.

Implements:
- Prebuilt transaction request from Jupiter
- Local signing (the only place a keypair is materialized)
- Submission with preflight simulation and RPC-side retries
- Bounded, non-blocking confirmation wait

SECURITY NOTES:
- Private key is NEVER logged
- The keypair lives only for the duration of one execute() call
"""

from __future__ import annotations

import base64
import time

import structlog
from solders.transaction import VersionedTransaction

from soltrader.config.jupiter_settings import JupiterSettings, get_jupiter_settings
from soltrader.core.amounts import clamp, sol_to_lamports
from soltrader.core.exceptions import (
    UNCONFIRMED_SUBMISSION_MESSAGE,
    ConfirmationTimeoutError,
    ExternalServiceError,
    InvalidSignerError,
    OnChainFailureError,
    SubmissionFailedError,
    SwapBuildFailedError,
    TransactionRejectedError,
)
from soltrader.core.wallet.validator import is_valid_solana_address
from soltrader.models.trade import SwapQuote, SwapResult
from soltrader.models.wallet import Wallet
from soltrader.services.jupiter.client import JupiterClient
from soltrader.services.solana.rpc_client import SolanaRPCClient

logger = structlog.get_logger(__name__)


class SwapExecutor:
    """Turns a quote into one confirmed on-chain swap.

    A quote is single-use: callers must fetch a fresh quote for every
    execute() call. Exactly one signed transaction is broadcast per
    successful call.
    """

    def __init__(
        self,
        jupiter: JupiterClient,
        rpc: SolanaRPCClient,
        settings: JupiterSettings | None = None,
    ) -> None:
        self._jupiter = jupiter
        self._rpc = rpc
        self._settings = settings or get_jupiter_settings()

    def clamp_priority_fee(self, priority_fee_sol: float) -> float:
        """Clamp the priority fee into the configured SOL range."""
        return clamp(
            priority_fee_sol,
            self._settings.min_priority_fee_sol,
            self._settings.max_priority_fee_sol,
        )

    async def execute(
        self,
        quote: SwapQuote,
        signer: Wallet | None,
        priority_fee_sol: float,
        platform_fee_bps: int = 0,
        fee_recipient: str | None = None,
    ) -> SwapResult:
        """Execute a quoted swap for the signer's wallet.

        Args:
            quote: Fresh quote from JupiterClient.get_quote()
            signer: Wallet whose key signs the transaction
            priority_fee_sol: Priority fee in SOL; clamped to a safe range
            platform_fee_bps: Platform fee included in the quote
            fee_recipient: Token account receiving the platform fee

        Returns:
            SwapResult of the confirmed transaction

        Raises:
            InvalidSignerError: Missing or unusable signing key.
            SwapBuildFailedError: Jupiter could not build the transaction.
            SubmissionFailedError: Preflight rejected it, or submission failed in transport.
            ConfirmationTimeoutError: Broadcast but not confirmed in time.
            OnChainFailureError: Landed but failed on-chain.
        """
        start = time.perf_counter()

        if signer is None:
            raise InvalidSignerError("No signer provided")
        try:
            keypair = signer.keypair()
        except ValueError as e:
            logger.error("swap_signer_invalid", wallet=signer.public_key[:8])
            raise InvalidSignerError(f"Signer key is unusable: {e}") from e

        priority_fee_lamports = sol_to_lamports(self.clamp_priority_fee(priority_fee_sol))

        fee_account = None
        if platform_fee_bps > 0:
            if is_valid_solana_address(fee_recipient):
                fee_account = fee_recipient
            else:
                logger.warning("platform_fee_recipient_invalid", fee_bps=platform_fee_bps)

        swap_transaction = await self._jupiter.build_swap_transaction(
            quote=quote,
            user_public_key=signer.public_key,
            priority_fee_lamports=priority_fee_lamports,
            fee_account=fee_account,
        )

        try:
            unsigned = VersionedTransaction.from_bytes(base64.b64decode(swap_transaction))
        except Exception as e:
            # binascii.Error or a solders deserialization error
            raise SwapBuildFailedError(f"Swap transaction could not be decoded: {e}") from e

        try:
            signed = VersionedTransaction(unsigned.message, [keypair])
        except Exception as e:
            # solders raises SignerError when the key is not a required signer
            raise InvalidSignerError(f"Signing failed: {e}") from e

        logger.info(
            "swap_submitting",
            wallet=signer.public_key[:8],
            input_mint=quote.input_mint[:8],
            output_mint=quote.output_mint[:8],
            in_amount=quote.in_amount,
            priority_fee_lamports=priority_fee_lamports,
        )

        try:
            signature = await self._rpc.send_transaction(
                signed, max_retries=self._settings.submit_max_retries
            )
        except TransactionRejectedError as e:
            raise SubmissionFailedError(f"Submission rejected: {e}") from e
        except ExternalServiceError as e:
            raise SubmissionFailedError(
                f"Submission outcome unknown: {e}", user_message=UNCONFIRMED_SUBMISSION_MESSAGE
            ) from e

        logger.info("swap_submitted", signature=signature[:16])

        timeout = self._settings.confirmation_timeout_seconds
        try:
            error = await self._rpc.wait_for_confirmation(
                signature,
                timeout_seconds=timeout,
                poll_interval=self._settings.confirmation_poll_seconds,
            )
        except TimeoutError as e:
            logger.error("swap_confirmation_timeout", signature=signature[:16], timeout=timeout)
            raise ConfirmationTimeoutError(signature, timeout) from e

        if error is not None:
            logger.error("swap_onchain_error", signature=signature[:16], error=str(error))
            raise OnChainFailureError(signature, error)

        execution_time = (time.perf_counter() - start) * 1000
        logger.info(
            "swap_confirmed",
            signature=signature[:16],
            execution_time_ms=round(execution_time, 2),
        )

        return SwapResult(
            success=True,
            tx_signature=signature,
            input_amount=quote.in_amount,
            output_amount=quote.out_amount,
            priority_fee_lamports=priority_fee_lamports,
            platform_fee_amount=quote.platform_fee_amount if fee_account else 0,
            execution_time_ms=execution_time,
        )
