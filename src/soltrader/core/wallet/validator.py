"""Solana address validation.

Every piece of user-supplied text that is interpreted as an address goes
through this module before any network call is made.
"""

import base58
import structlog
from solders.pubkey import Pubkey

from soltrader.constants.solana import (
    ADDRESS_MAX_LENGTH,
    ADDRESS_MIN_LENGTH,
    PUBKEY_BYTES,
)
from soltrader.core.exceptions import InvalidAddressError

log = structlog.get_logger(__name__)


def is_valid_solana_address(address: str | None) -> bool:
    """Validate Solana address format.

    Performs local validation without network calls:
    - Checks for None/empty values
    - Validates length (32-44 characters)
    - Decodes base58 and requires exactly 32 bytes
    - Parses the result as a public key

    Args:
        address: Candidate address to validate.

    Returns:
        True if address is a well-formed public key, False otherwise.

    Example:
        >>> is_valid_solana_address("9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM")
        True
        >>> is_valid_solana_address("invalid_0OIl")
        False
    """
    if address is None or not isinstance(address, str):
        return False

    address = address.strip()
    if not (ADDRESS_MIN_LENGTH <= len(address) <= ADDRESS_MAX_LENGTH):
        return False

    try:
        decoded = base58.b58decode(address)
    except ValueError:
        return False

    if len(decoded) != PUBKEY_BYTES:
        return False

    try:
        Pubkey.from_string(address)
    except ValueError:
        return False

    return True


def require_valid_address(address: str | None, field: str = "address") -> str:
    """Return the stripped address or raise InvalidAddressError.

    Args:
        address: Candidate address.
        field: Name used in the error message (e.g. "token address").

    Raises:
        InvalidAddressError: If the address is not a valid public key.
    """
    if not is_valid_solana_address(address):
        log.warning("address_rejected", field=field, length=len(address or ""))
        raise InvalidAddressError(address, field=field)
    return address.strip()  # type: ignore[union-attr]
