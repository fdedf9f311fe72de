"""Solana chain constants."""

from typing import Final

LAMPORTS_PER_SOL: Final[int] = 1_000_000_000
SOL_DECIMALS: Final[int] = 9

# Wrapped SOL mint, used as the native side of every swap
WSOL_MINT: Final[str] = "So11111111111111111111111111111111111111112"

# Fallback when neither the quote nor the chain reports mint decimals
DEFAULT_TOKEN_DECIMALS: Final[int] = 9

# Base58 public keys are 32 bytes, 32-44 characters once encoded
PUBKEY_BYTES: Final[int] = 32
ADDRESS_MIN_LENGTH: Final[int] = 32
ADDRESS_MAX_LENGTH: Final[int] = 44
