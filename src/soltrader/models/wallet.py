"""Trading wallet model.

SECURITY: Private key material is held as SecretStr so it never shows up
in repr() or logs. The keypair is only materialized by the swap executor
at signing time.
"""

from __future__ import annotations

import base58
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from solders.keypair import Keypair

from soltrader.core.wallet.validator import is_valid_solana_address


class Wallet(BaseModel):
    """A user's trading wallet, owned by exactly one chat user."""

    model_config = ConfigDict(frozen=True)

    owner_id: int = Field(..., description="Chat user id owning this wallet")
    public_key: str = Field(..., description="Wallet public key (base58)")
    private_key: SecretStr = Field(..., description="Base58 64-byte secret key")
    mnemonic: SecretStr | None = Field(None, description="Seed phrase, if created here")
    name: str = Field(default="Main Wallet")
    is_active: bool = Field(default=True)

    @field_validator("public_key")
    @classmethod
    def validate_public_key(cls, v: str) -> str:
        """Validate public key is valid base58."""
        if not is_valid_solana_address(v):
            raise ValueError("Invalid base58 public key")
        return v.strip()

    @property
    def address(self) -> str:
        """Alias used by RPC helpers."""
        return self.public_key

    def keypair(self) -> Keypair:
        """Build the signing keypair from the stored secret.

        Raises:
            ValueError: If the secret is malformed or does not match public_key.
        """
        try:
            keypair = Keypair.from_bytes(base58.b58decode(self.private_key.get_secret_value()))
        except Exception as e:
            # solders raises its own error types for malformed key bytes
            raise ValueError(f"Malformed private key ({type(e).__name__})") from e
        if str(keypair.pubkey()) != self.public_key:
            raise ValueError("Private key does not match wallet public key")
        return keypair

    @classmethod
    def from_keypair(cls, owner_id: int, keypair: Keypair, name: str = "Main Wallet") -> Wallet:
        """Create a wallet from an existing keypair."""
        return cls(
            owner_id=owner_id,
            public_key=str(keypair.pubkey()),
            private_key=SecretStr(base58.b58encode(bytes(keypair)).decode()),
            name=name,
        )
