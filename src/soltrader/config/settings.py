"""Application settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SolTrader configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Application
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )

    # Solana RPC
    solana_rpc_url: str = Field(
        default="https://api.mainnet-beta.solana.com",
        description="Primary Solana RPC endpoint URL",
    )
    solana_rpc_fallback_urls: list[str] = Field(
        default_factory=lambda: ["https://rpc.ankr.com/solana"],
        description="Fallback RPC endpoints, rotated to on failure",
    )
    rpc_commitment: Literal["processed", "confirmed", "finalized"] = Field(
        default="confirmed", description="Commitment level for reads and confirmations"
    )
    rpc_timeout_seconds: float = Field(default=30.0, ge=1, le=120)

    # Circuit Breaker
    circuit_breaker_threshold: int = Field(
        default=5, ge=1, description="Failures before circuit opens"
    )
    circuit_breaker_cooldown: int = Field(
        default=30, ge=1, description="Seconds before half-open"
    )

    @field_validator("solana_rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        """Validate RPC URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Solana RPC URL must start with http:// or https://")
        return v

    @field_validator("solana_rpc_fallback_urls")
    @classmethod
    def validate_fallback_urls(cls, v: list[str]) -> list[str]:
        """Validate every fallback URL and drop blanks."""
        urls = [url.strip() for url in v if url.strip()]
        for url in urls:
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"Fallback RPC URL must be http(s): {url}")
        return urls

    @property
    def rpc_urls(self) -> list[str]:
        """Primary endpoint followed by fallbacks, without duplicates."""
        urls = [self.solana_rpc_url]
        urls.extend(url for url in self.solana_rpc_fallback_urls if url not in urls)
        return urls


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
