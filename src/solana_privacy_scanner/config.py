"""Configuration management service with Pydantic Settings.

This module provides centralized configuration management for the
Solana Privacy Scanner, loading and validating environment variables
at startup.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HeliusSettings(BaseSettings):
    """Helius enhanced-transactions API settings."""

    model_config = SettingsConfigDict(env_prefix="HELIUS_")

    api_key: SecretStr | None = Field(
        default=None,
        alias="HELIUS_API_KEY",
        description="Helius API key for transaction history",
    )
    api_url: str = Field(
        default="https://api.helius.xyz",
        alias="HELIUS_API_URL",
        description="Helius REST API base URL",
    )

    @field_validator("api_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate API URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("HELIUS_API_URL must be an HTTP(S) endpoint")
        return v.rstrip("/")

    @property
    def enabled(self) -> bool:
        """Check if a Helius API key is configured."""
        return self.api_key is not None


class SolanaRpcSettings(BaseSettings):
    """Solana JSON-RPC settings used for balance lookups."""

    model_config = SettingsConfigDict(env_prefix="")

    rpc_url: str = Field(
        default="https://api.mainnet-beta.solana.com",
        alias="QUICKNODE_RPC_URL",
        description="Solana RPC endpoint (QuickNode or public mainnet)",
    )

    @field_validator("rpc_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate RPC URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("RPC URL must be an HTTP(S) endpoint")
        return v


class RedisSettings(BaseSettings):
    """Optional Redis cache settings."""

    model_config = SettingsConfigDict(env_prefix="")

    url: str | None = Field(
        default=None,
        alias="REDIS_URL",
        description="Redis connection string for history caching",
    )
    cache_ttl_seconds: int = Field(
        default=300,
        alias="REDIS_CACHE_TTL",
        description="TTL for cached transaction history",
        ge=1,
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate Redis URL format."""
        if v is None:
            return v
        if not v.startswith("redis://"):
            raise ValueError("REDIS_URL must start with redis://")
        return v

    @property
    def enabled(self) -> bool:
        """Check if Redis caching is enabled."""
        return self.url is not None


class AnalysisSettings(BaseSettings):
    """Tuning knobs for the analysis pipeline."""

    model_config = SettingsConfigDict(env_prefix="")

    max_transactions: int = Field(
        default=100,
        alias="MAX_TRANSACTIONS",
        description="Maximum transactions fetched per wallet",
        ge=1,
        le=1000,
    )
    compliance_concurrency: int = Field(
        default=10,
        alias="COMPLIANCE_CONCURRENCY",
        description="Maximum concurrent counterparty compliance checks",
        ge=1,
        le=100,
    )
    sol_price_usd: float = Field(
        default=150.0,
        alias="SOL_PRICE_USD",
        description="Fixed SOL/USD rate used for financial exposure",
        ge=0,
    )


class Settings(BaseSettings):
    """Main application settings.

    Loads configuration from environment variables with support for
    .env files.

    Example:
        ```python
        from solana_privacy_scanner.config import get_settings

        settings = get_settings()
        print(settings.helius.enabled)
        print(settings.log_level)
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    helius: HeliusSettings = Field(default_factory=HeliusSettings)
    solana_rpc: SolanaRpcSettings = Field(default_factory=SolanaRpcSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )

    def get_logging_level(self) -> int:
        """Get the numeric logging level."""
        level: int = getattr(logging, self.log_level)
        return level

    def redacted_summary(self) -> dict[str, str | dict[str, str]]:
        """Get a summary of settings with secrets redacted.

        Returns:
            Dictionary of settings with sensitive values masked.
        """
        return {
            "helius": {
                "api_url": self.helius.api_url,
                "api_key": "(set)" if self.helius.api_key else "(not set)",
            },
            "rpc_url": self._redact_url(self.solana_rpc.rpc_url),
            "redis_url": self._redact_url(self.redis.url) if self.redis.url else "(not set)",
            "max_transactions": str(self.analysis.max_transactions),
            "compliance_concurrency": str(self.analysis.compliance_concurrency),
            "log_level": self.log_level,
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact password and API tokens from a URL if present."""
        if "@" in url and "://" in url:
            protocol_end = url.index("://") + 3
            at_pos = url.index("@")
            creds_part = url[protocol_end:at_pos]
            if ":" in creds_part:
                username = creds_part.split(":")[0]
                return f"{url[:protocol_end]}{username}:***@{url[at_pos + 1 :]}"
        if "api-key=" in url:
            return url[: url.index("api-key=") + len("api-key=")] + "***"
        return url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The Settings instance.

    Raises:
        ValidationError: If environment variables have invalid values.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when you need to reload settings with
    different environment variables.
    """
    get_settings.cache_clear()
