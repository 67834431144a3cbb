"""Configuration management for the OKX webhook bridge."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from okx_bridge.core.constants import (
    DEFAULT_INSTRUMENT_CACHE_TTL_SECONDS,
    DEFAULT_LOG_DIR,
    DEFAULT_PORT,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    OKX_BASE_URL,
)
from okx_bridge.models import TradeMode


class BridgeConfig(BaseSettings):
    """Webhook secret, OKX credentials and runtime settings.

    Uses Pydantic v2 settings with environment variable support. Field names map
    onto the upper-case variables (``TV_SECRET``, ``OKX_API_KEY`` ...). Every
    credential is required: a missing or blank value fails construction instead
    of silently disabling authentication.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Inbound webhook authentication
    tv_secret: SecretStr = Field(..., description="Shared secret expected in webhook payloads")

    # Outbound OKX credentials
    okx_api_key: SecretStr = Field(..., description="OKX API key")
    okx_api_secret: SecretStr = Field(..., description="OKX API secret used for signing")
    okx_api_passphrase: SecretStr = Field(..., description="OKX API passphrase")

    # Exchange settings
    okx_base_url: str = Field(default=OKX_BASE_URL, description="OKX REST base URL")
    okx_simulated_trading: bool = Field(
        default=False, description="Send x-simulated-trading header (OKX demo trading)"
    )
    trade_mode: TradeMode = Field(default=TradeMode.CROSS, description="Margin mode for orders")
    instrument_cache_ttl: float = Field(
        default=DEFAULT_INSTRUMENT_CACHE_TTL_SECONDS,
        gt=0,
        description="Seconds an instrument lot/min size record stays fresh",
    )
    request_timeout: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout in seconds for each outbound OKX call",
    )

    # Listener settings
    host: str = Field(default="0.0.0.0", description="Webhook listener bind address")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Webhook listener port")
    log_dir: Path = Field(default=DEFAULT_LOG_DIR, description="Directory for logs")

    @field_validator("tv_secret", "okx_api_key", "okx_api_secret", "okx_api_passphrase")
    @classmethod
    def validate_not_blank(cls, v: SecretStr, info: ValidationInfo) -> SecretStr:
        """Reject empty credentials so misconfiguration fails at startup."""
        if not v.get_secret_value().strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return v

    @field_validator("okx_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Strip trailing slashes so request paths join cleanly."""
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"okx_base_url must be an http(s) URL, got {v!r}")
        return v


def load_config() -> BridgeConfig:
    """Load configuration from environment and .env file."""
    return BridgeConfig()
