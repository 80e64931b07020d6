"""Application configuration schema and validation."""

import logging
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PRICE_ALLOWLIST: dict[str, list[str]] = {
    "quant": ["price_live_quant_starter", "price_live_quant_pro"],
    "credit": ["price_live_credit_basic", "price_live_credit_premium"],
}


class AppConfig(BaseSettings):
    """Application configuration loaded from environment variables.

    Secrets and base URLs default to empty and are checked per request,
    not at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    env: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Application environment",
    )
    stripe_restricted_key: SecretStr = Field(
        default=SecretStr(""),
        description="Stripe restricted API key (rk_...)",
    )
    stripe_webhook_secret: SecretStr = Field(
        default=SecretStr(""),
        description="Stripe webhook signing secret (whsec_...)",
    )
    stripe_api_version: str = Field(
        default="2023-10-16",
        description="Stripe API version pinned on outbound calls",
    )
    webhook_tolerance_seconds: int = Field(
        default=300,
        ge=0,
        le=3600,
        description="Maximum age of a webhook signature timestamp",
    )
    base_url: str = Field(
        default="",
        description="Generic site base URL, also the brand fallback",
    )
    base_url_quant: str = Field(
        default="",
        description="Base URL for the quant brand",
    )
    base_url_credit: str = Field(
        default="",
        description="Base URL for the credit brand",
    )
    price_allowlist: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_PRICE_ALLOWLIST.items()},
        description="Permitted Stripe price IDs per brand",
    )
    default_brand: str = Field(
        default="quant",
        description="Brand used when a checkout request omits one",
    )
    server_host: str = Field(
        default="0.0.0.0",
        description="HTTP bind host",
    )
    server_port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="HTTP bind port",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("base_url", "base_url_quant", "base_url_credit")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs so redirect paths join cleanly."""
        return v.strip().rstrip("/")

    @field_validator("price_allowlist")
    @classmethod
    def validate_allowlist(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        """Reject brands with no permitted prices."""
        for brand, prices in v.items():
            if not prices:
                raise ValueError(f"price_allowlist entry for {brand!r} is empty")
        return v

    @field_validator("default_brand")
    @classmethod
    def validate_default_brand(cls, v: str, info) -> str:
        """Ensure default_brand has an allow-list entry."""
        if "price_allowlist" in info.data and v not in info.data["price_allowlist"]:
            raise ValueError("default_brand must be a key of price_allowlist")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or create the singleton AppConfig instance."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config
