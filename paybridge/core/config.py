from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Payment gateway settings loaded from environment variables.

    Every provider credential is optional: a provider's keys are only
    required when that provider is actually used.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Provider selection
    payment_provider: str = Field(
        default="console",
        description="Provider resolved when no name is given",
    )
    environment: Literal["development", "production"] = Field(
        default="development",
        description="Selects live or test API hosts where providers have both",
    )

    # HTTP
    http_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for outbound provider calls",
    )
    webhook_tolerance_seconds: int = Field(
        default=300,
        ge=0,
        description="Max age of Stripe webhook signatures",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_format: Literal["json", "standard"] = Field(
        default="standard",
        description="Log format (json for production, standard for dev)",
    )

    # Stripe
    stripe_secret_key: str | None = Field(default=None, description="Stripe secret API key")
    stripe_webhook_secret: str | None = Field(default=None, description="Stripe endpoint secret")

    # LemonSqueezy
    lemonsqueezy_api_key: str | None = Field(default=None, description="LemonSqueezy API key")
    lemonsqueezy_store_id: str | None = Field(default=None, description="LemonSqueezy store ID")
    lemonsqueezy_webhook_secret: str | None = Field(
        default=None,
        description="LemonSqueezy webhook signing secret",
    )

    # Polar
    polar_access_token: str | None = Field(default=None, description="Polar organization access token")
    polar_webhook_secret: str | None = Field(default=None, description="Polar webhook secret")

    # Creem
    creem_api_key: str | None = Field(default=None, description="Creem API key")
    creem_webhook_secret: str | None = Field(default=None, description="Creem webhook secret")

    # DodoPayments
    dodo_payments_api_key: str | None = Field(default=None, description="DodoPayments API key")
    dodo_payments_webhook_secret: str | None = Field(
        default=None,
        description="DodoPayments webhook secret",
    )

    # Tap
    tap_secret_key: str | None = Field(default=None, description="Tap secret API key")
    tap_webhook_secret: str | None = Field(default=None, description="Tap secret used for hashstring")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once on first use."""
    return Settings()
