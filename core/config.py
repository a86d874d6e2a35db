"""
Application configuration using Pydantic Settings.

Typed and validated settings loaded from environment variables and an
optional ``.env`` file. Pricing code never reads these globals directly:
callers hand a ``PricingSettings`` instance to the pricing engine.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Annotated, Literal, Self
from urllib.parse import urlparse

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full database URL (takes precedence over individual params)",
    )

    name: str = Field(default="vinyl_backoffice", description="Database name")
    user: str = Field(default="postgres", description="Database user")
    password: SecretStr = Field(default=SecretStr("postgres"), description="Database password")
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port", ge=1, le=65535)

    @property
    def connection_url(self) -> str:
        """
        Get database connection URL.

        If DATABASE_URL is set, use it directly.
        Otherwise, build from individual parameters.
        """
        if self.url:
            return self.url
        return (
            f"postgresql://{self.user}:{self.password.get_secret_value()}"
            f"@{self.host}:{self.port}/{self.name}"
        )

    @property
    def safe_url(self) -> str:
        """Get database URL without password for logging."""
        if self.url:
            parsed = urlparse(self.url)
            if parsed.password:
                return self.url.replace(f":{parsed.password}@", ":***@")
            return self.url
        return f"postgresql://{self.user}@{self.host}:{self.port}/{self.name}"


class RedisSettings(BaseSettings):
    """Redis connection settings."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")


class PricingSettings(BaseSettings):
    """
    Order pricing settings.

    Passed explicitly into every pricing computation so that the core can be
    exercised without a global settings object.
    """

    model_config = SettingsConfigDict(env_prefix="PRICING_")

    seller_country: str = Field(default="FR", description="ISO-2 country of the seller")
    standard_vat_rate_percent: Decimal = Field(
        default=Decimal("20"),
        ge=Decimal("0"),
        le=Decimal("100"),
        description="Domestic VAT rate as a percentage",
    )
    default_currency: str = Field(default="EUR", description="Currency used when none is chosen")
    supported_currencies: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["EUR", "USD", "GBP", "CHF"],
        description="Currencies an order may be created in",
    )
    minimum_pro_order_amount: Decimal = Field(
        default=Decimal("100"),
        ge=Decimal("0"),
        description="Minimum net subtotal for a Pro portal order",
    )

    @field_validator("seller_country", "default_currency", mode="after")
    @classmethod
    def upper_code(cls, v: str) -> str:
        """Normalize ISO codes to upper case."""
        return v.strip().upper()

    @field_validator("supported_currencies", mode="before")
    @classmethod
    def parse_currencies(cls, v: str | list[str]) -> list[str]:
        """Parse currencies from a comma-separated string or a list."""
        if isinstance(v, str):
            v = v.split(",")
        return [c.strip().upper() for c in v if c.strip()]

    @model_validator(mode="after")
    def check_default_currency(self) -> Self:
        """The default currency must be one of the supported ones."""
        if self.default_currency not in self.supported_currencies:
            msg = (
                f"default_currency {self.default_currency} is not in "
                f"supported_currencies {self.supported_currencies}"
            )
            raise ValueError(msg)
        return self

    def is_supported_currency(self, currency: str) -> bool:
        """Check whether orders may be created in ``currency``."""
        return currency.strip().upper() in self.supported_currencies


class ViesSettings(BaseSettings):
    """EU VIES VAT-number verification settings."""

    model_config = SettingsConfigDict(env_prefix="VIES_")

    enabled: bool = Field(default=True, description="Call VIES at checkout")
    base_url: str = Field(
        default="https://ec.europa.eu/taxation_customs/vies/rest-api",
        description="VIES REST API base URL",
    )
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")
    cache_ttl: int = Field(
        default=86400,
        ge=0,
        description="Seconds a successful verification answer is cached",
    )


class Settings(BaseSettings):
    """
    Main application settings.

    Aggregates all configuration sections and provides environment-specific
    settings loading.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    log_level: str = Field(default="INFO", description="Minimum log level")
    secret_key: SecretStr = Field(
        default=SecretStr("django-insecure-change-me-in-production"),
        description="Django secret key",
    )
    allowed_hosts: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["localhost", "127.0.0.1"],
        description="Allowed hosts",
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    pricing: PricingSettings = Field(default_factory=PricingSettings)
    vies: ViesSettings = Field(default_factory=ViesSettings)

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v: str | list[str]) -> list[str]:
        """Parse allowed hosts from comma-separated string or list."""
        if isinstance(v, str):
            return [h.strip() for h in v.split(",") if h.strip()]
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Configured Settings instance.
    """
    return Settings()
