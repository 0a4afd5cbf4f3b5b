"""Application configuration using pydantic-settings.

Whitelists and registry passwords are read once at startup and handed to the
gate components by constructor; nothing below mutates them afterwards.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")

    # ======================
    # Chain
    # ======================
    chain_id: int = Field(default=1, description="Chain whose token table is served")

    # ======================
    # Access control
    # ======================
    rfqt_api_key_whitelist: str = Field(
        default="", description="Comma-separated API keys eligible for RFQ-T"
    )
    plp_api_key_whitelist: str = Field(
        default="", description="Comma-separated API keys allowed to use PLP sources"
    )
    rfqt_registry_passwords: str = Field(
        default="", description="Comma-separated bearer tokens for the RFQ-T registry"
    )

    # ======================
    # Swap defaults
    # ======================
    default_slippage_percentage: Decimal = Field(
        default=Decimal("0.01"), description="Slippage used when none is supplied (1%)"
    )
    market_depth_max_samples: int = Field(
        default=50, description="Default number of market depth samples"
    )
    market_depth_default_distribution: float = Field(
        default=1.05, description="Default market depth sample distribution base"
    )
    swap_docs_url: str = Field(
        default="https://0x.org/docs/api#swap", description="Public swap API docs"
    )

    @property
    def rfqt_api_keys(self) -> tuple[str, ...]:
        """RFQ-T whitelist as a tuple."""
        return _split_csv(self.rfqt_api_key_whitelist)

    @property
    def plp_api_keys(self) -> tuple[str, ...]:
        """PLP whitelist as a tuple."""
        return _split_csv(self.plp_api_key_whitelist)

    @property
    def registry_passwords(self) -> frozenset[str]:
        """Registry bearer tokens as a set."""
        return frozenset(_split_csv(self.rfqt_registry_passwords))

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "chain_id": self.chain_id,
            "rfqt_api_keys": len(self.rfqt_api_keys),
            "plp_api_keys": len(self.plp_api_keys),
            "registry_passwords": "***" if self.registry_passwords else "(not set)",
            "swap": {
                "default_slippage_percentage": str(self.default_slippage_percentage),
                "market_depth_max_samples": self.market_depth_max_samples,
                "market_depth_default_distribution": self.market_depth_default_distribution,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
