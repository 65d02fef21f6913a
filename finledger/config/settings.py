"""
Configuration Management for finledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The engine itself never reads the environment; the factory in
finledger.orchestrator pulls values from here and injects them.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Record store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINLEDGER_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="json",
        pattern="^(memory|json)$",
        description="Record store backend"
    )
    data_dir: str = Field(
        default="~/.finledger",
        description="Directory holding one JSON file per collection"
    )

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()


class MarketSettings(BaseSettings):
    """Simulated market data feed configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINLEDGER_MARKET_",
        extra="ignore"
    )

    enabled: bool = Field(
        default=True,
        description="Start the periodic price refresh with the engine"
    )
    refresh_interval_seconds: int = Field(
        default=30,
        ge=1,
        le=3600,
        description="Seconds between simulated price refreshes"
    )
    max_change_percent: float = Field(
        default=5.0,
        ge=0.0,
        le=50.0,
        description="Largest simulated price move per refresh, in percent"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for local structured logs"
    )
    log_json: bool = Field(
        default=True,
        description="Render local logs as JSON (False for console output)"
    )
    expiring_soon_days: int = Field(
        default=3,
        ge=0,
        le=31,
        description="Budgets with this many days left or fewer count as expiring"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def market(self) -> MarketSettings:
        return MarketSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries describing failures.
    """
    results = {}
    settings = get_settings()

    for name in ("storage", "market", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
