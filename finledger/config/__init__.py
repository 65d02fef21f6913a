"""Configuration package."""

from finledger.config.settings import (
    AppSettings,
    MarketSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "MarketSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
