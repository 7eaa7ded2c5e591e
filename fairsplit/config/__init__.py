"""Configuration package."""

from fairsplit.config.settings import (
    AppSettings,
    Settings,
    SplitSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "Settings",
    "SplitSettings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
