"""
Configuration Management for FairSplit

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Defaults reproduce the stock calculator (36,000 / 21,000 / 0, seven-digit
entry cap, comma grouping) so the app runs with no .env at all.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SplitSettings(BaseSettings):
    """Calculator defaults and input rules."""

    model_config = SettingsConfigDict(
        env_prefix="SPLIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_party_a_salary: float = Field(
        default=36000,
        ge=0,
        description="Salary shown for the first party before any entry"
    )
    default_party_b_salary: float = Field(
        default=21000,
        ge=0,
        description="Salary shown for the second party before any entry"
    )
    default_expense: float = Field(
        default=0,
        ge=0,
        description="Shared expense shown before any entry"
    )

    # Entry rules
    max_digits: int = Field(
        default=7,
        ge=1,
        le=15,
        description="Digits kept from a field entry; the rest are discarded"
    )
    thousands_separator: str = Field(
        default=",",
        description="Grouping character accepted on entry and used on display"
    )

    # Labels
    party_a_label: str = Field(default="Person 1's Salary")
    party_b_label: str = Field(default="Person 2's Salary")
    expense_label: str = Field(default="Expense")

    @field_validator('thousands_separator')
    @classmethod
    def validate_separator(cls, v: str) -> str:
        """Separator must be one character other than a digit or the decimal point."""
        if len(v) != 1 or v.isdigit() or v == ".":
            raise ValueError(
                "thousands_separator must be one character other than a digit "
                f"or '.', got {v!r}"
            )
        return v


class StorageSettings(BaseSettings):
    """Durable key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="file",
        pattern="^(file|memory)$",
        description="'file' persists across restarts, 'memory' is session-only"
    )
    file_path: Path = Field(
        default=Path(".fairsplit") / "state.json",
        description="JSON file holding the persisted records"
    )

    # Record names
    inputs_key: str = Field(
        default="inputs",
        min_length=1,
        description="Key of the record holding the three inputs"
    )
    contributions_key: str = Field(
        default="contributions",
        min_length=1,
        description="Key of the record holding the last allocation"
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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )


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
    def split(self) -> SplitSettings:
        return SplitSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

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

    Returns a dict of {setting_name: is_valid}, plus {setting_name}_error
    entries holding the message for anything that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("split", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
