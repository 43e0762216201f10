"""
Configuration Management for Crypto Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration (used for exchange rate lookups)."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        min_length=1,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=256,
        ge=16,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )
    use_search_grounding: bool = Field(
        default=True,
        description="Ground the rate lookup in Google Search results"
    )


class StorageSettings(BaseSettings):
    """Durable storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: Literal["json_file", "google_sheets", "memory"] = Field(
        default="json_file",
        description="Which storage backend to use"
    )
    data_dir: Path = Field(
        default=Path(".crypto_ledger"),
        description="Directory for the json_file backend"
    )

    # Storage keys
    transactions_key: str = Field(
        default="transactions",
        min_length=1,
        description="Key holding the serialized transaction list"
    )
    exchange_rate_key: str = Field(
        default="exchange_rate",
        min_length=1,
        description="Key holding the exchange rate as decimal text"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the sheet for transactions"
    )
    settings_sheet_name: str = Field(
        default="Settings",
        description="Name of the sheet holding the exchange rate"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


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

    # Currencies
    crypto_symbol: str = Field(
        default="PI",
        min_length=1,
        max_length=10,
        description="Symbol of the tracked cryptocurrency unit"
    )
    fiat_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="ISO code of the local fiat currency"
    )
    default_exchange_rate: float = Field(
        default=1.0,
        gt=0.0,
        description="Fallback rate when none has been persisted"
    )

    # Rate lookup
    rate_lookup_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=300.0,
        description="Give up on a rate lookup after this many seconds"
    )

    # Presentation
    recent_activity_points: int = Field(
        default=7,
        ge=1,
        le=50,
        description="Number of bars in the recent activity chart"
    )
    chart_label_length: int = Field(
        default=8,
        ge=1,
        description="Chart labels longer than this are truncated"
    )

    @field_validator('crypto_symbol', 'fiat_currency')
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        """Currency symbols are stored upper case."""
        return v.strip().upper()


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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for each section that failed to load.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("gemini", "storage", "google_sheets", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
