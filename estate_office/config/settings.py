"""
Configuration Management for Estate Office

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Tax rates, tolerances and storage locations are business parameters,
so they live in one place instead of being scattered as literals
through the report code.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key/value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ESTATE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: str = Field(
        default=".estate_data",
        description="Directory holding one JSON file per storage key"
    )
    max_value_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1024,
        description="Largest serialized value a single key may hold"
    )
    write_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed file write is attempted"
    )
    audit_max_events: int = Field(
        default=5000,
        ge=1,
        description="Most recent audit events kept under the audit_log key"
    )

    @field_validator('data_dir')
    @classmethod
    def validate_data_dir(cls, v: str) -> str:
        """Reject paths that point at an existing regular file."""
        path = Path(v)
        if path.exists() and not path.is_dir():
            raise ValueError(f"Storage path {v} exists and is not a directory")
        return v

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)


class AccountingSettings(BaseSettings):
    """Rates and tolerances used by the financial reports."""

    model_config = SettingsConfigDict(
        env_prefix="ESTATE_ACCOUNTING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    currency: str = Field(
        default="PKR",
        description="Reporting currency code"
    )
    balance_tolerance: float = Field(
        default=0.01,
        gt=0.0,
        description="Largest difference still treated as balanced"
    )

    # Tax summary
    property_tax_rate: float = Field(default=0.01, ge=0.0, le=1.0)
    income_tax_rate: float = Field(default=0.30, ge=0.0, le=1.0)
    long_term_capital_gains_rate: float = Field(default=0.15, ge=0.0, le=1.0)
    short_term_capital_gains_rate: float = Field(default=0.30, ge=0.0, le=1.0)
    long_term_holding_days: int = Field(
        default=365,
        ge=1,
        description="Holding period above which a gain counts as long term"
    )

    # Capital gains are estimated from commission revenue
    assumed_commission_rate: float = Field(
        default=0.02,
        gt=0.0,
        le=1.0,
        description="Commission rate used to back out the sale value"
    )
    assumed_cost_ratio: float = Field(
        default=0.70,
        ge=0.0,
        le=1.0,
        description="Cost basis as a fraction of the estimated sale value"
    )
    assumed_holding_period_days: int = Field(default=400, ge=0)

    # Withholding
    salary_withholding_rate: float = Field(default=0.10, ge=0.0, le=1.0)
    commission_withholding_rate: float = Field(default=0.05, ge=0.0, le=1.0)
    contractor_withholding_rate: float = Field(default=0.15, ge=0.0, le=1.0)


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
        description="Minimum level written by the structured logger"
    )

    # Matching and reporting thresholds
    match_score_threshold: int = Field(
        default=30,
        ge=0,
        le=110,
        description="Minimum score for a property to count as a buyer match"
    )
    top_performers_limit: int = Field(
        default=5,
        ge=1,
        le=100,
        description="How many properties the performance report ranks"
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
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def accounting(self) -> AccountingSettings:
        return AccountingSettings()

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
    {setting_name}_error entries for the ones that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("storage", "accounting", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
