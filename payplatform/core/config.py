# payplatform/core/config.py

"""
Settings for the payroll and billing computation core.

Values are read from environment variables (prefixed ``PAYPLATFORM_``) or a
local ``.env`` file.
"""

from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="PAYPLATFORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment Settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Money
    money_decimal_places: int = Field(default=2, ge=0, le=4)

    # Billing Configuration
    invoice_due_days: int = 30
    invoice_number_prefix: str = "INV"
    default_billing_cycle: str = "MONTHLY"

    # Payroll Configuration
    default_pay_frequency: str = "MONTHLY"
    default_statutory_region: Optional[str] = None
    reconciliation_salary_change_percent: float = 20.0
    reconciliation_deduction_change_percent: float = 30.0

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level

    @field_validator("invoice_due_days")
    @classmethod
    def validate_due_days(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("invoice_due_days must be positive")
        return v

    @field_validator("default_billing_cycle", "default_pay_frequency")
    @classmethod
    def upper_case_choice(cls, v: str) -> str:
        return v.upper()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Returns:
        Settings instance with environment variables loaded
    """
    return Settings()
