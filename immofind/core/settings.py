"""Application settings with environment variable support.

Uses pydantic-settings for typed configuration validation. City rent rates
and loan defaults are user data and live in the persisted settings store,
not here.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    # Feature flags
    debug_mode: bool = Field(default=False, description="Enable debug features")

    # Persistence
    settings_file: Path = Field(
        default=Path("data/settings.json"),
        description="Key-value document holding the persisted city settings",
    )

    # Listings API
    api_base_url: Optional[str] = Field(default=None, description="Absolute listings API base URL")

    # Calculation defaults
    default_equity: float = Field(default=10000.0, ge=0, description="Equity assumed for listing cashflow")
    non_apportionable_cost_pct: float = Field(default=1.5, ge=0, le=100)
    default_interest_rate_pct: float = Field(default=3.5, ge=0, le=100)
    default_loan_term_years: int = Field(default=30, ge=1, le=60)
    schedule_preview_months: int = Field(default=12, ge=1)

    model_config = {
        "env_prefix": "IMMOFIND_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()
