"""
Overtime Tool Configuration

Environment-based settings. Every field can be set through an
``OVERTIME_``-prefixed environment variable or a ``.env`` file.
"""

from __future__ import annotations

import json
from decimal import Decimal
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from overtime_tool.models import AmountDisplay, CalcParams, FeatureFlags


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="OVERTIME_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Overtime Analysis API"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    log_json: bool = False

    # API
    allowed_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: [
        "http://localhost:8080",
        "http://localhost:3000",
        "http://127.0.0.1:8080",
    ])

    # Calculation defaults (bundle values take precedence)
    daily_threshold: Decimal = Decimal("8")
    overtime_multiplier: Decimal = Decimal("1.5")
    tier2_threshold_hours: Decimal = Decimal("0")
    tier2_multiplier: Decimal = Decimal("2.0")

    use_profile_capacity: bool = True
    use_profile_working_days: bool = True
    apply_holidays: bool = True
    apply_time_off: bool = True
    enable_tiered_ot: bool = False
    amount_display: str = "earned"

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            if value.strip().startswith("["):
                return json.loads(value)
            return [o.strip() for o in value.split(",") if o.strip()]
        return value

    @property
    def allow_all_origins(self) -> bool:
        return "*" in self.allowed_origins

    def calc_params(self) -> CalcParams:
        return CalcParams(
            daily_threshold=self.daily_threshold,
            overtime_multiplier=self.overtime_multiplier,
            tier2_threshold_hours=self.tier2_threshold_hours,
            tier2_multiplier=self.tier2_multiplier,
        )

    def feature_flags(self) -> FeatureFlags:
        return FeatureFlags(
            use_profile_capacity=self.use_profile_capacity,
            use_profile_working_days=self.use_profile_working_days,
            apply_holidays=self.apply_holidays,
            apply_time_off=self.apply_time_off,
            enable_tiered_ot=self.enable_tiered_ot,
            amount_display=AmountDisplay.parse(self.amount_display),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
