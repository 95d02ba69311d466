"""Pipeline settings using Pydantic Settings.

Centralized configuration for the tax form pipeline. Every value has a
default that matches current law, so nothing needs to be set for normal use.

Environment variables (prefix TAX_PIPELINE_):
- TAX_PIPELINE_COST_OF_LIVING_ADJUSTMENT: EBL threshold projection multiplier
- TAX_PIPELINE_BRACKETS_FILE: Alternative bracket table YAML
- TAX_PIPELINE_LOG_LEVEL / TAX_PIPELINE_LOG_JSON: Logging output
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class PipelineSettings(BaseSettings):
    """Tax form pipeline settings."""

    model_config = SettingsConfigDict(
        env_prefix="TAX_PIPELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Tax year configuration
    default_tax_year: int = Field(default=2024, ge=1, description="Default tax year for Form 1040")

    # Excess business loss threshold projection (IRC 461(l)(3))
    cost_of_living_adjustment: float = Field(
        default=1.03,
        gt=0,
        description="Annual multiplier applied to the last published EBL threshold"
    )

    # Bracket table
    brackets_file: Optional[Path] = Field(
        default=None,
        description="YAML bracket table to use instead of the bundled one"
    )

    # Post-2017 NOL deduction limit (IRC 172(a)(2))
    nol_income_limitation_rate: float = Field(
        default=0.80,
        ge=0,
        le=1,
        description="Share of income a post-2017 NOL may offset"
    )
    nol_limitation_first_year: int = Field(
        default=2021,
        description="First tax year the NOL income limitation applies"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Emit JSON formatted logs")

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> PipelineSettings:
    """
    Get cached pipeline settings instance.

    Returns:
        PipelineSettings: Cached settings loaded from environment.
    """
    return PipelineSettings()
