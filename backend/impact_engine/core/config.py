"""
Engine configuration using Pydantic Settings.
All configuration is loaded from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataQualityBand(BaseModel):
    """A score band used to label a data-quality score."""

    min_score: float = Field(ge=0.0, le=100.0)
    label: str
    description: str = ""


_DEFAULT_DATA_QUALITY_BANDS = [
    DataQualityBand(
        min_score=80.0,
        label="High Confidence",
        description="Predominantly primary or supplier-verified data.",
    ),
    DataQualityBand(
        min_score=50.0,
        label="Medium Confidence",
        description="Mix of supplier-specific and secondary database data.",
    ),
    DataQualityBand(
        min_score=0.0,
        label="Low Confidence",
        description="Predominantly modelled secondary data; treat as an estimate.",
    ),
]


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Numerical defaults (evaporation rates, grid factors, barrel burdens) are
    not settings: they live in the versioned engine defaults document, whose
    location can be overridden with ``engine_defaults_path``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Core Settings
    # ==========================================================================
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    project_name: str = "Environmental Impact Engine"
    version: str = "0.1.0"

    # ==========================================================================
    # Data Sources
    # ==========================================================================
    engine_defaults_path: str | None = Field(
        default=None,
        description="Override path for the engine defaults YAML (bundled file when unset)",
    )
    factor_database_path: str | None = Field(
        default=None,
        description="Override path for the emission factor YAML (bundled file when unset)",
    )

    # ==========================================================================
    # Data Quality Disclosure
    # ==========================================================================
    data_quality_bands: list[DataQualityBand] = Field(
        default_factory=lambda: [band.model_copy() for band in _DEFAULT_DATA_QUALITY_BANDS],
        description="Score bands, highest minimum first. Supplied as a JSON array.",
    )

    @model_validator(mode="after")
    def _validate_settings(self) -> Self:
        """Reject band tables that cannot label every score."""
        if not self.data_quality_bands:
            raise ValueError("data_quality_bands must contain at least one band")
        minimums = [band.min_score for band in self.data_quality_bands]
        if minimums != sorted(minimums, reverse=True):
            raise ValueError("data_quality_bands must be ordered by descending min_score")
        if minimums[-1] != 0.0:
            raise ValueError("the last data_quality_band must start at 0")
        if self.environment in ("production", "staging") and self.debug:
            raise ValueError(f"debug must be False in {self.environment} environment")
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached engine settings.

    Using lru_cache ensures settings are loaded once and reused,
    avoiding repeated environment variable parsing.
    """
    return Settings()
