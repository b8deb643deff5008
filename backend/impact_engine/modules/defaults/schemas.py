"""Pydantic schema for the versioned engine defaults document."""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field, field_validator, model_validator

ClimateZone = str
EnergySource = str


class AngelShareDefaults(BaseModel):
    """Annual evaporative loss rates (fractions) per climate zone."""

    climate_zone_rates: dict[ClimateZone, float] = Field(
        default_factory=lambda: {
            "temperate": 0.02,
            "continental": 0.05,
            "tropical": 0.12,
        }
    )
    max_annual_loss_rate: float = Field(default=0.25, gt=0.0, lt=1.0)

    @model_validator(mode="after")
    def _rates_within_bound(self) -> Self:
        for zone, rate in self.climate_zone_rates.items():
            if not 0.0 <= rate <= self.max_annual_loss_rate:
                raise ValueError(
                    f"angel share rate for '{zone}' must be within "
                    f"[0, {self.max_annual_loss_rate}], got {rate}"
                )
        return self


class BarrelDefaults(BaseModel):
    """Cradle-to-gate CO2e of a barrel, per barrel."""

    new_co2e_kg_by_size_litres: dict[float, float] = Field(
        default_factory=lambda: {200.0: 40.0, 225.0: 55.0, 500.0: 65.0}
    )
    new_fallback_co2e_kg: float = Field(default=40.0, ge=0.0)
    reused_reconditioning_co2e_kg: float = Field(default=0.5, ge=0.0)

    @field_validator("new_co2e_kg_by_size_litres")
    @classmethod
    def _non_negative(cls, value: dict[float, float]) -> dict[float, float]:
        if any(co2e < 0 for co2e in value.values()):
            raise ValueError("barrel CO2e defaults must be non-negative")
        return value


class DataQualityDefaults(BaseModel):
    """Weights of each provenance tier in the 0-100 data-quality score."""

    tier_weights: dict[str, float] = Field(
        default_factory=lambda: {
            "primary": 100.0,
            "supplier": 75.0,
            "database-modelled": 25.0,
        }
    )

    @field_validator("tier_weights")
    @classmethod
    def _weights_on_score_scale(cls, value: dict[str, float]) -> dict[str, float]:
        for tier, weight in value.items():
            if not 0.0 <= weight <= 100.0:
                raise ValueError(f"tier weight for '{tier}' must be within [0, 100], got {weight}")
        return value


class EngineDefaults(BaseModel):
    """Versioned default parameters shared by the calculators.

    ``EngineDefaults()`` is identical to the bundled ``engine_defaults.yaml``.
    """

    version: str = "2026.1"
    angel_share: AngelShareDefaults = Field(default_factory=AngelShareDefaults)
    barrels: BarrelDefaults = Field(default_factory=BarrelDefaults)
    grid_factors: dict[EnergySource, float] = Field(
        default_factory=lambda: {
            "grid_electricity": 0.207,
            "natural_gas": 0.183,
            "renewable": 0.0,
            "mixed": 0.120,
        },
        description="kg CO2e per kWh",
    )
    ethanol_density_kg_per_litre: float = Field(default=0.789, gt=0.0)
    pocp_ethanol_factor: float = Field(
        default=0.40,
        ge=0.0,
        description="kg NMVOC-eq photochemical ozone formation per kg ethanol",
    )
    default_bottle_size_litres: float = Field(default=0.75, gt=0.0)
    data_quality: DataQualityDefaults = Field(default_factory=DataQualityDefaults)

    @field_validator("grid_factors")
    @classmethod
    def _grid_factors_non_negative(cls, value: dict[str, float]) -> dict[str, float]:
        if any(factor < 0 for factor in value.values()):
            raise ValueError("grid factors must be non-negative")
        return value
