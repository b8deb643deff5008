"""Pydantic schemas for barrel maturation impact calculation."""

from __future__ import annotations

from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from impact_engine.modules.lca.schemas import Material

ClimateZone = Literal["temperate", "continental", "tropical"]
EnergySource = Literal["grid_electricity", "natural_gas", "renewable", "mixed"]
MaturationAllocationMethod = Literal["cut_off"]


class MaturationProfile(BaseModel):
    """An aging step for one product: barrels, climate and warehouse energy."""

    model_config = ConfigDict(allow_inf_nan=False)

    barrel_type: str = "american_oak_200"
    barrel_size_litres: float = Field(default=200.0, gt=0.0)
    barrel_use_number: int = Field(default=1, ge=1, description="1 = new barrel")
    fill_volume_litres: float | None = Field(
        default=None,
        gt=0.0,
        description="Litres filled per barrel; defaults to the barrel size",
    )
    fill_count: int = Field(ge=0, description="Number of barrels filled")
    climate_zone: ClimateZone = "temperate"
    annual_loss_rate: float | None = Field(
        default=None,
        ge=0.0,
        lt=1.0,
        description="Explicit angel's share per year (fraction); climate default when unset",
    )
    duration_years: float = Field(ge=0.0)
    abv: float = Field(default=0.63, ge=0.0, le=1.0, description="ABV as a fraction")
    warehouse_energy_source: EnergySource = "grid_electricity"
    warehouse_energy_kwh_per_barrel_year: float = Field(default=0.0, ge=0.0)
    barrel_co2e_override: float | None = Field(
        default=None,
        ge=0.0,
        description="kg CO2e per barrel; takes precedence over every default",
    )
    bottles_override: int | None = Field(default=None, ge=1)
    allocation_method: MaturationAllocationMethod = "cut_off"

    @model_validator(mode="after")
    def _fill_within_barrel(self) -> Self:
        if self.fill_volume_litres is not None and self.fill_volume_litres > self.barrel_size_litres:
            raise ValueError("fill_volume_litres cannot exceed barrel_size_litres")
        return self

    @property
    def is_new_barrel(self) -> bool:
        return self.barrel_use_number == 1

    @property
    def duration_months(self) -> float:
        return self.duration_years * 12

    @property
    def fill_volume_per_barrel(self) -> float:
        return self.fill_volume_litres if self.fill_volume_litres is not None else self.barrel_size_litres


class MaturationResult(BaseModel):
    """Maturation impacts for one recalculation.

    ``total_maturation_co2e`` is barrel + warehouse only. Angel's-share loss is
    reported through the ethanol and photochemical ozone fields.
    """

    defaults_version: str
    annual_loss_rate: float
    retention_factor: float
    angel_share_loss_percent_total: float

    fill_volume_litres: float
    output_volume_litres: float
    volume_lost_litres: float

    bottle_size_litres: float
    bottle_count: int
    bottle_count_overridden: bool

    barrel_co2e_per_barrel: float
    barrel_co2e_total: float
    warehouse_co2e_total: float
    total_maturation_co2e: float

    barrel_co2e_per_litre: float
    warehouse_co2e_per_litre: float
    total_maturation_co2e_per_litre_output: float

    ethanol_lost_kg: float
    photochemical_ozone_kg: float

    barrel_co2e_per_bottle: float
    warehouse_co2e_per_bottle: float
    total_co2e_per_bottle: float
    photochemical_ozone_per_bottle: float

    methodology_notes: str
    materials: list[Material] = Field(default_factory=list)
