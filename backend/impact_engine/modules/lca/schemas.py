"""Pydantic schemas for product life-cycle impact aggregation."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from impact_engine.core.errors import UnsupportedUnitError
from impact_engine.modules.allocation.schemas import AllocationResult
from impact_engine.modules.data_quality.schemas import DataQualityResult, ProvenanceTier
from impact_engine.modules.units import normalize_any, unit_kind

MaterialCategory = Literal["ingredient", "packaging", "maturation-synthetic"]
PackagingCategory = Literal["container", "closure", "label", "secondary"]
LifecycleStage = Literal["raw_materials", "processing", "packaging"]

LIFECYCLE_STAGES: tuple[LifecycleStage, ...] = ("raw_materials", "processing", "packaging")

MATURATION_MARKER = "[Maturation]"

# A functional-unit count (e.g. "per bottle"); not a mass or volume.
COUNT_UNIT = "unit"


class ImpactFactors(BaseModel):
    """Impact per base unit (kg, L or counted unit) of a material."""

    model_config = ConfigDict(frozen=True)

    climate: float = Field(default=0.0, ge=0.0, description="kg CO2e")
    water: float = Field(default=0.0, ge=0.0, description="L")
    land: float = Field(default=0.0, ge=0.0, description="m2a crop eq")
    waste: float = Field(default=0.0, ge=0.0, description="kg")
    photochemical_ozone: float = Field(default=0.0, ge=0.0, description="kg NMVOC eq")


class ImpactTotals(BaseModel):
    """Summed impacts. Climate never includes photochemical ozone."""

    model_config = ConfigDict(frozen=True)

    climate: float = 0.0
    water: float = 0.0
    land: float = 0.0
    waste: float = 0.0
    photochemical_ozone: float = 0.0

    def __add__(self, other: ImpactTotals) -> ImpactTotals:
        return ImpactTotals(
            climate=self.climate + other.climate,
            water=self.water + other.water,
            land=self.land + other.land,
            waste=self.waste + other.waste,
            photochemical_ozone=self.photochemical_ozone + other.photochemical_ozone,
        )

    @classmethod
    def from_factors(cls, factors: ImpactFactors, quantity: float) -> ImpactTotals:
        return cls(
            climate=factors.climate * quantity,
            water=factors.water * quantity,
            land=factors.land * quantity,
            waste=factors.waste * quantity,
            photochemical_ozone=factors.photochemical_ozone * quantity,
        )


class Material(BaseModel):
    """A single line item consumed at one lifecycle stage.

    Immutable: recalculation produces new ``Material`` instances instead of
    editing attached ones.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    category: MaterialCategory
    quantity: float = Field(ge=0.0)
    unit: str
    factors: ImpactFactors = Field(default_factory=ImpactFactors)
    provenance: ProvenanceTier = "database-modelled"
    packaging_category: PackagingCategory | None = None

    data_priority: int | None = Field(default=None, ge=1, le=3)
    data_quality_tag: str | None = None
    impact_source: str | None = None
    source_reference: str | None = None
    methodology: str | None = None

    @field_validator("unit")
    @classmethod
    def _canonical_count_unit(cls, value: str) -> str:
        if value.strip().lower() == COUNT_UNIT:
            return COUNT_UNIT
        return value

    @model_validator(mode="after")
    def _convertible_unit(self) -> Self:
        # Counted units are reserved for per-bottle synthetic materials.
        if self.unit == COUNT_UNIT:
            if self.category != "maturation-synthetic":
                raise UnsupportedUnitError(
                    f"Unit '{COUNT_UNIT}' is only valid for maturation-synthetic materials; "
                    f"convert '{self.name}' to g, kg, ml or L"
                )
            return self
        unit_kind(self.unit)
        return self

    @property
    def is_maturation(self) -> bool:
        return self.category == "maturation-synthetic" or self.name.startswith(MATURATION_MARKER)

    @property
    def base_quantity(self) -> float:
        """Quantity in kg, L, or counted units."""
        if self.unit == COUNT_UNIT:
            return self.quantity
        quantity, _ = normalize_any(self.quantity, self.unit)
        return quantity

    @property
    def impacts(self) -> ImpactTotals:
        return ImpactTotals.from_factors(self.factors, self.base_quantity)


class StageResult(BaseModel):
    """Impacts and members of one lifecycle-stage bucket."""

    impacts: ImpactTotals = Field(default_factory=ImpactTotals)
    materials: list[Material] = Field(default_factory=list)
    facility_impacts: ImpactTotals = Field(
        default_factory=ImpactTotals,
        description="Per-unit facility (Scope 1/2) allocations included in impacts",
    )


class LifecycleStageBreakdown(BaseModel):
    """The three lifecycle-stage buckets every material is routed to."""

    raw_materials: StageResult = Field(default_factory=StageResult)
    processing: StageResult = Field(default_factory=StageResult)
    packaging: StageResult = Field(default_factory=StageResult)

    def stage(self, name: LifecycleStage) -> StageResult:
        return getattr(self, name)

    def items(self) -> Iterator[tuple[LifecycleStage, StageResult]]:
        for name in LIFECYCLE_STAGES:
            yield name, self.stage(name)


class LCAResult(BaseModel):
    """Aggregate impacts of one product, per functional unit."""

    total: ImpactTotals
    stages: LifecycleStageBreakdown
    materials_count: int = Field(ge=0)
    production_sites_count: int = Field(default=0, ge=0)
    allocations: list[AllocationResult] = Field(default_factory=list)
    data_quality: DataQualityResult | None = None

    @property
    def total_climate(self) -> float:
        return self.total.climate

    def with_data_quality(self, data_quality: DataQualityResult) -> Self:
        return self.model_copy(update={"data_quality": data_quality})
