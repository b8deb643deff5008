"""Pydantic schemas for facility-to-product emissions allocation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal, Self

from pydantic import BaseModel, Field, model_validator

AllocationShareStatus = Literal["ok", "under_allocated", "over_allocated"]


class AllocationPeriod(BaseModel):
    """A named reporting window."""

    start_date: date
    end_date: date
    label: str

    @model_validator(mode="after")
    def _ordered(self) -> Self:
        if self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


class FacilityEmissionsSnapshot(BaseModel):
    """A facility's aggregated emissions for one reporting period.

    Values are period totals. Water and waste live in ``results_payload``,
    whose shape varies between legacy writers; see ``allocation.payload``.
    """

    facility_id: str
    facility_name: str
    total_co2e: float = Field(ge=0.0, description="kg CO2e for the period")
    reporting_period_start: date
    reporting_period_end: date
    results_payload: dict[str, Any] = Field(default_factory=dict)
    total_production_volume: float | None = Field(default=None, ge=0.0)
    captured_at: datetime | None = None

    @model_validator(mode="after")
    def _ordered(self) -> Self:
        if self.reporting_period_end < self.reporting_period_start:
            raise ValueError("reporting_period_end must not precede reporting_period_start")
        return self


class AllocationRequest(BaseModel):
    """Inputs of one volume-based allocation."""

    snapshot: FacilityEmissionsSnapshot | None
    total_production_volume: float
    product_production_volume: float


class AllocationResult(BaseModel):
    """Per-unit facility impacts attributed to one product."""

    facility_id: str
    facility_name: str
    reporting_period_start: date
    reporting_period_end: date
    total_production_volume: float
    product_production_volume: float
    allocation_ratio: float = Field(ge=0.0, le=1.0)
    allocated_co2e: float
    allocated_water: float
    allocated_waste: float
    co2e_per_unit: float
    water_per_unit: float
    waste_per_unit: float
    water_source_path: str | None = Field(
        default=None,
        description="Payload path that supplied water; None when defaulted to zero",
    )
    waste_source_path: str | None = Field(
        default=None,
        description="Payload path that supplied waste; None when defaulted to zero",
    )
    provenance_note: str

    @property
    def allocation_percentage(self) -> float:
        return round(self.allocation_ratio * 100, 2)


class FacilityIntensity(BaseModel):
    """Per-litre impact intensity of a facility for a reporting period."""

    facility_id: str
    total_production_volume: float
    co2e_per_litre: float
    water_per_litre: float
    waste_per_litre: float


class AllocationShareCheck(BaseModel):
    """Result of checking that production shares sum to 100%."""

    total_share_pct: float
    tolerance_pct: float
    status: AllocationShareStatus
    shares_pct: list[float] = Field(default_factory=list)
