"""Request and report shapes for whole-product LCA calculation.

Kept apart from ``lca.schemas`` because they reference maturation types,
which themselves build on ``lca.schemas``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from impact_engine.modules.allocation.schemas import (
    AllocationPeriod,
    AllocationResult,
    AllocationShareCheck,
)
from impact_engine.modules.data_quality.schemas import ProvenanceTier
from impact_engine.modules.lca.schemas import (
    ImpactFactors,
    LCAResult,
    MaterialCategory,
    PackagingCategory,
)
from impact_engine.modules.maturation.schemas import MaturationProfile, MaturationResult


class BillOfMaterialsLine(BaseModel):
    """One ingredient or packaging line per functional unit (one bottle)."""

    name: str = Field(min_length=1)
    category: MaterialCategory = "ingredient"
    quantity: float = Field(ge=0.0)
    unit: str
    packaging_category: PackagingCategory | None = None
    provenance: ProvenanceTier = "database-modelled"
    factors: ImpactFactors | None = Field(
        default=None,
        description="Supplier or primary factors; looked up by name when unset",
    )
    data_priority: int | None = Field(default=None, ge=1, le=3)
    source_reference: str | None = None


class ProductionSiteInput(BaseModel):
    """A facility that produces the product, with the volumes to allocate by.

    Volumes must be in the product's functional unit for per-unit figures to
    be per bottle.
    """

    facility_id: str
    product_production_volume: float
    total_production_volume: float | None = Field(
        default=None,
        description="Facility total; the snapshot's own volume is used when unset",
    )
    share_pct: float | None = Field(
        default=None,
        ge=0.0,
        le=100.0,
        description="Share of the product's output made at this site",
    )


class ProductLCARequest(BaseModel):
    """Everything needed to calculate one product's impacts per bottle."""

    product_name: str
    unit_size_value: float | None = Field(default=None, gt=0.0)
    unit_size_unit: str | None = None
    materials: list[BillOfMaterialsLine] = Field(default_factory=list)
    maturation: MaturationProfile | None = None
    production_sites: list[ProductionSiteInput] = Field(default_factory=list)
    reporting_period: AllocationPeriod | None = Field(
        default=None,
        description="Snapshot period for site allocation; last 12 months when unset",
    )


class ProductLCAReport(BaseModel):
    """Result of ``ProductLCAService.calculate``."""

    product_name: str
    lca: LCAResult
    maturation: MaturationResult | None = None
    allocations: list[AllocationResult] = Field(default_factory=list)
    allocation_share_check: AllocationShareCheck | None = None
    reporting_period: AllocationPeriod | None = None
    defaults_version: str
