"""Stateless lifecycle-stage aggregation of material impacts.

Every material is routed to exactly one of three buckets:

- packaging-category materials go to ``packaging``;
- maturation materials (``maturation-synthetic`` category or the
  ``[Maturation]`` name marker) go to ``processing``;
- everything else goes to ``raw_materials``.

Facility allocations (Scope 1/2) are added to ``processing``. The overall
total is the sum of the three bucket totals.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from impact_engine.core.logging import get_logger
from impact_engine.modules.allocation.schemas import AllocationResult
from impact_engine.modules.lca.schemas import (
    LIFECYCLE_STAGES,
    ImpactTotals,
    LCAResult,
    LifecycleStage,
    LifecycleStageBreakdown,
    Material,
    StageResult,
)

logger = get_logger(__name__)


def route_material(material: Material) -> LifecycleStage:
    """Return the lifecycle-stage bucket for *material*."""
    if material.category == "packaging":
        return "packaging"
    if material.is_maturation:
        return "processing"
    return "raw_materials"


class MaterialImpactAggregator:
    """Sums material and facility impacts into an ``LCAResult``.

    Usage::

        aggregator = MaterialImpactAggregator()
        result = aggregator.aggregate(materials, allocations=site_results)
    """

    def aggregate(
        self,
        materials: Sequence[Material],
        allocations: Iterable[AllocationResult] = (),
    ) -> LCAResult:
        """Partition *materials* by lifecycle stage and total their impacts."""
        members: dict[LifecycleStage, list[Material]] = {stage: [] for stage in LIFECYCLE_STAGES}
        totals: dict[LifecycleStage, ImpactTotals] = {
            stage: ImpactTotals() for stage in LIFECYCLE_STAGES
        }

        for material in materials:
            stage = route_material(material)
            members[stage].append(material)
            totals[stage] = totals[stage] + material.impacts

        site_results = list(allocations)
        facility_impacts = ImpactTotals()
        for site in site_results:
            facility_impacts = facility_impacts + ImpactTotals(
                climate=site.co2e_per_unit,
                water=site.water_per_unit,
                waste=site.waste_per_unit,
            )
        totals["processing"] = totals["processing"] + facility_impacts

        stages = LifecycleStageBreakdown(
            raw_materials=StageResult(
                impacts=totals["raw_materials"],
                materials=members["raw_materials"],
            ),
            processing=StageResult(
                impacts=totals["processing"],
                materials=members["processing"],
                facility_impacts=facility_impacts,
            ),
            packaging=StageResult(
                impacts=totals["packaging"],
                materials=members["packaging"],
            ),
        )

        overall = ImpactTotals()
        for stage in LIFECYCLE_STAGES:
            overall = overall + totals[stage]

        logger.debug(
            "material_impacts_aggregated",
            materials=len(materials),
            production_sites=len(site_results),
            total_climate=overall.climate,
            raw_materials_climate=totals["raw_materials"].climate,
            processing_climate=totals["processing"].climate,
            packaging_climate=totals["packaging"].climate,
        )

        return LCAResult(
            total=overall,
            stages=stages,
            materials_count=len(materials),
            production_sites_count=len(site_results),
            allocations=site_results,
        )
