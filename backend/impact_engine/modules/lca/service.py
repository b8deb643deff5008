"""Product LCA service: orchestrates the stateless calculators.

Resolves factors for a bill of materials, injects maturation materials,
allocates facility snapshots, aggregates by lifecycle stage and attaches a
graded data-quality score.
"""

from __future__ import annotations

from collections.abc import Sequence

from impact_engine.core.config import DataQualityBand, get_settings
from impact_engine.core.errors import MissingDataError
from impact_engine.core.logging import get_logger
from impact_engine.modules.allocation.engine import (
    allocate,
    calculation_periods,
    validate_allocation_shares,
)
from impact_engine.modules.allocation.lookup import SnapshotLookup
from impact_engine.modules.allocation.schemas import (
    AllocationPeriod,
    AllocationResult,
    AllocationShareCheck,
)
from impact_engine.modules.data_quality.scorer import DataQualityScorer, grade_result
from impact_engine.modules.defaults.loader import get_engine_defaults
from impact_engine.modules.defaults.schemas import EngineDefaults
from impact_engine.modules.lca.aggregator import MaterialImpactAggregator
from impact_engine.modules.lca.factors.loader import FactorDatabase, FactorLookup
from impact_engine.modules.lca.reports import (
    BillOfMaterialsLine,
    ProductionSiteInput,
    ProductLCAReport,
    ProductLCARequest,
)
from impact_engine.modules.lca.schemas import Material
from impact_engine.modules.maturation.calculator import MaturationCalculator

logger = get_logger(__name__)


class ProductLCAService:
    """Per-bottle impact calculation for one product.

    Usage::

        service = ProductLCAService(FactorDatabase(), InMemorySnapshotLookup(snapshots))
        report = service.calculate(request)
    """

    def __init__(
        self,
        factor_lookup: FactorLookup | None = None,
        snapshot_lookup: SnapshotLookup | None = None,
        *,
        defaults: EngineDefaults | None = None,
        bands: Sequence[DataQualityBand] | None = None,
    ) -> None:
        settings = get_settings()
        self._defaults = defaults or get_engine_defaults()
        self._factors = factor_lookup or FactorDatabase(settings.factor_database_path or None)
        self._snapshots = snapshot_lookup
        self._bands = list(bands) if bands is not None else list(settings.data_quality_bands)
        self._maturation = MaturationCalculator(self._defaults)
        self._aggregator = MaterialImpactAggregator()
        self._scorer = DataQualityScorer(self._defaults)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def calculate(self, request: ProductLCARequest) -> ProductLCAReport:
        """Calculate per-bottle impacts for *request*.

        Raises:
            MissingDataError: If a material has no factors or a production
                site has no emissions snapshot for the period.
            ValidationError: On malformed quantities, units or volumes.
        """
        materials = [self._resolve_line(line) for line in request.materials]

        bottle_size = self._maturation.bottle_size_from_unit_size(
            request.unit_size_value, request.unit_size_unit
        )
        maturation = self._maturation.calculate(request.maturation, bottle_size)
        if maturation is not None:
            materials.extend(maturation.materials)

        period: AllocationPeriod | None = None
        allocations: list[AllocationResult] = []
        share_check: AllocationShareCheck | None = None
        if request.production_sites:
            period = request.reporting_period or _default_period()
            allocations = [self._allocate_site(site, period) for site in request.production_sites]
            share_check = self._check_shares(request.production_sites)

        lca = self._aggregator.aggregate(materials, allocations)
        quality = grade_result(self._scorer.score_materials(materials), self._bands)
        lca = lca.with_data_quality(quality)

        logger.info(
            "product_lca_calculated",
            product=request.product_name,
            materials=lca.materials_count,
            production_sites=lca.production_sites_count,
            total_climate=round(lca.total_climate, 6),
            data_quality_score=round(quality.score, 2),
            data_quality_label=quality.label,
            defaults_version=self._defaults.version,
        )

        return ProductLCAReport(
            product_name=request.product_name,
            lca=lca,
            maturation=maturation,
            allocations=allocations,
            allocation_share_check=share_check,
            reporting_period=period,
            defaults_version=self._defaults.version,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_line(self, line: BillOfMaterialsLine) -> Material:
        factors = line.factors
        if factors is None:
            factors = self._factors.lookup(line.name)
            if factors is None:
                raise MissingDataError(f"No impact factors found for material '{line.name}'")

        return Material(
            name=line.name,
            category=line.category,
            quantity=line.quantity,
            unit=line.unit,
            factors=factors,
            provenance=line.provenance,
            packaging_category=line.packaging_category,
            data_priority=line.data_priority,
            source_reference=line.source_reference,
        )

    def _allocate_site(
        self,
        site: ProductionSiteInput,
        period: AllocationPeriod,
    ) -> AllocationResult:
        if self._snapshots is None:
            raise MissingDataError("No snapshot lookup configured for production site allocation")

        snapshot = self._snapshots.latest_snapshot(
            site.facility_id, period.start_date, period.end_date
        )
        if snapshot is None:
            raise MissingDataError(
                f"No emissions snapshot for facility '{site.facility_id}' "
                f"between {period.start_date} and {period.end_date}"
            )

        total_volume = site.total_production_volume
        if total_volume is None:
            total_volume = snapshot.total_production_volume
        if total_volume is None:
            raise MissingDataError(
                f"No total production volume for facility '{site.facility_id}'"
            )

        result = allocate(snapshot, total_volume, site.product_production_volume)
        for field, path in (
            ("water", result.water_source_path),
            ("waste", result.waste_source_path),
        ):
            if path is None:
                logger.info(
                    "facility_payload_field_defaulted",
                    facility_id=site.facility_id,
                    field=field,
                    value=0.0,
                )
        return result

    @staticmethod
    def _check_shares(sites: Sequence[ProductionSiteInput]) -> AllocationShareCheck | None:
        shares = [site.share_pct for site in sites]
        if any(share is None for share in shares):
            return None
        return validate_allocation_shares([share for share in shares if share is not None])


def _default_period() -> AllocationPeriod:
    return next(p for p in calculation_periods() if p.label == "Last 12 Months")
