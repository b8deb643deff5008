"""Volume-based allocation of facility emissions to co-produced products.

``ratio = product_volume / total_volume`` and, for each of CO2e, water and
waste, ``per_unit = facility_total * ratio / product_volume``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, timedelta

from impact_engine.core.errors import (
    InvalidAllocationError,
    MissingDataError,
    ZeroVolumeError,
    require_finite,
)
from impact_engine.core.logging import get_logger
from impact_engine.modules.allocation.payload import (
    WASTE_PAYLOAD_PATHS,
    WATER_PAYLOAD_PATHS,
    resolve_payload_value,
)
from impact_engine.modules.allocation.schemas import (
    AllocationPeriod,
    AllocationRequest,
    AllocationResult,
    AllocationShareCheck,
    FacilityEmissionsSnapshot,
    FacilityIntensity,
)

logger = get_logger(__name__)

ALLOCATION_SHARE_TOLERANCE_PCT = 1.0


def allocate(
    snapshot: FacilityEmissionsSnapshot | None,
    total_volume: float,
    product_volume: float,
) -> AllocationResult:
    """Allocate a facility snapshot to one product by production volume.

    Raises:
        MissingDataError: If *snapshot* is ``None``.
        ZeroVolumeError: If *total_volume* is not positive.
        InvalidAllocationError: If *product_volume* is not in ``(0, total_volume]``.
    """
    if snapshot is None:
        raise MissingDataError("No facility emissions snapshot available for allocation")

    total = _positive_total_volume(total_volume)
    product = require_finite("product_production_volume", product_volume)
    if product <= 0:
        raise InvalidAllocationError(
            f"product_production_volume must be > 0, got {product}"
        )
    if product > total:
        raise InvalidAllocationError(
            f"product_production_volume ({product}) exceeds "
            f"total_production_volume ({total}) for facility '{snapshot.facility_name}'"
        )

    ratio = product / total
    water, water_path = resolve_payload_value(snapshot.results_payload, WATER_PAYLOAD_PATHS)
    waste, waste_path = resolve_payload_value(snapshot.results_payload, WASTE_PAYLOAD_PATHS)

    allocated_co2e = snapshot.total_co2e * ratio
    allocated_water = water * ratio
    allocated_waste = waste * ratio

    result = AllocationResult(
        facility_id=snapshot.facility_id,
        facility_name=snapshot.facility_name,
        reporting_period_start=snapshot.reporting_period_start,
        reporting_period_end=snapshot.reporting_period_end,
        total_production_volume=total,
        product_production_volume=product,
        allocation_ratio=ratio,
        allocated_co2e=allocated_co2e,
        allocated_water=allocated_water,
        allocated_waste=allocated_waste,
        co2e_per_unit=allocated_co2e / product,
        water_per_unit=allocated_water / product,
        waste_per_unit=allocated_waste / product,
        water_source_path=water_path,
        waste_source_path=waste_path,
        provenance_note=provenance_note(snapshot.facility_name, ratio),
    )
    logger.debug(
        "facility_allocated",
        facility_id=snapshot.facility_id,
        allocation_ratio=ratio,
        co2e_per_unit=result.co2e_per_unit,
    )
    return result


def allocate_request(request: AllocationRequest) -> AllocationResult:
    """``allocate`` over an ``AllocationRequest`` value object."""
    return allocate(
        request.snapshot,
        request.total_production_volume,
        request.product_production_volume,
    )


def provenance_note(facility_name: str, ratio: float) -> str:
    """Human-readable sentence describing where allocated impacts came from."""
    return (
        f"Impacts allocated from '{facility_name}' facility data, based on a "
        f"{ratio * 100:.2f}% share of its total annual production volume."
    )


def facility_intensity(
    snapshot: FacilityEmissionsSnapshot,
    total_volume: float,
) -> FacilityIntensity:
    """Per-litre CO2e, water and waste of a facility over its snapshot period.

    Raises:
        ZeroVolumeError: If *total_volume* is not positive.
    """
    total = _positive_total_volume(total_volume)
    water, _ = resolve_payload_value(snapshot.results_payload, WATER_PAYLOAD_PATHS)
    waste, _ = resolve_payload_value(snapshot.results_payload, WASTE_PAYLOAD_PATHS)
    return FacilityIntensity(
        facility_id=snapshot.facility_id,
        total_production_volume=total,
        co2e_per_litre=snapshot.total_co2e / total,
        water_per_litre=water / total,
        waste_per_litre=waste / total,
    )


def validate_allocation_shares(
    shares_pct: Sequence[float],
    tolerance_pct: float = ALLOCATION_SHARE_TOLERANCE_PCT,
) -> AllocationShareCheck:
    """Check that a product's production shares across sites sum to ~100%."""
    shares = [require_finite("share", share) for share in shares_pct]
    total = sum(shares)
    if total < 100 - tolerance_pct:
        status = "under_allocated"
    elif total > 100 + tolerance_pct:
        status = "over_allocated"
    else:
        status = "ok"
    if status != "ok":
        logger.warning("allocation_shares_out_of_tolerance", total_share_pct=total, status=status)
    return AllocationShareCheck(
        total_share_pct=total,
        tolerance_pct=tolerance_pct,
        status=status,
        shares_pct=shares,
    )


def select_authoritative_snapshot(
    snapshots: Iterable[FacilityEmissionsSnapshot],
    facility_id: str,
    period_start: date,
    period_end: date,
) -> FacilityEmissionsSnapshot | None:
    """Pick the snapshot that governs *facility_id* for a reporting period.

    An exact period match wins. Otherwise the overlapping snapshot with the
    latest period start (then latest capture time) is used.
    """
    candidates = [
        s
        for s in snapshots
        if s.facility_id == facility_id
        and s.reporting_period_start <= period_end
        and s.reporting_period_end >= period_start
    ]
    if not candidates:
        return None

    def _recency(snapshot: FacilityEmissionsSnapshot) -> tuple[date, float]:
        captured = snapshot.captured_at.timestamp() if snapshot.captured_at else 0.0
        return snapshot.reporting_period_start, captured

    exact = [
        s
        for s in candidates
        if s.reporting_period_start == period_start and s.reporting_period_end == period_end
    ]
    return max(exact or candidates, key=_recency)


def calculation_periods(today: date | None = None) -> list[AllocationPeriod]:
    """Standard reporting windows ending on *today*."""
    today = today or date.today()
    year_start = date(today.year, 1, 1)
    try:
        twelve_months_ago = today.replace(year=today.year - 1)
    except ValueError:
        # 29 February
        twelve_months_ago = today.replace(year=today.year - 1, day=28)
    return [
        AllocationPeriod(start_date=year_start, end_date=today, label="Year to Date"),
        AllocationPeriod(
            start_date=twelve_months_ago + timedelta(days=1),
            end_date=today,
            label="Last 12 Months",
        ),
        AllocationPeriod(
            start_date=date(today.year - 1, 1, 1),
            end_date=date(today.year - 1, 12, 31),
            label=f"Year {today.year - 1}",
        ),
    ]


def _positive_total_volume(total_volume: float) -> float:
    total = require_finite("total_production_volume", total_volume)
    if total <= 0:
        raise ZeroVolumeError(f"total_production_volume must be > 0, got {total}")
    return total
