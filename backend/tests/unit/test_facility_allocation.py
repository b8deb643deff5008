"""Unit tests for facility-to-product emissions allocation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

import pytest

from impact_engine.core.errors import InvalidAllocationError, MissingDataError, ZeroVolumeError
from impact_engine.modules.allocation import (
    WASTE_PAYLOAD_PATHS,
    WATER_PAYLOAD_PATHS,
    InMemorySnapshotLookup,
    allocate,
    allocate_request,
    calculation_periods,
    facility_intensity,
    resolve_payload_value,
    select_authoritative_snapshot,
    validate_allocation_shares,
)
from impact_engine.modules.allocation.schemas import AllocationRequest, FacilityEmissionsSnapshot


def _snapshot(
    *,
    facility_id: str = "site-1",
    total_co2e: float = 1000.0,
    payload: dict[str, Any] | None = None,
    start: date = date(2025, 1, 1),
    end: date = date(2025, 12, 31),
    captured_at: datetime | None = None,
) -> FacilityEmissionsSnapshot:
    return FacilityEmissionsSnapshot(
        facility_id=facility_id,
        facility_name="Speyside Distillery",
        total_co2e=total_co2e,
        reporting_period_start=start,
        reporting_period_end=end,
        results_payload=payload or {},
        captured_at=captured_at,
    )


class TestAllocate:
    def test_per_unit_values(self) -> None:
        snapshot = _snapshot(
            payload={
                "disaggregated_summary": {"total_water_consumption": 8000.0, "total_waste": 400.0}
            }
        )

        result = allocate(snapshot, total_volume=10_000, product_volume=2_500)

        assert result.allocation_ratio == pytest.approx(0.25)
        assert result.allocated_co2e == pytest.approx(250.0)
        assert result.co2e_per_unit == pytest.approx(0.1)
        assert result.water_per_unit == pytest.approx(0.8)
        assert result.waste_per_unit == pytest.approx(0.04)
        assert result.water_source_path == "disaggregated_summary.total_water_consumption"

    def test_provenance_note(self) -> None:
        result = allocate(_snapshot(), total_volume=3, product_volume=1)

        assert result.provenance_note == (
            "Impacts allocated from 'Speyside Distillery' facility data, based on a "
            "33.33% share of its total annual production volume."
        )
        assert result.allocation_percentage == 33.33

    def test_product_equal_to_total_is_allowed(self) -> None:
        result = allocate(_snapshot(), total_volume=500, product_volume=500)
        assert result.allocation_ratio == 1.0

    def test_missing_payload_fields_default_to_zero(self) -> None:
        result = allocate(_snapshot(payload={}), total_volume=100, product_volume=10)

        assert result.water_per_unit == 0.0
        assert result.waste_per_unit == 0.0
        assert result.water_source_path is None
        assert result.waste_source_path is None

    def test_missing_snapshot(self) -> None:
        with pytest.raises(MissingDataError):
            allocate(None, total_volume=100, product_volume=10)

    @pytest.mark.parametrize("total", [0, -5])
    def test_non_positive_total_volume(self, total: float) -> None:
        with pytest.raises(ZeroVolumeError):
            allocate(_snapshot(), total_volume=total, product_volume=1)

    def test_product_exceeding_total(self) -> None:
        with pytest.raises(InvalidAllocationError):
            allocate(_snapshot(), total_volume=100, product_volume=101)

    def test_non_positive_product_volume(self) -> None:
        with pytest.raises(InvalidAllocationError):
            allocate(_snapshot(), total_volume=100, product_volume=0)

    def test_allocate_request(self) -> None:
        request = AllocationRequest(
            snapshot=_snapshot(), total_production_volume=200, product_production_volume=50
        )
        assert allocate_request(request).co2e_per_unit == pytest.approx(5.0)


class TestPayloadPaths:
    @pytest.mark.parametrize(
        ("payload", "expected", "path"),
        [
            ({"disaggregated_summary": {"total_water_consumption": 10}}, 10.0,
             "disaggregated_summary.total_water_consumption"),
            ({"total_water_consumption": {"value": "12.5"}}, 12.5, "total_water_consumption.value"),
            ({"total_water_consumption": 7}, 7.0, "total_water_consumption"),
            ({"total_water_consumption": {"unit": "m3"}}, 0.0, None),
            ({}, 0.0, None),
        ],
    )
    def test_water_paths(self, payload: dict[str, Any], expected: float, path: str | None) -> None:
        assert resolve_payload_value(payload, WATER_PAYLOAD_PATHS) == (expected, path)

    def test_priority_order(self) -> None:
        payload = {
            "disaggregated_summary": {"total_waste": 3},
            "total_waste_generated": {"value": 99},
        }
        assert resolve_payload_value(payload, WASTE_PAYLOAD_PATHS) == (
            3.0,
            "disaggregated_summary.total_waste",
        )

    def test_zero_falls_through_to_next_path(self) -> None:
        payload = {"disaggregated_summary": {"total_waste": 0}, "total_waste_generated": 4}
        assert resolve_payload_value(payload, WASTE_PAYLOAD_PATHS) == (4.0, "total_waste_generated")

    def test_none_payload(self) -> None:
        assert resolve_payload_value(None, WATER_PAYLOAD_PATHS) == (0.0, None)


class TestFacilityIntensity:
    def test_per_litre(self) -> None:
        snapshot = _snapshot(total_co2e=500, payload={"total_waste_generated": 50})
        intensity = facility_intensity(snapshot, total_volume=1000)

        assert intensity.co2e_per_litre == pytest.approx(0.5)
        assert intensity.waste_per_litre == pytest.approx(0.05)
        assert intensity.water_per_litre == 0.0

    def test_zero_volume(self) -> None:
        with pytest.raises(ZeroVolumeError):
            facility_intensity(_snapshot(), total_volume=0)


class TestAllocationShares:
    @pytest.mark.parametrize(
        ("shares", "status"),
        [
            ([60, 40], "ok"),
            ([60, 39.5], "ok"),
            ([50, 40], "under_allocated"),
            ([70, 40], "over_allocated"),
        ],
    )
    def test_status(self, shares: list[float], status: str) -> None:
        assert validate_allocation_shares(shares).status == status


class TestSnapshotSelection:
    def test_exact_period_wins(self) -> None:
        exact = _snapshot(total_co2e=1)
        overlapping = _snapshot(total_co2e=2, start=date(2025, 6, 1), end=date(2026, 5, 31))

        chosen = select_authoritative_snapshot(
            [overlapping, exact], "site-1", date(2025, 1, 1), date(2025, 12, 31)
        )
        assert chosen is exact

    def test_most_recent_overlapping(self) -> None:
        older = _snapshot(total_co2e=1, start=date(2024, 1, 1), end=date(2024, 12, 31))
        newer = _snapshot(total_co2e=2, start=date(2025, 1, 1), end=date(2025, 12, 31))

        chosen = select_authoritative_snapshot(
            [newer, older], "site-1", date(2024, 7, 1), date(2025, 6, 30)
        )
        assert chosen is newer

    def test_latest_capture_breaks_ties(self) -> None:
        first = _snapshot(total_co2e=1, captured_at=datetime(2026, 1, 5))
        recaptured = _snapshot(total_co2e=2, captured_at=datetime(2026, 2, 1))

        chosen = select_authoritative_snapshot(
            [recaptured, first], "site-1", date(2025, 1, 1), date(2025, 12, 31)
        )
        assert chosen is recaptured

    def test_other_facility_ignored(self) -> None:
        lookup = InMemorySnapshotLookup([_snapshot(facility_id="site-2")])
        assert lookup.latest_snapshot("site-1", date(2025, 1, 1), date(2025, 12, 31)) is None


class TestCalculationPeriods:
    def test_standard_windows(self) -> None:
        periods = {p.label: p for p in calculation_periods(date(2026, 3, 15))}

        assert periods["Year to Date"].start_date == date(2026, 1, 1)
        assert periods["Last 12 Months"].start_date == date(2025, 3, 16)
        assert periods["Year 2025"].end_date == date(2025, 12, 31)

    def test_leap_day(self) -> None:
        periods = {p.label: p for p in calculation_periods(date(2028, 2, 29))}
        assert periods["Last 12 Months"].start_date == date(2027, 3, 1)
