"""Snapshot lookup collaborator and an in-memory implementation."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Protocol

from impact_engine.modules.allocation.engine import select_authoritative_snapshot
from impact_engine.modules.allocation.schemas import FacilityEmissionsSnapshot


class SnapshotLookup(Protocol):
    """Fetches the authoritative emissions snapshot for a facility and period."""

    def latest_snapshot(
        self,
        facility_id: str,
        period_start: date,
        period_end: date,
    ) -> FacilityEmissionsSnapshot | None: ...


class InMemorySnapshotLookup:
    """``SnapshotLookup`` over snapshots already loaded by the caller."""

    def __init__(self, snapshots: Iterable[FacilityEmissionsSnapshot] = ()) -> None:
        self._snapshots = list(snapshots)

    def add(self, snapshot: FacilityEmissionsSnapshot) -> None:
        self._snapshots.append(snapshot)

    def latest_snapshot(
        self,
        facility_id: str,
        period_start: date,
        period_end: date,
    ) -> FacilityEmissionsSnapshot | None:
        return select_authoritative_snapshot(
            self._snapshots, facility_id, period_start, period_end
        )
