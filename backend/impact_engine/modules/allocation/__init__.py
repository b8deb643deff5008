"""Facility (Scope 1/2) emissions allocation to products."""

from impact_engine.modules.allocation.engine import (
    allocate,
    allocate_request,
    calculation_periods,
    facility_intensity,
    provenance_note,
    select_authoritative_snapshot,
    validate_allocation_shares,
)
from impact_engine.modules.allocation.lookup import InMemorySnapshotLookup, SnapshotLookup
from impact_engine.modules.allocation.payload import (
    WASTE_PAYLOAD_PATHS,
    WATER_PAYLOAD_PATHS,
    PayloadPath,
    resolve_payload_value,
)

__all__ = [
    "InMemorySnapshotLookup",
    "PayloadPath",
    "SnapshotLookup",
    "WASTE_PAYLOAD_PATHS",
    "WATER_PAYLOAD_PATHS",
    "allocate",
    "allocate_request",
    "calculation_periods",
    "facility_intensity",
    "provenance_note",
    "resolve_payload_value",
    "select_authoritative_snapshot",
    "validate_allocation_shares",
]
