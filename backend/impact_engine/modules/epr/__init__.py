"""Extended Producer Responsibility (EPR) packaging obligations."""

from impact_engine.modules.epr.calculator import (
    FULFILMENT_TOLERANCE,
    build_prn_obligations,
    obligation_tonnage,
    overall_fulfilment_pct,
    prn_cost,
    prn_status,
    recompute_obligation,
    record_prn_purchase,
    remaining_obligation,
    round_half_up,
    summarize_obligations,
    total_prn_spend,
)
from impact_engine.modules.epr.schemas import PRNObligation, PRNStatus, PRNSummary, PRNTarget

__all__ = [
    "FULFILMENT_TOLERANCE",
    "PRNObligation",
    "PRNStatus",
    "PRNSummary",
    "PRNTarget",
    "build_prn_obligations",
    "obligation_tonnage",
    "overall_fulfilment_pct",
    "prn_cost",
    "prn_status",
    "recompute_obligation",
    "record_prn_purchase",
    "remaining_obligation",
    "round_half_up",
    "summarize_obligations",
    "total_prn_spend",
]
