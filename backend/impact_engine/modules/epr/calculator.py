"""Packaging Recovery Note (PRN) obligation calculations.

Converts packaging tonnage placed on the market into recycling obligations
and tracks fulfilment against purchased PRNs. All functions are pure.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from impact_engine.core.errors import ValidationError, require_finite
from impact_engine.core.logging import get_logger
from impact_engine.core.rounding import round_half_up
from impact_engine.modules.epr.schemas import PRNObligation, PRNStatus, PRNSummary, PRNTarget

logger = get_logger(__name__)

# Purchases within +/-0.1% of the obligation count as fulfilled.
FULFILMENT_TOLERANCE = 0.001


def obligation_tonnage(tonnage_placed: float, target_pct: float) -> float:
    """Tonnes that must be recycled: ``tonnage_placed * target_pct / 100``."""
    placed = require_finite("tonnage_placed", tonnage_placed)
    target = require_finite("target_pct", target_pct)
    if placed < 0:
        raise ValidationError(f"tonnage_placed must be >= 0, got {placed}")
    if not 0 <= target <= 100:
        raise ValidationError(f"target_pct must be within [0, 100], got {target}")
    return round_half_up(placed * target / 100, 3)


def prn_status(obligation: float, purchased: float) -> PRNStatus:
    """Fulfilment status of an obligation given tonnes of PRNs purchased."""
    if obligation <= 0:
        return "fulfilled"
    if purchased <= 0:
        return "not_started"
    if purchased > obligation * (1 + FULFILMENT_TOLERANCE):
        return "exceeded"
    if purchased >= obligation * (1 - FULFILMENT_TOLERANCE):
        return "fulfilled"
    return "partial"


def remaining_obligation(obligation: float, purchased: float) -> float:
    """Tonnes still to buy; never negative."""
    return max(0.0, round_half_up(obligation - purchased, 3))


def prn_cost(tonnage: float, cost_per_tonne: float) -> float:
    """Cost in GBP of *tonnage* PRNs at *cost_per_tonne*."""
    return round_half_up(tonnage * cost_per_tonne, 2)


def build_prn_obligations(
    tonnage_by_material: Mapping[str, float],
    targets: Iterable[PRNTarget],
    organization_id: str,
    obligation_year: int,
) -> list[PRNObligation]:
    """One obligation per target material for *obligation_year*.

    Materials without placed tonnage get a zero obligation, which is
    ``fulfilled``; all others start ``not_started``.
    """
    obligations: list[PRNObligation] = []
    for target in targets:
        if target.obligation_year != obligation_year:
            continue
        placed = float(tonnage_by_material.get(target.material_code, 0.0))
        obligations.append(
            PRNObligation(
                organization_id=organization_id,
                obligation_year=obligation_year,
                material_code=target.material_code,
                material_name=target.material_name,
                total_tonnage_placed=placed,
                recycling_target_pct=target.recycling_target_pct,
                obligation_tonnage=obligation_tonnage(placed, target.recycling_target_pct),
                prns_purchased_tonnage=0.0,
                prn_cost_per_tonne_gbp=0.0,
                total_prn_cost_gbp=0.0,
                status="not_started" if placed > 0 else "fulfilled",
            )
        )

    logger.info(
        "prn_obligations_built",
        organization_id=organization_id,
        obligation_year=obligation_year,
        obligations=len(obligations),
    )
    return obligations


def record_prn_purchase(
    obligation: PRNObligation,
    tonnage: float,
    cost_per_tonne: float,
) -> PRNObligation:
    """Return *obligation* with a PRN purchase applied.

    Purchased tonnage and total cost accumulate; the per-tonne cost reflects
    the latest purchase and the status is recomputed.
    """
    bought = require_finite("tonnage", tonnage)
    rate = require_finite("cost_per_tonne", cost_per_tonne)
    if bought <= 0:
        raise ValidationError(f"purchased tonnage must be > 0, got {bought}")
    if rate < 0:
        raise ValidationError(f"cost_per_tonne must be >= 0, got {rate}")

    purchased = round_half_up(obligation.prns_purchased_tonnage + bought, 3)
    return obligation.model_copy(
        update={
            "prns_purchased_tonnage": purchased,
            "prn_cost_per_tonne_gbp": rate,
            "total_prn_cost_gbp": round_half_up(
                obligation.total_prn_cost_gbp + prn_cost(bought, rate), 2
            ),
            "status": prn_status(obligation.obligation_tonnage, purchased),
        }
    )


def recompute_obligation(
    obligation: PRNObligation,
    *,
    tonnage_placed: float | None = None,
    target_pct: float | None = None,
) -> PRNObligation:
    """Recompute obligation tonnage and status after source data changes."""
    placed = obligation.total_tonnage_placed if tonnage_placed is None else tonnage_placed
    target = obligation.recycling_target_pct if target_pct is None else target_pct
    new_obligation = obligation_tonnage(placed, target)
    return obligation.model_copy(
        update={
            "total_tonnage_placed": placed,
            "recycling_target_pct": target,
            "obligation_tonnage": new_obligation,
            "status": prn_status(new_obligation, obligation.prns_purchased_tonnage),
        }
    )


def total_prn_spend(obligations: Sequence[PRNObligation]) -> float:
    """Sum of PRN spend in GBP across *obligations*."""
    return round_half_up(sum(o.total_prn_cost_gbp for o in obligations), 2)


def overall_fulfilment_pct(obligations: Sequence[PRNObligation]) -> int:
    """Purchased over obligated tonnage as a whole percentage, capped at 100.

    Returns 100 when nothing is owed.
    """
    total_obligation = sum(o.obligation_tonnage for o in obligations)
    if total_obligation <= 0:
        return 100
    total_purchased = sum(o.prns_purchased_tonnage for o in obligations)
    return int(min(100, round_half_up(total_purchased / total_obligation * 100, 0)))


def summarize_obligations(obligations: Sequence[PRNObligation]) -> PRNSummary:
    """Year-level totals for a set of obligations."""
    total_obligation = sum(o.obligation_tonnage for o in obligations)
    total_purchased = sum(o.prns_purchased_tonnage for o in obligations)
    return PRNSummary(
        total_obligation_tonnage=round_half_up(total_obligation, 3),
        total_purchased_tonnage=round_half_up(total_purchased, 3),
        total_remaining_tonnage=round_half_up(
            sum(
                remaining_obligation(o.obligation_tonnage, o.prns_purchased_tonnage)
                for o in obligations
            ),
            3,
        ),
        total_spend_gbp=total_prn_spend(obligations),
        fulfilment_pct=overall_fulfilment_pct(obligations),
    )
