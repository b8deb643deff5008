"""Pydantic schemas for packaging EPR recycling obligations."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PRNStatus = Literal["not_started", "partial", "fulfilled", "exceeded"]


class PRNTarget(BaseModel):
    """A published recycling target for one material and obligation year."""

    obligation_year: int
    material_code: str
    material_name: str
    recycling_target_pct: float = Field(ge=0.0, le=100.0)


class PRNObligation(BaseModel):
    """One material's recycling obligation for one year.

    Instances are never edited in place; purchases and recalculations return
    updated copies.
    """

    model_config = ConfigDict(frozen=True)

    organization_id: str
    obligation_year: int
    material_code: str
    material_name: str
    total_tonnage_placed: float = Field(ge=0.0)
    recycling_target_pct: float = Field(ge=0.0, le=100.0)
    obligation_tonnage: float
    prns_purchased_tonnage: float = 0.0
    prn_cost_per_tonne_gbp: float = Field(default=0.0, ge=0.0)
    total_prn_cost_gbp: float = Field(default=0.0, ge=0.0)
    status: PRNStatus


class PRNSummary(BaseModel):
    """Totals across a year's obligations."""

    total_obligation_tonnage: float
    total_purchased_tonnage: float
    total_remaining_tonnage: float
    total_spend_gbp: float
    fulfilment_pct: int
