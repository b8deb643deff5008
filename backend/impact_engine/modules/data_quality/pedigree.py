"""Pedigree-matrix data-quality assessment (ISO 14044 4.2.3.6).

Each material's factor is scored 1 (best) to 5 (worst) on reliability,
completeness, temporal, geographical and technological representativeness
(Weidema & Wesnaes). The scores give a 0-100 DQI and, with the ecoinvent
basic and pedigree variances, a lognormal uncertainty. Footprint-level
figures are weighted by each material's share of absolute impact.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from impact_engine.core.logging import get_logger
from impact_engine.core.rounding import round_half_up
from impact_engine.modules.data_quality.schemas import (
    PEDIGREE_DIMENSIONS,
    SOURCE_TIERS,
    AggregateDataQuality,
    Confidence,
    ConfidenceInterval,
    GeographicMatch,
    MaterialDataQuality,
    MaterialQualityInput,
    PedigreeAggregate,
    PedigreeDimension,
    PedigreeMatrix,
    QualityFlag,
    QualityGrade,
    SourceTier,
    SourceTierShare,
    TemporalCoverage,
    TemporalRepresentativeness,
    UncertaintyFactors,
)

logger = get_logger(__name__)

# Basic lognormal sigma by flow type (ecoinvent).
BASIC_UNCERTAINTY: dict[str, float] = {
    "combustion_emissions": 0.05,
    "process_emissions": 0.10,
    "agricultural_emissions": 0.20,
    "transport_emissions": 0.10,
    "electricity_use": 0.05,
    "material_inputs": 0.10,
    "packaging_materials": 0.10,
    "water_use": 0.15,
    "waste_generation": 0.20,
    "land_use": 0.30,
    "default": 0.15,
}

# Variance added per pedigree score (Frischknecht et al. 2007).
PEDIGREE_UNCERTAINTY: dict[PedigreeDimension, dict[int, float]] = {
    "reliability": {1: 0.0, 2: 0.0006, 3: 0.002, 4: 0.008, 5: 0.04},
    "completeness": {1: 0.0, 2: 0.0001, 3: 0.0006, 4: 0.002, 5: 0.008},
    "temporal": {1: 0.0, 2: 0.0002, 3: 0.002, 4: 0.008, 5: 0.04},
    "geographical": {1: 0.0, 2: 0.000025, 3: 0.0001, 4: 0.0006, 5: 0.002},
    "technological": {1: 0.0, 2: 0.0006, 3: 0.008, 4: 0.04, 5: 0.12},
}

_GRADE_PEDIGREE: dict[QualityGrade, int] = {"HIGH": 2, "MEDIUM": 3, "LOW": 4}

_Z_95 = 1.96

# fmt: off
EU_COUNTRIES = frozenset(
    {
        "AT", "BE", "BG", "HR", "CY", "CZ", "DK", "EE", "FI", "FR", "DE", "GR", "HU", "IE",
        "IT", "LV", "LT", "LU", "MT", "NL", "PL", "PT", "RO", "SK", "SI", "ES", "SE",
    }
)
# fmt: on
_REGIONAL_GROUPS = (
    frozenset({"US", "CA", "MX"}),
    frozenset({"TH", "VN", "ID", "MY", "PH", "SG"}),
)

# Footprint thresholds, percent of absolute impact.
STALE_SHARE_LIMIT = 20
LOW_QUALITY_SHARE_LIMIT = 30
UNCERTAINTY_LIMIT = 40
LOW_PRIMARY_SHARE = 20
HIGH_UNCERTAINTY_SIGMA = 0.5


@dataclass(frozen=True)
class TemporalScore:
    score: int
    is_stale: bool
    is_very_stale: bool


@dataclass(frozen=True)
class GeographicalScore:
    score: int
    is_exact_match: bool
    is_regional_match: bool


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def pedigree_dqi(pedigree: PedigreeMatrix) -> int:
    """0-100 index: all 1s score 100, all 5s score 0."""
    return int(round_half_up(100 - (pedigree.total - 5) / 20 * 100, 0))


def grade_to_default_pedigree(grade: QualityGrade) -> PedigreeMatrix:
    return PedigreeMatrix.uniform(_GRADE_PEDIGREE[grade])


def temporal_score(data_year: int | None, reference_year: int) -> TemporalScore:
    """Score data age: under 3 years is 1, 15 or more (or unknown) is 5."""
    if not data_year:
        return TemporalScore(5, is_stale=True, is_very_stale=True)
    age = abs(reference_year - data_year)
    if age < 3:
        return TemporalScore(1, is_stale=False, is_very_stale=False)
    if age < 6:
        return TemporalScore(2, is_stale=False, is_very_stale=False)
    if age < 10:
        return TemporalScore(3, is_stale=True, is_very_stale=False)
    if age < 15:
        return TemporalScore(4, is_stale=True, is_very_stale=True)
    return TemporalScore(5, is_stale=True, is_very_stale=True)


def geographical_score(data_region: str, study_region: str) -> GeographicalScore:
    """Score how well the data region represents the study region."""
    data = data_region.strip().upper()
    study = study_region.strip().upper()
    if data == study:
        return GeographicalScore(1, is_exact_match=True, is_regional_match=True)

    if (
        (data == "EU" and study in EU_COUNTRIES)
        or (study == "EU" and data in EU_COUNTRIES)
        or (data in EU_COUNTRIES and study in EU_COUNTRIES)
    ):
        return GeographicalScore(2, is_exact_match=False, is_regional_match=True)

    if "GLO" in (data, study):
        return GeographicalScore(3, is_exact_match=False, is_regional_match=False)

    if any(data in group and study in group for group in _REGIONAL_GROUPS):
        return GeographicalScore(3, is_exact_match=False, is_regional_match=True)

    return GeographicalScore(4, is_exact_match=False, is_regional_match=False)


def calculate_uncertainty(
    pedigree: PedigreeMatrix,
    flow_type: str = "default",
    explicit_percent: float | None = None,
) -> UncertaintyFactors:
    """Lognormal sigma of a data point and its 95% interval multipliers.

    A positive *explicit_percent* (e.g. from a verified EPD) replaces the
    pedigree-derived estimate. Unknown flow types use the default basic
    uncertainty.
    """
    if explicit_percent is not None and explicit_percent > 0:
        basic = explicit_percent / 100
        pedigree_sigma = 0.0
        total = basic
    else:
        basic_variance = BASIC_UNCERTAINTY.get(flow_type, BASIC_UNCERTAINTY["default"]) ** 2
        pedigree_variance = sum(
            PEDIGREE_UNCERTAINTY[dimension][getattr(pedigree, dimension)]
            for dimension in PEDIGREE_DIMENSIONS
        )
        basic = math.sqrt(basic_variance)
        pedigree_sigma = math.sqrt(pedigree_variance)
        total = math.sqrt(basic_variance + pedigree_variance)

    return UncertaintyFactors(
        basic=basic,
        pedigree=pedigree_sigma,
        total=total,
        confidence_interval_95=ConfidenceInterval(
            lower=math.exp(-_Z_95 * total),
            upper=math.exp(_Z_95 * total),
        ),
    )


def assess_material(item: MaterialQualityInput) -> MaterialDataQuality:
    """Pedigree, DQI, uncertainty and flags for one material's factor."""
    reference_year = item.reference_year or date.today().year
    temporal = temporal_score(item.data_year, reference_year)
    geographical = geographical_score(item.data_region, item.study_region)

    derived = grade_to_default_pedigree(item.quality_grade).model_dump()
    derived["temporal"] = temporal.score
    derived["geographical"] = geographical.score
    pedigree = PedigreeMatrix(**{**derived, **item.pedigree})

    uncertainty = calculate_uncertainty(pedigree, "material_inputs", item.uncertainty_percent)

    flags: list[str] = []
    if temporal.is_very_stale:
        flags.append("DATA_VERY_STALE: Data is >6 years old")
    elif temporal.is_stale:
        flags.append("DATA_STALE: Data is >3 years old")
    if geographical.score >= 4:
        flags.append("GEO_MISMATCH: Data from different geographic region")
    if item.quality_grade == "LOW":
        flags.append("LOW_QUALITY: Factor has low data quality grade")
    if uncertainty.total > HIGH_UNCERTAINTY_SIGMA:
        flags.append("HIGH_UNCERTAINTY: Uncertainty exceeds 50%")

    if item.uncertainty_percent:
        uncertainty_percent = item.uncertainty_percent
    else:
        uncertainty_percent = round_half_up(uncertainty.total * 100, 0)

    return MaterialDataQuality(
        material_name=item.material_name,
        material_id=item.material_id,
        impact_value=item.impact_value,
        impact_unit=item.impact_unit,
        data_source=item.data_source,
        data_source_tier=item.data_source_tier,
        quality_grade=item.quality_grade,
        pedigree_matrix=pedigree,
        pedigree_dqi=pedigree_dqi(pedigree),
        uncertainty_percent=uncertainty_percent,
        uncertainty=uncertainty,
        temporal=TemporalRepresentativeness(
            data_year=item.data_year,
            reference_year=reference_year,
            years_difference=abs(reference_year - item.data_year) if item.data_year else None,
            is_stale=temporal.is_stale,
            is_very_stale=temporal.is_very_stale,
        ),
        geographic=GeographicMatch(
            data_region=item.data_region,
            study_region=item.study_region,
            is_exact_match=geographical.is_exact_match,
            is_regional_match=geographical.is_regional_match,
        ),
        flags=flags,
    )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def propagate_uncertainty(materials: Sequence[MaterialDataQuality], total_impact: float) -> float:
    """Root-sum-of-squares of impact-weighted sigmas, as a whole percent."""
    if total_impact == 0:
        return 0.0
    variance = sum(
        (m.impact_value / total_impact) ** 2 * m.uncertainty.total**2 for m in materials
    )
    return round_half_up(math.sqrt(variance) * 100, 0)


def _share_pct(part: float, total: float) -> float:
    return round_half_up(part / total * 100, 0)


def _empty_assessment() -> AggregateDataQuality:
    return AggregateDataQuality(
        overall_dqi=0,
        overall_confidence="LOW",
        weighted_uncertainty=100.0,
        source_breakdown={tier: SourceTierShare() for tier in SOURCE_TIERS},
        pedigree_aggregate=PedigreeAggregate(
            **{dimension: 5.0 for dimension in PEDIGREE_DIMENSIONS}
        ),
        temporal_coverage=TemporalCoverage(),
        quality_flags=[
            QualityFlag(severity="critical", code="NO_DATA", message="No materials to assess")
        ],
        iso_compliant=False,
        compliance_gaps=["No materials added"],
    )


def assess_aggregate(
    materials: Sequence[MaterialDataQuality],
    reference_year: int | None = None,
) -> AggregateDataQuality:
    """Impact-weighted DQI, uncertainty, flags and ISO 14044 gaps of a footprint.

    Weights are each material's share of summed absolute impact. An empty
    list, or one whose impacts are all zero, yields the ``NO_DATA``
    assessment.
    """
    total_impact = sum(abs(m.impact_value) for m in materials)
    if not materials or total_impact == 0:
        return _empty_assessment()

    reference_year = reference_year or date.today().year
    weights = [abs(m.impact_value) / total_impact for m in materials]

    overall_dqi = int(
        round_half_up(sum(m.pedigree_dqi * w for m, w in zip(materials, weights)), 0)
    )

    breakdown: dict[SourceTier, SourceTierShare] = {}
    for tier in SOURCE_TIERS:
        in_tier = [w for m, w in zip(materials, weights) if m.data_source_tier == tier]
        breakdown[tier] = SourceTierShare(
            count=len(in_tier), impact_share=round_half_up(sum(in_tier) * 100, 0)
        )

    pedigree_aggregate = PedigreeAggregate(
        **{
            dimension: round_half_up(
                sum(getattr(m.pedigree_matrix, dimension) * w for m, w in zip(materials, weights)),
                1,
            )
            for dimension in PEDIGREE_DIMENSIONS
        }
    )

    years = [m.temporal.data_year for m in materials if m.temporal.data_year is not None]
    stale = [m for m in materials if m.temporal.is_stale]
    temporal_coverage = TemporalCoverage(
        oldest_data=min(years) if years else None,
        newest_data=max(years) if years else None,
        average_age=(
            int(round_half_up(sum(reference_year - y for y in years) / len(years), 0))
            if years
            else None
        ),
        stale_material_count=len(stale),
        stale_impact_share=_share_pct(sum(abs(m.impact_value) for m in stale), total_impact),
    )

    weighted_uncertainty = propagate_uncertainty(materials, total_impact)
    primary_share = breakdown["primary_verified"].impact_share

    flags: list[QualityFlag] = []
    gaps: list[str] = []

    if temporal_coverage.stale_impact_share > STALE_SHARE_LIMIT:
        flags.append(
            QualityFlag(
                severity="warning",
                code="STALE_DATA",
                message=(
                    f"{temporal_coverage.stale_impact_share:g}% of impact uses data "
                    ">3 years old"
                ),
                affected_materials=[m.material_name for m in stale],
            )
        )
        gaps.append(
            "ISO 14044 4.2.3.6: Temporal representativeness - significant data is outdated"
        )

    low_quality = [m for m in materials if m.quality_grade == "LOW"]
    low_quality_share = _share_pct(sum(abs(m.impact_value) for m in low_quality), total_impact)
    if low_quality_share > LOW_QUALITY_SHARE_LIMIT:
        flags.append(
            QualityFlag(
                severity="warning",
                code="LOW_QUALITY_DATA",
                message=f"{low_quality_share:g}% of impact uses LOW quality data",
                affected_materials=[m.material_name for m in low_quality],
            )
        )
        gaps.append(
            "ISO 14044 4.2.3.6: Data quality - significant reliance on low-quality estimates"
        )

    mismatched = [m for m in materials if m.pedigree_matrix.geographical >= 4]
    if mismatched:
        flags.append(
            QualityFlag(
                severity="info",
                code="GEO_MISMATCH",
                message=(
                    f"{len(mismatched)} material(s) use data from different geographic regions"
                ),
                affected_materials=[m.material_name for m in mismatched],
            )
        )

    if weighted_uncertainty > UNCERTAINTY_LIMIT:
        flags.append(
            QualityFlag(
                severity="warning",
                code="HIGH_UNCERTAINTY",
                message=(
                    f"Overall uncertainty is {weighted_uncertainty:g}% "
                    f"(recommend <{UNCERTAINTY_LIMIT}%)"
                ),
            )
        )
        gaps.append(
            "ISO 14044 4.5.3.3: Uncertainty analysis - overall uncertainty exceeds "
            "recommended threshold"
        )

    if primary_share < LOW_PRIMARY_SHARE:
        flags.append(
            QualityFlag(
                severity="info",
                code="LOW_PRIMARY_DATA",
                message=f"Only {primary_share:g}% of impact uses verified primary data",
            )
        )

    confidence: Confidence
    if overall_dqi >= 80 and weighted_uncertainty <= 30 and primary_share >= 50:
        confidence = "HIGH"
    elif overall_dqi >= 60 and weighted_uncertainty <= 50:
        confidence = "MEDIUM"
    else:
        confidence = "LOW"

    result = AggregateDataQuality(
        overall_dqi=overall_dqi,
        overall_confidence=confidence,
        weighted_uncertainty=weighted_uncertainty,
        source_breakdown=breakdown,
        pedigree_aggregate=pedigree_aggregate,
        temporal_coverage=temporal_coverage,
        quality_flags=flags,
        iso_compliant=not gaps and overall_dqi >= 60,
        compliance_gaps=gaps,
    )
    logger.debug(
        "aggregate_data_quality_assessed",
        material_count=len(materials),
        overall_dqi=overall_dqi,
        confidence=confidence,
        iso_compliant=result.iso_compliant,
    )
    return result
