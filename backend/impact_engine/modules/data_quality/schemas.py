"""Pydantic schemas for data-quality scoring."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

ProvenanceTier = Literal["primary", "supplier", "database-modelled"]

PROVENANCE_TIERS: tuple[ProvenanceTier, ...] = ("primary", "supplier", "database-modelled")


class TierBreakdown(BaseModel):
    """Count and share of inputs in one provenance tier."""

    count: int = Field(ge=0)
    percentage: float = Field(ge=0.0, le=100.0)


class DataQualityResult(BaseModel):
    """Numeric data-quality score with its per-tier composition.

    ``label`` and ``description`` are only set once the caller grades the
    score against its configured bands.
    """

    score: float = Field(ge=0.0, le=100.0)
    total_count: int = Field(ge=0)
    breakdown: dict[ProvenanceTier, TierBreakdown] = Field(default_factory=dict)
    label: str | None = None
    description: str | None = None


# ---------------------------------------------------------------------------
# Pedigree matrix assessment
# ---------------------------------------------------------------------------

QualityGrade = Literal["HIGH", "MEDIUM", "LOW"]
Confidence = Literal["HIGH", "MEDIUM", "LOW"]
SourceTier = Literal["primary_verified", "secondary_modelled", "secondary_estimated"]
PedigreeDimension = Literal[
    "reliability", "completeness", "temporal", "geographical", "technological"
]
FlagSeverity = Literal["critical", "warning", "info"]

SOURCE_TIERS: tuple[SourceTier, ...] = (
    "primary_verified",
    "secondary_modelled",
    "secondary_estimated",
)
PEDIGREE_DIMENSIONS: tuple[PedigreeDimension, ...] = (
    "reliability",
    "completeness",
    "temporal",
    "geographical",
    "technological",
)

# 1 is best, 5 is worst.
PedigreeScore = Annotated[int, Field(ge=1, le=5)]


class PedigreeMatrix(BaseModel):
    """Five-dimension pedigree scores of one data point."""

    model_config = ConfigDict(frozen=True)

    reliability: PedigreeScore
    completeness: PedigreeScore
    temporal: PedigreeScore
    geographical: PedigreeScore
    technological: PedigreeScore

    @classmethod
    def uniform(cls, score: int) -> PedigreeMatrix:
        return cls(**{dimension: score for dimension in PEDIGREE_DIMENSIONS})

    @property
    def total(self) -> int:
        return sum(getattr(self, dimension) for dimension in PEDIGREE_DIMENSIONS)


class ConfidenceInterval(BaseModel):
    """Multipliers applied to a value to get its 95% bounds."""

    lower: float
    upper: float


class UncertaintyFactors(BaseModel):
    """Lognormal standard deviations of one data point."""

    basic: float = Field(ge=0.0)
    pedigree: float = Field(ge=0.0)
    total: float = Field(ge=0.0)
    confidence_interval_95: ConfidenceInterval


class TemporalRepresentativeness(BaseModel):
    data_year: int | None
    reference_year: int
    years_difference: int | None
    is_stale: bool
    is_very_stale: bool


class GeographicMatch(BaseModel):
    data_region: str
    study_region: str
    is_exact_match: bool
    is_regional_match: bool


class MaterialQualityInput(BaseModel):
    """What is known about the factor behind one material's impact.

    Pedigree dimensions left out of ``pedigree`` are derived: temporal and
    geographical from the data year and regions, the rest from the grade.
    """

    material_name: str = Field(min_length=1)
    material_id: str = ""
    impact_value: float
    impact_unit: str = "kg CO2e"
    data_source: str = ""
    data_source_tier: SourceTier
    quality_grade: QualityGrade
    uncertainty_percent: float | None = Field(default=None, ge=0.0)
    pedigree: dict[PedigreeDimension, PedigreeScore] = Field(default_factory=dict)
    data_year: int | None = None
    data_region: str = "GLO"
    study_region: str = "GLO"
    reference_year: int | None = None


class MaterialDataQuality(BaseModel):
    """Pedigree assessment of one material."""

    material_name: str
    material_id: str
    impact_value: float
    impact_unit: str
    data_source: str
    data_source_tier: SourceTier
    quality_grade: QualityGrade
    pedigree_matrix: PedigreeMatrix
    pedigree_dqi: int = Field(ge=0, le=100)
    uncertainty_percent: float = Field(ge=0.0)
    uncertainty: UncertaintyFactors
    temporal: TemporalRepresentativeness
    geographic: GeographicMatch
    flags: list[str] = Field(default_factory=list)


class QualityFlag(BaseModel):
    severity: FlagSeverity
    code: str
    message: str
    affected_materials: list[str] = Field(default_factory=list)


class SourceTierShare(BaseModel):
    """Number of materials in a source tier and their share of impact (%)."""

    count: int = Field(default=0, ge=0)
    impact_share: float = Field(default=0.0, ge=0.0)


class PedigreeAggregate(BaseModel):
    """Impact-weighted mean pedigree score per dimension."""

    reliability: float
    completeness: float
    temporal: float
    geographical: float
    technological: float


class TemporalCoverage(BaseModel):
    oldest_data: int | None = None
    newest_data: int | None = None
    average_age: int | None = None
    stale_material_count: int = Field(default=0, ge=0)
    stale_impact_share: float = Field(default=0.0, ge=0.0)


class AggregateDataQuality(BaseModel):
    """Impact-weighted data-quality assessment of a whole footprint."""

    overall_dqi: int = Field(ge=0, le=100)
    overall_confidence: Confidence
    weighted_uncertainty: float = Field(ge=0.0, description="Propagated uncertainty, %")
    source_breakdown: dict[SourceTier, SourceTierShare]
    pedigree_aggregate: PedigreeAggregate
    temporal_coverage: TemporalCoverage
    quality_flags: list[QualityFlag] = Field(default_factory=list)
    iso_compliant: bool
    compliance_gaps: list[str] = Field(default_factory=list)

    def flag(self, code: str) -> QualityFlag | None:
        return next((f for f in self.quality_flags if f.code == code), None)
