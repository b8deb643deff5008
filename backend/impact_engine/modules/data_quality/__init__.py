"""Data-quality scoring by provenance tier and by pedigree matrix."""

from impact_engine.modules.data_quality.pedigree import (
    BASIC_UNCERTAINTY,
    PEDIGREE_UNCERTAINTY,
    assess_aggregate,
    assess_material,
    calculate_uncertainty,
    geographical_score,
    grade_to_default_pedigree,
    pedigree_dqi,
    propagate_uncertainty,
    temporal_score,
)
from impact_engine.modules.data_quality.schemas import (
    PEDIGREE_DIMENSIONS,
    PROVENANCE_TIERS,
    SOURCE_TIERS,
    AggregateDataQuality,
    DataQualityResult,
    MaterialDataQuality,
    MaterialQualityInput,
    PedigreeMatrix,
    ProvenanceTier,
    QualityFlag,
    TierBreakdown,
    UncertaintyFactors,
)
from impact_engine.modules.data_quality.scorer import DataQualityScorer, grade_result, grade_score

__all__ = [
    "BASIC_UNCERTAINTY",
    "PEDIGREE_DIMENSIONS",
    "PEDIGREE_UNCERTAINTY",
    "PROVENANCE_TIERS",
    "SOURCE_TIERS",
    "AggregateDataQuality",
    "DataQualityResult",
    "DataQualityScorer",
    "MaterialDataQuality",
    "MaterialQualityInput",
    "PedigreeMatrix",
    "ProvenanceTier",
    "QualityFlag",
    "TierBreakdown",
    "UncertaintyFactors",
    "assess_aggregate",
    "assess_material",
    "calculate_uncertainty",
    "geographical_score",
    "grade_result",
    "grade_score",
    "grade_to_default_pedigree",
    "pedigree_dqi",
    "propagate_uncertainty",
    "temporal_score",
]
