"""Provenance-weighted data-quality scoring for compliance disclosures.

The score is the mean tier weight of the inputs:
``score = sum(weight[tier] * count[tier]) / total_count``. Mapping the score
to a label is a separate step driven by caller-supplied bands.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Protocol

from impact_engine.core.config import DataQualityBand
from impact_engine.core.errors import ValidationError
from impact_engine.core.logging import get_logger
from impact_engine.modules.data_quality.schemas import (
    PROVENANCE_TIERS,
    DataQualityResult,
    TierBreakdown,
)
from impact_engine.modules.defaults.schemas import EngineDefaults

logger = get_logger(__name__)


class HasProvenance(Protocol):
    provenance: str


class DataQualityScorer:
    """Stateless provenance scorer.

    Usage::

        scorer = DataQualityScorer(EngineDefaults())
        result = scorer.score_materials(materials)
    """

    def __init__(self, defaults: EngineDefaults | None = None) -> None:
        weights = (defaults or EngineDefaults()).data_quality.tier_weights
        missing = [tier for tier in PROVENANCE_TIERS if tier not in weights]
        if missing:
            raise ValidationError(f"tier weights missing for: {', '.join(missing)}")
        self._weights = {tier: float(weights[tier]) for tier in PROVENANCE_TIERS}

    @property
    def tier_weights(self) -> dict[str, float]:
        return dict(self._weights)

    def score(self, tiers: Iterable[str]) -> DataQualityResult:
        """Score a collection of provenance tier names.

        An empty collection scores 0 with an all-zero breakdown.

        Raises:
            ValidationError: If a tier is not one of the known provenance tiers.
        """
        counts: Counter[str] = Counter()
        for tier in tiers:
            if tier not in self._weights:
                raise ValidationError(
                    f"Unknown provenance tier {tier!r}; expected one of "
                    f"{', '.join(PROVENANCE_TIERS)}"
                )
            counts[tier] += 1

        total = sum(counts.values())
        if total == 0:
            return DataQualityResult(
                score=0.0,
                total_count=0,
                breakdown={
                    tier: TierBreakdown(count=0, percentage=0.0) for tier in PROVENANCE_TIERS
                },
            )

        weighted = sum(self._weights[tier] * count for tier, count in counts.items())
        return DataQualityResult(
            score=weighted / total,
            total_count=total,
            breakdown={
                tier: TierBreakdown(
                    count=counts[tier],
                    percentage=counts[tier] / total * 100.0,
                )
                for tier in PROVENANCE_TIERS
            },
        )

    def score_materials(self, materials: Iterable[HasProvenance]) -> DataQualityResult:
        """Score any objects exposing a ``provenance`` attribute."""
        return self.score(material.provenance for material in materials)


def grade_score(score: float, bands: Sequence[DataQualityBand]) -> DataQualityBand:
    """Return the first band (highest minimum first) whose minimum *score* meets."""
    for band in sorted(bands, key=lambda b: b.min_score, reverse=True):
        if score >= band.min_score:
            return band
    raise ValidationError(f"No data quality band covers score {score}")


def grade_result(
    result: DataQualityResult,
    bands: Sequence[DataQualityBand],
) -> DataQualityResult:
    """Return a copy of *result* labelled with the matching band."""
    band = grade_score(result.score, bands)
    logger.debug("data_quality_graded", score=result.score, label=band.label)
    return result.model_copy(update={"label": band.label, "description": band.description})
