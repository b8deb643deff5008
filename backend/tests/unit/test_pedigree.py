"""Unit tests for pedigree-matrix data-quality assessment."""

from __future__ import annotations

import math
from typing import Any

import pytest
from pydantic import ValidationError as PydanticValidationError

from impact_engine.modules.data_quality import (
    MaterialQualityInput,
    PedigreeMatrix,
    assess_aggregate,
    assess_material,
    calculate_uncertainty,
    geographical_score,
    grade_to_default_pedigree,
    pedigree_dqi,
    propagate_uncertainty,
    temporal_score,
)

REFERENCE_YEAR = 2025


def _input(**overrides: Any) -> MaterialQualityInput:
    fields: dict[str, Any] = {
        "material_name": "Malted barley",
        "impact_value": 1.0,
        "data_source_tier": "secondary_modelled",
        "quality_grade": "MEDIUM",
        "data_year": 2024,
        "data_region": "GB",
        "study_region": "GB",
        "reference_year": REFERENCE_YEAR,
    }
    fields.update(overrides)
    return MaterialQualityInput(**fields)


def _pedigree(*scores: int) -> PedigreeMatrix:
    return PedigreeMatrix(
        reliability=scores[0],
        completeness=scores[1],
        temporal=scores[2],
        geographical=scores[3],
        technological=scores[4],
    )


class TestPedigreeDqi:
    @pytest.mark.parametrize(
        ("scores", "expected"),
        [
            ((1, 1, 1, 1, 1), 100),
            ((5, 5, 5, 5, 5), 0),
            ((3, 3, 3, 3, 3), 50),
            ((2, 2, 1, 1, 2), 85),
            ((1, 1, 1, 1, 2), 95),
        ],
    )
    def test_index_from_scores(self, scores: tuple[int, ...], expected: int) -> None:
        assert pedigree_dqi(_pedigree(*scores)) == expected

    @pytest.mark.parametrize("score", [0, 6])
    def test_scores_outside_one_to_five_rejected(self, score: int) -> None:
        with pytest.raises(PydanticValidationError):
            _pedigree(score, 1, 1, 1, 1)

    @pytest.mark.parametrize(("grade", "score"), [("HIGH", 2), ("MEDIUM", 3), ("LOW", 4)])
    def test_grade_defaults(self, grade: str, score: int) -> None:
        expected = PedigreeMatrix.uniform(score)

        assert grade_to_default_pedigree(grade) == expected  # type: ignore[arg-type]


class TestUncertainty:
    def test_perfect_pedigree_keeps_basic_uncertainty(self) -> None:
        result = calculate_uncertainty(PedigreeMatrix.uniform(1))

        assert result.basic == pytest.approx(0.15)
        assert result.pedigree == 0.0
        assert result.total == pytest.approx(0.15)
        assert result.confidence_interval_95.upper == pytest.approx(math.exp(1.96 * 0.15))
        assert result.confidence_interval_95.lower == pytest.approx(math.exp(-1.96 * 0.15))

    def test_pedigree_variance_adds_to_basic(self) -> None:
        result = calculate_uncertainty(PedigreeMatrix.uniform(3), "material_inputs")

        pedigree_variance = 0.002 + 0.0006 + 0.002 + 0.0001 + 0.008
        assert result.pedigree == pytest.approx(math.sqrt(pedigree_variance))
        assert result.total == pytest.approx(math.sqrt(0.01 + pedigree_variance))

    def test_unknown_flow_type_uses_default(self) -> None:
        result = calculate_uncertainty(PedigreeMatrix.uniform(1), "unheard_of")

        assert result.basic == pytest.approx(0.15)

    def test_explicit_percentage_replaces_pedigree(self) -> None:
        result = calculate_uncertainty(PedigreeMatrix.uniform(5), explicit_percent=20)

        assert result.total == pytest.approx(0.2)
        assert result.pedigree == 0.0


class TestTemporalScore:
    @pytest.mark.parametrize(
        ("data_year", "score", "stale", "very_stale"),
        [
            (2024, 1, False, False),
            (2020, 2, False, False),
            (2019, 3, True, False),
            (2012, 4, True, True),
            (2005, 5, True, True),
            (None, 5, True, True),
        ],
    )
    def test_age_bands(
        self, data_year: int | None, score: int, stale: bool, very_stale: bool
    ) -> None:
        result = temporal_score(data_year, REFERENCE_YEAR)

        assert (result.score, result.is_stale, result.is_very_stale) == (
            score,
            stale,
            very_stale,
        )


class TestGeographicalScore:
    @pytest.mark.parametrize(
        ("data_region", "study_region", "score", "regional"),
        [
            ("GB", "gb", 1, True),
            ("EU", "FR", 2, True),
            ("DE", "FR", 2, True),
            ("GLO", "GB", 3, False),
            ("US", "CA", 3, True),
            ("TH", "VN", 3, True),
            ("US", "GB", 4, False),
            ("GB", "EU", 4, False),
        ],
    )
    def test_region_match(
        self, data_region: str, study_region: str, score: int, regional: bool
    ) -> None:
        result = geographical_score(data_region, study_region)

        assert result.score == score
        assert result.is_regional_match is regional
        assert result.is_exact_match is (score == 1)


class TestAssessMaterial:
    def test_recent_local_high_grade_data(self) -> None:
        result = assess_material(_input(quality_grade="HIGH"))

        assert result.pedigree_matrix == _pedigree(2, 2, 1, 1, 2)
        assert result.pedigree_dqi == 85
        assert result.uncertainty.total == pytest.approx(math.sqrt(0.0113))
        assert result.uncertainty_percent == 11
        assert result.temporal.years_difference == 1
        assert result.geographic.is_exact_match
        assert result.flags == []

    def test_undated_global_low_grade_data(self) -> None:
        result = assess_material(_input(quality_grade="LOW", data_year=None, data_region="GLO"))

        assert result.pedigree_matrix == _pedigree(4, 4, 5, 3, 4)
        assert result.pedigree_dqi == 25
        assert result.uncertainty_percent == 32
        assert result.temporal.years_difference is None
        assert [flag.split(":")[0] for flag in result.flags] == ["DATA_VERY_STALE", "LOW_QUALITY"]

    def test_stale_and_distant_data_flagged(self) -> None:
        result = assess_material(_input(data_year=2018, data_region="US"))

        assert [flag.split(":")[0] for flag in result.flags] == ["DATA_STALE", "GEO_MISMATCH"]

    def test_supplied_pedigree_scores_win(self) -> None:
        result = assess_material(_input(pedigree={"technological": 1, "temporal": 5}))

        assert result.pedigree_matrix.technological == 1
        assert result.pedigree_matrix.temporal == 5
        assert result.pedigree_matrix.reliability == 3

    def test_explicit_uncertainty_reported_and_flagged(self) -> None:
        result = assess_material(_input(uncertainty_percent=60))

        assert result.uncertainty_percent == 60
        assert result.uncertainty.total == pytest.approx(0.6)
        assert any(flag.startswith("HIGH_UNCERTAINTY") for flag in result.flags)


class TestPropagateUncertainty:
    def test_root_sum_of_weighted_squares(self) -> None:
        materials = [
            assess_material(_input(material_name=name, impact_value=value, uncertainty_percent=20))
            for name, value in [("Barley", 3.0), ("Glass", 1.0)]
        ]

        # sqrt(0.75^2 * 0.04 + 0.25^2 * 0.04) = 0.158
        assert propagate_uncertainty(materials, 4.0) == 16

    def test_zero_total_impact(self) -> None:
        assert propagate_uncertainty([assess_material(_input())], 0.0) == 0


class TestAssessAggregate:
    @pytest.fixture
    def footprint(self) -> list:
        return [
            assess_material(
                _input(
                    material_name="Malted barley",
                    impact_value=3.0,
                    data_source_tier="primary_verified",
                    quality_grade="HIGH",
                    uncertainty_percent=10,
                )
            ),
            assess_material(
                _input(
                    material_name="Glass bottle",
                    impact_value=1.0,
                    quality_grade="LOW",
                    data_year=2015,
                    data_region="US",
                    uncertainty_percent=20,
                )
            ),
        ]

    def test_impact_weighted_figures(self, footprint: list) -> None:
        result = assess_aggregate(footprint, REFERENCE_YEAR)

        assert result.overall_dqi == 70
        assert result.weighted_uncertainty == 9
        assert result.source_breakdown["primary_verified"].count == 1
        assert result.source_breakdown["primary_verified"].impact_share == 75
        assert result.source_breakdown["secondary_modelled"].impact_share == 25
        assert result.source_breakdown["secondary_estimated"].count == 0
        assert result.pedigree_aggregate.reliability == pytest.approx(2.5)
        assert result.pedigree_aggregate.temporal == pytest.approx(1.8)
        assert result.temporal_coverage.oldest_data == 2015
        assert result.temporal_coverage.newest_data == 2024
        assert result.temporal_coverage.average_age == 6
        assert result.temporal_coverage.stale_material_count == 1
        assert result.temporal_coverage.stale_impact_share == 25

    def test_flags_and_compliance_gaps(self, footprint: list) -> None:
        result = assess_aggregate(footprint, REFERENCE_YEAR)

        assert [flag.code for flag in result.quality_flags] == ["STALE_DATA", "GEO_MISMATCH"]
        stale = result.flag("STALE_DATA")
        assert stale is not None and stale.severity == "warning"
        assert stale.affected_materials == ["Glass bottle"]
        assert len(result.compliance_gaps) == 1
        assert result.overall_confidence == "MEDIUM"
        assert not result.iso_compliant

    def test_verified_recent_data_is_high_confidence(self) -> None:
        material = assess_material(
            _input(
                data_source_tier="primary_verified",
                quality_grade="HIGH",
                uncertainty_percent=10,
            )
        )

        result = assess_aggregate([material], REFERENCE_YEAR)

        assert result.overall_dqi == 85
        assert result.overall_confidence == "HIGH"
        assert result.quality_flags == []
        assert result.iso_compliant

    def test_low_quality_majority_is_a_gap(self) -> None:
        material = assess_material(
            _input(quality_grade="LOW", data_source_tier="secondary_estimated")
        )

        result = assess_aggregate([material], REFERENCE_YEAR)

        codes = [flag.code for flag in result.quality_flags]
        assert "LOW_QUALITY_DATA" in codes
        assert "LOW_PRIMARY_DATA" in codes
        assert result.overall_confidence == "LOW"
        assert not result.iso_compliant

    def test_high_propagated_uncertainty_is_a_gap(self) -> None:
        material = assess_material(_input(uncertainty_percent=45))

        result = assess_aggregate([material], REFERENCE_YEAR)

        assert result.weighted_uncertainty == 45
        assert result.flag("HIGH_UNCERTAINTY") is not None
        assert any("4.5.3.3" in gap for gap in result.compliance_gaps)

    @pytest.mark.parametrize("impact_values", [[], [0.0, 0.0]])
    def test_nothing_to_weigh(self, impact_values: list[float]) -> None:
        materials = [assess_material(_input(impact_value=value)) for value in impact_values]

        result = assess_aggregate(materials, REFERENCE_YEAR)

        assert result.overall_dqi == 0
        assert result.overall_confidence == "LOW"
        assert result.weighted_uncertainty == 100
        assert result.pedigree_aggregate.reliability == 5.0
        flag = result.flag("NO_DATA")
        assert flag is not None and flag.severity == "critical"
        assert not result.iso_compliant
