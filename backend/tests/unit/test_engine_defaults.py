"""Unit tests for the versioned engine defaults loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from impact_engine.modules.defaults import EngineDefaults, get_engine_defaults, load_engine_defaults
from impact_engine.modules.defaults.schemas import DataQualityDefaults


class TestBundledDefaults:
    def test_bundled_yaml_matches_builtin_defaults(self) -> None:
        assert load_engine_defaults() == EngineDefaults()

    def test_regression_values(self) -> None:
        defaults = load_engine_defaults()

        assert defaults.version == "2026.1"
        assert defaults.angel_share.climate_zone_rates == {
            "temperate": 0.02,
            "continental": 0.05,
            "tropical": 0.12,
        }
        assert defaults.barrels.new_co2e_kg_by_size_litres[200.0] == 40.0
        assert defaults.barrels.reused_reconditioning_co2e_kg == 0.5
        assert defaults.grid_factors["grid_electricity"] == pytest.approx(0.207)
        assert defaults.ethanol_density_kg_per_litre == pytest.approx(0.789)
        assert defaults.pocp_ethanol_factor == pytest.approx(0.40)
        assert defaults.default_bottle_size_litres == pytest.approx(0.75)


class TestLoadEngineDefaults:
    def test_missing_file_falls_back_to_builtin(self, tmp_path: Path) -> None:
        assert load_engine_defaults(tmp_path / "absent.yaml") == EngineDefaults()

    def test_non_mapping_document_falls_back(self, tmp_path: Path) -> None:
        path = tmp_path / "defaults.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")

        assert load_engine_defaults(path) == EngineDefaults()

    def test_partial_override(self, tmp_path: Path) -> None:
        path = tmp_path / "defaults.yaml"
        path.write_text(
            'version: "test-1"\ngrid_factors:\n  grid_electricity: 0.3\n',
            encoding="utf-8",
        )

        defaults = load_engine_defaults(path)

        assert defaults.version == "test-1"
        assert defaults.grid_factors == {"grid_electricity": 0.3}
        assert defaults.barrels.new_fallback_co2e_kg == 40.0

    def test_out_of_bound_rate_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "defaults.yaml"
        path.write_text(
            "angel_share:\n  climate_zone_rates:\n    tropical: 0.4\n",
            encoding="utf-8",
        )

        with pytest.raises(PydanticValidationError):
            load_engine_defaults(path)

    def test_settings_path_override(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = tmp_path / "defaults.yaml"
        path.write_text('version: "site-2"\n', encoding="utf-8")
        monkeypatch.setenv("ENGINE_DEFAULTS_PATH", str(path))

        assert get_engine_defaults().version == "site-2"


class TestTierWeights:
    @pytest.mark.parametrize("weight", [-1.0, 150.0])
    def test_weight_outside_score_scale_is_rejected(self, weight: float) -> None:
        with pytest.raises(PydanticValidationError, match="tier weight for 'primary'"):
            DataQualityDefaults(
                tier_weights={"primary": weight, "supplier": 75, "database-modelled": 25}
            )

    def test_yaml_weight_above_100_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "defaults.yaml"
        path.write_text("data_quality:\n  tier_weights:\n    primary: 120\n", encoding="utf-8")

        with pytest.raises(PydanticValidationError):
            load_engine_defaults(path)
