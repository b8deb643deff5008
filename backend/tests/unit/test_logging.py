"""Unit tests for logging configuration and the service factory."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from impact_engine.bootstrap import create_lca_service
from impact_engine.core.config import Settings
from impact_engine.core.logging import configure_logging, get_logger
from impact_engine.modules.lca.reports import BillOfMaterialsLine, ProductLCARequest
from impact_engine.modules.lca.service import ProductLCAService


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    logging.getLogger("impact_engine").setLevel(logging.NOTSET)


def _json_events(caplog: pytest.LogCaptureFixture) -> list[dict[str, object]]:
    events = []
    for record in caplog.records:
        try:
            event = json.loads(record.getMessage())
        except json.JSONDecodeError:
            continue
        if isinstance(event, dict):
            events.append(event)
    return events


def _request() -> ProductLCARequest:
    return ProductLCARequest(
        product_name="London Dry Gin",
        unit_size_value=700,
        unit_size_unit="ml",
        materials=[BillOfMaterialsLine(name="Malted barley", quantity=1.2, unit="kg")],
    )


class TestConfigureLogging:
    def test_production_renders_json(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO)
        configure_logging(Settings(environment="production"))

        get_logger("impact_engine.tests").info("bottle_counted", bottles=1121)

        event = _json_events(caplog)[-1]
        assert event["event"] == "bottle_counted"
        assert event["bottles"] == 1121
        assert event["level"] == "info"
        assert event["environment"] == "production"
        assert event["engine_version"] == Settings().version
        assert "timestamp" in event

    def test_development_renders_for_console(self) -> None:
        configure_logging(Settings(environment="development"))

        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.dev.ConsoleRenderer)

    def test_log_level_applies_to_engine_loggers(self) -> None:
        configure_logging(Settings(environment="staging", log_level="WARNING"))

        assert not logging.getLogger("impact_engine").isEnabledFor(logging.INFO)
        assert logging.getLogger("impact_engine").isEnabledFor(logging.WARNING)


class TestCreateLcaService:
    def test_builds_working_service(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO)

        service = create_lca_service(settings=Settings(environment="production"))
        report = service.calculate(_request())

        assert isinstance(service, ProductLCAService)
        assert report.lca.stages.raw_materials.impacts.climate == pytest.approx(0.864)
        ready = [e for e in _json_events(caplog) if e["event"] == "impact_engine_ready"]
        assert len(ready) == 1
        assert ready[0]["defaults_version"] == "2026.1"
        assert ready[0]["factor_count"] == 13

    def test_override_paths_are_honoured(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        defaults_path = tmp_path / "engine_defaults.yaml"
        defaults_path.write_text('version: "site-2026.2"\n', encoding="utf-8")
        factors_path = tmp_path / "factors.yaml"
        factors_path.write_text(
            'version: "site-1"\nfactors:\n  - material: malted_barley\n    climate_kg_co2e: 0.5\n',
            encoding="utf-8",
        )
        caplog.set_level(logging.INFO)
        settings = Settings(
            environment="production",
            engine_defaults_path=str(defaults_path),
            factor_database_path=str(factors_path),
        )

        report = create_lca_service(settings=settings).calculate(_request())

        assert report.defaults_version == "site-2026.2"
        assert report.lca.stages.raw_materials.impacts.climate == pytest.approx(0.6)
        ready = [e for e in _json_events(caplog) if e["event"] == "impact_engine_ready"]
        assert ready[-1]["factor_database_version"] == "site-1"
