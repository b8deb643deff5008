"""YAML-based loader for the versioned engine defaults.

Reads ``engine_defaults.yaml`` (or an override path from settings) into an
``EngineDefaults`` model that is handed to each calculator.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import resources as importlib_resources
from pathlib import Path

import yaml

from impact_engine.core.config import get_settings
from impact_engine.core.logging import get_logger
from impact_engine.modules.defaults.schemas import EngineDefaults

logger = get_logger(__name__)


def load_engine_defaults(yaml_path: str | Path | None = None) -> EngineDefaults:
    """Load engine defaults from YAML.

    A missing or non-mapping document falls back to the built-in defaults
    with a warning. Values that fail validation raise pydantic's
    ``ValidationError`` rather than being silently replaced.
    """
    path = Path(yaml_path) if yaml_path is not None else _default_path()

    if not path.is_file():
        logger.warning("engine_defaults_not_found", path=str(path))
        return EngineDefaults()

    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if not isinstance(data, dict):
        logger.warning("invalid_engine_defaults", path=str(path))
        return EngineDefaults()

    defaults = EngineDefaults.model_validate(data)
    logger.info(
        "engine_defaults_loaded",
        version=defaults.version,
        climate_zones=sorted(defaults.angel_share.climate_zone_rates),
        energy_sources=sorted(defaults.grid_factors),
        path=path.name,
    )
    return defaults


@lru_cache
def get_engine_defaults() -> EngineDefaults:
    """Return the process-wide defaults, honouring ``engine_defaults_path``."""
    settings = get_settings()
    return load_engine_defaults(settings.engine_defaults_path or None)


def _default_path() -> Path:
    """Resolve the ``engine_defaults.yaml`` bundled with this package."""
    pkg = importlib_resources.files("impact_engine.modules.defaults")
    return Path(str(pkg)) / "engine_defaults.yaml"
