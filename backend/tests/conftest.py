"""
Pytest fixtures for engine testing.
Provides default parameter sets and clears cached configuration between tests.
"""

from collections.abc import Iterator

import pytest

from impact_engine.core.config import get_settings
from impact_engine.modules.defaults.loader import get_engine_defaults
from impact_engine.modules.defaults.schemas import EngineDefaults


@pytest.fixture(autouse=True)
def clear_cached_config() -> Iterator[None]:
    """Ensure each test sees settings and defaults from its own environment."""
    get_settings.cache_clear()
    get_engine_defaults.cache_clear()
    yield
    get_settings.cache_clear()
    get_engine_defaults.cache_clear()


@pytest.fixture
def defaults() -> EngineDefaults:
    """Built-in engine defaults (identical to the bundled YAML)."""
    return EngineDefaults()
