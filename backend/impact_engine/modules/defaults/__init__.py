"""Versioned numerical defaults shared by the calculators."""

from impact_engine.modules.defaults.loader import get_engine_defaults, load_engine_defaults
from impact_engine.modules.defaults.schemas import EngineDefaults

__all__ = ["EngineDefaults", "get_engine_defaults", "load_engine_defaults"]
