"""Units module: canonical mass/volume normalization."""

from impact_engine.modules.units.constants import BASE_UNITS, QuantityKind
from impact_engine.modules.units.normalizer import (
    canonical_unit_symbol,
    normalize,
    normalize_any,
    unit_kind,
)

__all__ = [
    "BASE_UNITS",
    "QuantityKind",
    "canonical_unit_symbol",
    "normalize",
    "normalize_any",
    "unit_kind",
]
