"""Conversion of declared quantities into the engine's base units (kg, L)."""

from __future__ import annotations

from impact_engine.core.errors import UnsupportedUnitError, ValidationError, require_finite
from impact_engine.modules.units.constants import (
    BASE_UNITS,
    UNIT_ALIASES,
    UNIT_DIVISORS,
    QuantityKind,
)


def canonical_unit_symbol(unit: str) -> str:
    """Return the lower-cased short symbol for *unit* (``"Litres"`` -> ``"l"``)."""
    symbol = str(unit or "").strip().lower()
    return UNIT_ALIASES.get(symbol, symbol)


def unit_kind(unit: str) -> QuantityKind:
    """Classify *unit* as ``"mass"`` or ``"volume"``.

    Raises:
        UnsupportedUnitError: If the unit is neither an accepted mass nor
            volume unit. Empty units are rejected rather than assumed to be kg.
    """
    symbol = canonical_unit_symbol(unit)
    if symbol in UNIT_DIVISORS["mass"]:
        return "mass"
    if symbol in UNIT_DIVISORS["volume"]:
        return "volume"
    raise UnsupportedUnitError(
        f"Unsupported unit {unit!r}; accepted units are g, kg, ml and L"
    )


def normalize(quantity: float, unit: str, kind: QuantityKind) -> float:
    """Convert *quantity* expressed in *unit* to the base unit of *kind*.

    >>> normalize(700, "ml", "volume")
    0.7

    Raises:
        UnsupportedUnitError: If *unit* is not an accepted unit of *kind*.
        ValidationError: If *quantity* is negative or not finite.
    """
    if kind not in UNIT_DIVISORS:
        raise ValidationError(f"Unknown quantity kind {kind!r}; expected 'mass' or 'volume'")

    value = require_finite("quantity", quantity)
    if value < 0:
        raise ValidationError(f"quantity must be >= 0, got {value}")

    symbol = canonical_unit_symbol(unit)
    divisor = UNIT_DIVISORS[kind].get(symbol)
    if divisor is None:
        accepted = ", ".join(sorted(UNIT_DIVISORS[kind]))
        raise UnsupportedUnitError(
            f"Unit {unit!r} is not a {kind} unit; accepted {kind} units: {accepted}"
        )
    return value / divisor


def normalize_any(quantity: float, unit: str) -> tuple[float, str]:
    """Normalize *quantity* using the kind implied by *unit*.

    Returns the base quantity and the base unit symbol (``"kg"`` or ``"L"``).
    """
    kind = unit_kind(unit)
    return normalize(quantity, unit, kind), BASE_UNITS[kind]
