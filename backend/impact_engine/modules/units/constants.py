"""Constants for canonical unit handling."""

from __future__ import annotations

from typing import Literal

QuantityKind = Literal["mass", "volume"]

# Canonical base unit per quantity kind.
BASE_UNITS: dict[str, str] = {
    "mass": "kg",
    "volume": "L",
}

# Number of accepted units per base unit, keyed by quantity kind.
UNIT_DIVISORS: dict[str, dict[str, float]] = {
    "mass": {
        "g": 1000.0,
        "kg": 1.0,
    },
    "volume": {
        "ml": 1000.0,
        "l": 1.0,
    },
}

# Long-form spellings observed in bill-of-materials uploads.
UNIT_ALIASES: dict[str, str] = {
    "gram": "g",
    "grams": "g",
    "kilogram": "kg",
    "kilograms": "kg",
    "millilitre": "ml",
    "millilitres": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "litre": "l",
    "litres": "l",
    "liter": "l",
    "liters": "l",
}
