"""Barrel maturation impacts: barrel burden, warehouse energy, angel's share."""

from impact_engine.modules.maturation.calculator import (
    BARREL_MATERIAL_NAME,
    WAREHOUSE_MATERIAL_NAME,
    MaturationCalculator,
)
from impact_engine.modules.maturation.schemas import MaturationProfile, MaturationResult

__all__ = [
    "BARREL_MATERIAL_NAME",
    "WAREHOUSE_MATERIAL_NAME",
    "MaturationCalculator",
    "MaturationProfile",
    "MaturationResult",
]
