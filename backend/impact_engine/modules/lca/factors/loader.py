"""YAML-based impact factor database loader.

Loads per-material impact factors from a YAML file and provides lookup
methods for the product LCA service.
"""

from __future__ import annotations

from importlib import resources as importlib_resources
from pathlib import Path
from typing import Protocol

import yaml
from pydantic import ValidationError as PydanticValidationError

from impact_engine.core.logging import get_logger
from impact_engine.modules.lca.schemas import ImpactFactors

logger = get_logger(__name__)

# Shorter queries ("oak", "gin") only match exactly or by containing a key.
MIN_PARTIAL_QUERY_LENGTH = 4


class FactorLookup(Protocol):
    """Resolves a material name to its impact factors per base unit."""

    def lookup(self, material_name: str) -> ImpactFactors | None: ...


def _normalise(material_name: str) -> str:
    return material_name.lower().strip().replace(" ", "_")


class FactorDatabase:
    """Impact factor database loaded from YAML.

    Factors are per base unit (kg for mass, L for volume, or per counted
    unit) and cover climate, water, land use and waste.

    Usage::

        db = FactorDatabase()
        factors = db.lookup("Malted Barley")
    """

    def __init__(self, yaml_path: str | Path | None = None) -> None:
        self._factors: dict[str, ImpactFactors] = {}
        self._sources: dict[str, str] = {}
        self._version: str = "0.0"
        self._load(yaml_path)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def version(self) -> str:
        """Return the version string from the loaded YAML."""
        return self._version

    def get_factors(self, material: str) -> ImpactFactors | None:
        """Exact-match lookup by normalised material name."""
        return self._factors.get(_normalise(material))

    def lookup(self, material_name: str) -> ImpactFactors | None:
        """Exact match first, then the most specific substring match.

        A key contained in the query wins, longest key first, so
        "recycled glass bottle" resolves to ``recycled_glass_bottle`` rather
        than ``glass_bottle``. Otherwise a query of at least
        ``MIN_PARTIAL_QUERY_LENGTH`` characters may match the shortest key
        containing it. Returns ``None`` if nothing matches.
        """
        normalised = _normalise(material_name)
        if not normalised:
            return None

        exact = self._factors.get(normalised)
        if exact is not None:
            return exact

        matched = self._best_partial_key(normalised)
        if matched is not None:
            logger.debug("factor_substring_match", query=material_name, matched=matched)
            return self._factors[matched]

        logger.info("no_emission_factor", material=material_name)
        return None

    def source_of(self, material: str) -> str | None:
        """Data source cited for a material's factors."""
        return self._sources.get(_normalise(material))

    def list_materials(self) -> list[str]:
        """Return all known material keys (sorted)."""
        return sorted(self._factors.keys())

    def _best_partial_key(self, normalised: str) -> str | None:
        contained = [key for key in self._factors if key in normalised]
        if contained:
            return max(contained, key=len)
        if len(normalised) < MIN_PARTIAL_QUERY_LENGTH:
            return None
        containing = [key for key in self._factors if normalised in key]
        if containing:
            return min(containing, key=len)
        return None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load(self, yaml_path: str | Path | None = None) -> None:
        """Load factors from YAML file."""
        path = Path(yaml_path) if yaml_path is not None else self._default_path()

        if not path.is_file():
            logger.warning("factor_database_not_found", path=str(path))
            return

        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)

        if not isinstance(data, dict):
            logger.warning("invalid_factor_database", path=str(path))
            return

        self._version = str(data.get("version", "0.0"))
        raw_factors = data.get("factors", [])
        if not isinstance(raw_factors, list):
            logger.warning("invalid_factors_list", path=str(path))
            return

        for raw in raw_factors:
            if not isinstance(raw, dict):
                continue
            material_key = _normalise(str(raw.get("material", "")))
            if not material_key:
                continue
            try:
                self._factors[material_key] = ImpactFactors(
                    climate=raw.get("climate_kg_co2e", 0.0),
                    water=raw.get("water_litres", 0.0),
                    land=raw.get("land_m2a", 0.0),
                    waste=raw.get("waste_kg", 0.0),
                )
            except PydanticValidationError:
                logger.warning(
                    "skipping_invalid_impact_factor",
                    material=material_key,
                    exc_info=True,
                )
                continue
            self._sources[material_key] = str(raw.get("source", ""))

        logger.info(
            "factor_database_loaded",
            version=self._version,
            factor_count=len(self._factors),
            path=path.name,
        )

    @staticmethod
    def _default_path() -> Path:
        """Resolve the default factors.yaml bundled with this package."""
        pkg = importlib_resources.files("impact_engine.modules.lca.factors")
        return Path(str(pkg)) / "factors.yaml"
