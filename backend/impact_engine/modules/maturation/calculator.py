"""Stateless barrel maturation impact calculator.

Models the aging step of a matured spirit under cut-off allocation:

- Barrel manufacture: full burden on the first fill, reconditioning only on
  later fills.
- Warehouse energy: annual kWh per barrel over the aging duration.
- Angel's share: compound annual evaporation, ``(1 - rate) ** years``. The
  evaporated ethanol is reported as photochemical ozone formation and is
  excluded from the climate total.

Results are allocated per bottle and emitted as two synthetic materials,
``[Maturation] Barrel`` and ``[Maturation] Warehouse Energy``.
"""

from __future__ import annotations

import math

from impact_engine.core.errors import ValidationError, require_finite
from impact_engine.core.logging import get_logger
from impact_engine.modules.defaults.schemas import EngineDefaults
from impact_engine.modules.lca.schemas import (
    COUNT_UNIT,
    MATURATION_MARKER,
    ImpactFactors,
    Material,
)
from impact_engine.modules.maturation.schemas import MaturationProfile, MaturationResult
from impact_engine.modules.units import normalize

logger = get_logger(__name__)

BARREL_MATERIAL_NAME = f"{MATURATION_MARKER} Barrel"
WAREHOUSE_MATERIAL_NAME = f"{MATURATION_MARKER} Warehouse Energy"

_SYNTHETIC_PRIORITY = 3
_SYNTHETIC_QUALITY_TAG = "Secondary_Estimated"
_SYNTHETIC_IMPACT_SOURCE = "secondary_modelled"


class MaturationCalculator:
    """Barrel maturation calculator bound to one set of engine defaults.

    Usage::

        calculator = MaturationCalculator(EngineDefaults())
        result = calculator.calculate(profile, bottle_size_litres=0.7)
    """

    def __init__(self, defaults: EngineDefaults | None = None) -> None:
        self._defaults = defaults or EngineDefaults()

    @property
    def defaults(self) -> EngineDefaults:
        return self._defaults

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def calculate(
        self,
        profile: MaturationProfile | None,
        bottle_size_litres: float | None = None,
    ) -> MaturationResult | None:
        """Compute maturation impacts for *profile*.

        Returns ``None`` when there is no profile, in which case no synthetic
        materials are injected. *bottle_size_litres* falls back to the
        configured default (0.75 L) when not given.

        Raises:
            ValidationError: On an out-of-range loss rate, unknown energy
                source or non-positive bottle size.
        """
        if profile is None:
            logger.debug("no_maturation_profile")
            return None

        bottle_size = self._resolve_bottle_size(bottle_size_litres)
        rate = self.annual_loss_rate(profile)
        years = profile.duration_years

        fill_volume = profile.fill_volume_per_barrel * profile.fill_count
        retention = self.retention_factor(rate, years)
        output_volume = fill_volume * retention
        volume_lost = fill_volume * (1.0 - retention)

        if profile.bottles_override is not None:
            bottle_count = profile.bottles_override
            overridden = True
        else:
            bottle_count = math.floor(output_volume / bottle_size)
            overridden = False

        per_barrel = self.barrel_co2e_per_barrel(profile)
        barrel_total = per_barrel * profile.fill_count
        warehouse_total = (
            profile.warehouse_energy_kwh_per_barrel_year
            * profile.fill_count
            * years
            * self.grid_factor(profile.warehouse_energy_source)
        )
        total_co2e = barrel_total + warehouse_total

        ethanol_kg = volume_lost * profile.abv * self._defaults.ethanol_density_kg_per_litre
        ozone_kg = ethanol_kg * self._defaults.pocp_ethanol_factor

        barrel_per_bottle = _per(barrel_total, bottle_count)
        warehouse_per_bottle = _per(warehouse_total, bottle_count)
        ozone_per_bottle = _per(ozone_kg, bottle_count)

        notes = self._methodology_notes(profile, rate)
        bottle_ml = round(bottle_size * 1000)
        materials = [
            self._synthetic_material(
                BARREL_MATERIAL_NAME,
                ImpactFactors(climate=barrel_per_bottle),
                _source_reference(
                    "Barrel allocation",
                    barrel_total,
                    bottle_count,
                    bottle_ml,
                    barrel_per_bottle,
                    overridden,
                ),
                notes,
            ),
            self._synthetic_material(
                WAREHOUSE_MATERIAL_NAME,
                ImpactFactors(climate=warehouse_per_bottle, photochemical_ozone=ozone_per_bottle),
                _source_reference(
                    "Warehouse energy",
                    warehouse_total,
                    bottle_count,
                    bottle_ml,
                    warehouse_per_bottle,
                    overridden,
                ),
                notes,
            ),
        ]

        result = MaturationResult(
            defaults_version=self._defaults.version,
            annual_loss_rate=rate,
            retention_factor=retention,
            angel_share_loss_percent_total=(1.0 - retention) * 100,
            fill_volume_litres=fill_volume,
            output_volume_litres=output_volume,
            volume_lost_litres=volume_lost,
            bottle_size_litres=bottle_size,
            bottle_count=bottle_count,
            bottle_count_overridden=overridden,
            barrel_co2e_per_barrel=per_barrel,
            barrel_co2e_total=barrel_total,
            warehouse_co2e_total=warehouse_total,
            total_maturation_co2e=total_co2e,
            barrel_co2e_per_litre=_per(barrel_total, fill_volume),
            warehouse_co2e_per_litre=_per(warehouse_total, fill_volume),
            total_maturation_co2e_per_litre_output=_per(total_co2e, output_volume),
            ethanol_lost_kg=ethanol_kg,
            photochemical_ozone_kg=ozone_kg,
            barrel_co2e_per_bottle=barrel_per_bottle,
            warehouse_co2e_per_bottle=warehouse_per_bottle,
            total_co2e_per_bottle=barrel_per_bottle + warehouse_per_bottle,
            photochemical_ozone_per_bottle=ozone_per_bottle,
            methodology_notes=notes,
            materials=materials,
        )

        logger.info(
            "maturation_calculated",
            barrel_type=profile.barrel_type,
            fill_count=profile.fill_count,
            duration_years=years,
            climate_zone=profile.climate_zone,
            output_volume_litres=round(output_volume, 3),
            bottle_count=bottle_count,
            bottle_count_overridden=overridden,
            total_maturation_co2e=round(total_co2e, 6),
            defaults_version=self._defaults.version,
        )
        return result

    def annual_loss_rate(self, profile: MaturationProfile) -> float:
        """Return the explicit loss rate, or the climate-zone default."""
        angel_share = self._defaults.angel_share
        if profile.annual_loss_rate is not None:
            rate = profile.annual_loss_rate
        else:
            try:
                rate = angel_share.climate_zone_rates[profile.climate_zone]
            except KeyError as exc:
                raise ValidationError(
                    f"No angel's share default for climate zone '{profile.climate_zone}'"
                ) from exc
        if not 0.0 <= rate <= angel_share.max_annual_loss_rate:
            raise ValidationError(
                f"annual loss rate {rate} outside [0, {angel_share.max_annual_loss_rate}]"
            )
        return rate

    @staticmethod
    def retention_factor(annual_loss_rate: float, duration_years: float) -> float:
        """Fraction of the fill remaining after compound annual evaporation."""
        return (1.0 - annual_loss_rate) ** float(duration_years)

    def barrel_co2e_per_barrel(self, profile: MaturationProfile) -> float:
        """kg CO2e attributed to one barrel for this fill."""
        barrels = self._defaults.barrels
        if profile.barrel_co2e_override is not None:
            return profile.barrel_co2e_override
        if not profile.is_new_barrel:
            return barrels.reused_reconditioning_co2e_kg
        return barrels.new_co2e_kg_by_size_litres.get(
            float(profile.barrel_size_litres),
            barrels.new_fallback_co2e_kg,
        )

    def grid_factor(self, energy_source: str) -> float:
        """kg CO2e per kWh for *energy_source*."""
        try:
            return self._defaults.grid_factors[energy_source]
        except KeyError as exc:
            known = ", ".join(sorted(self._defaults.grid_factors))
            raise ValidationError(
                f"Unknown warehouse energy source '{energy_source}'; expected one of {known}"
            ) from exc

    def bottle_size_from_unit_size(
        self,
        unit_size_value: float | None,
        unit_size_unit: str | None,
    ) -> float:
        """Bottle size in litres from a product's declared unit size.

        Falls back to the default bottle size when either part is missing.
        """
        if unit_size_value is None or not unit_size_unit:
            return self._defaults.default_bottle_size_litres
        return normalize(unit_size_value, unit_size_unit, "volume")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_bottle_size(self, bottle_size_litres: float | None) -> float:
        if bottle_size_litres is None:
            return self._defaults.default_bottle_size_litres
        size = require_finite("bottle_size_litres", bottle_size_litres)
        if size <= 0:
            raise ValidationError(f"bottle_size_litres must be > 0, got {size}")
        return size

    def _synthetic_material(
        self,
        name: str,
        factors: ImpactFactors,
        source_reference: str,
        methodology: str,
    ) -> Material:
        return Material(
            name=name,
            category="maturation-synthetic",
            quantity=1.0,
            unit=COUNT_UNIT,
            factors=factors,
            provenance="database-modelled",
            data_priority=_SYNTHETIC_PRIORITY,
            data_quality_tag=_SYNTHETIC_QUALITY_TAG,
            impact_source=_SYNTHETIC_IMPACT_SOURCE,
            source_reference=source_reference,
            methodology=methodology,
        )

    @staticmethod
    def _methodology_notes(profile: MaturationProfile, rate: float) -> str:
        barrel_state = "new" if profile.is_new_barrel else f"reused, fill #{profile.barrel_use_number}"
        return (
            "Cut-off allocation. "
            f"Barrel: {profile.barrel_type} ({profile.barrel_size_litres:g}L, {barrel_state}) "
            f"x {profile.fill_count}. "
            f"Duration: {profile.duration_years:g} years ({profile.duration_months:g} months). "
            f"Climate zone: {profile.climate_zone} (angel's share {rate * 100:g}%/yr, compound). "
            f"Warehouse energy: {profile.warehouse_energy_source}. "
            "Angel's share evaporation is reported as photochemical ozone formation "
            "and excluded from the climate total."
        )


def _per(total: float, denominator: float) -> float:
    """*total* divided by *denominator*, or 0 when there is nothing to divide over."""
    if denominator <= 0:
        return 0.0
    return total / denominator


def _source_reference(
    label: str,
    total_co2e: float,
    bottle_count: int,
    bottle_ml: int,
    per_bottle: float,
    overridden: bool,
) -> str:
    origin = "user-overridden bottle count" if overridden else "bottle count from output volume"
    return (
        f"{label}: {total_co2e:.3f} kg CO2e total / {bottle_count} bottles ({bottle_ml}ml) "
        f"= {per_bottle:.4f} kg/bottle ({origin})"
    )
