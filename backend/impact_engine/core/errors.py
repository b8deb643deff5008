"""Error taxonomy shared by every calculator in the engine."""

from __future__ import annotations

import math


class ImpactEngineError(Exception):
    """Base class for all engine failures."""


class ValidationError(ImpactEngineError, ValueError):
    """Malformed or out-of-range input. Raised immediately, never retried."""


class UnsupportedUnitError(ValidationError):
    """A unit the normalizer does not accept for the requested quantity kind."""


class ZeroVolumeError(ValidationError):
    """A facility production volume that is zero or negative."""


class InvalidAllocationError(ValidationError):
    """A product volume outside ``(0, total_volume]``."""


class MissingDataError(ImpactEngineError, LookupError):
    """Required data (snapshot, factor, profile) is absent."""


def require_finite(name: str, value: float) -> float:
    """Return *value* as a float, raising ``ValidationError`` for NaN/inf."""
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return number
