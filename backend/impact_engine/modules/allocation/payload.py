"""Ordered accessors for facility totals stored in legacy payload shapes.

Facility snapshots written by different generations of the data-entry flow
store water and waste under different keys. Each accessor below is one known
shape; they are tried in order and the first numeric hit wins. A payload that
matches none of them resolves to zero.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PayloadPath:
    """A key path into a results payload, e.g. ``("a", "b")`` for ``payload["a"]["b"]``."""

    keys: tuple[str, ...]

    @property
    def dotted(self) -> str:
        return ".".join(self.keys)

    def resolve(self, payload: Mapping[str, Any]) -> float | None:
        """Return the positive number at this path, or ``None`` if absent or unusable."""
        node: Any = payload
        for key in self.keys:
            if not isinstance(node, Mapping) or key not in node:
                return None
            node = node[key]
        return _as_number(node)


WATER_PAYLOAD_PATHS: tuple[PayloadPath, ...] = (
    PayloadPath(("disaggregated_summary", "total_water_consumption")),
    PayloadPath(("total_water_consumption", "value")),
    PayloadPath(("total_water_consumption",)),
)

WASTE_PAYLOAD_PATHS: tuple[PayloadPath, ...] = (
    PayloadPath(("disaggregated_summary", "total_waste")),
    PayloadPath(("total_waste_generated", "value")),
    PayloadPath(("total_waste_generated",)),
)


def resolve_payload_value(
    payload: Mapping[str, Any] | None,
    paths: Sequence[PayloadPath],
) -> tuple[float, str | None]:
    """Probe *paths* in order.

    Returns the value and the dotted path that supplied it, or ``(0.0, None)``
    when no path matches.
    """
    if not isinstance(payload, Mapping):
        return 0.0, None
    for path in paths:
        value = path.resolve(payload)
        if value is not None:
            return value, path.dotted
    return 0.0, None


def _as_number(value: Any) -> float | None:
    # Non-positive and non-numeric values fall through to the next path.
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number
