"""
Configuration for the quantity takeoff service.

All tunables live here as module-level constants read from environment
variables, so the rest of the package never calls ``os.getenv``
directly.  Property key aliases are ordered lists: the first alias
present on an element wins, which keeps the matching priority an
explicit, testable parameter instead of strings buried in the
aggregator.

``QuantitySettings`` bundles the aggregation parameters.  Services
accept a settings object rather than reading the globals, so tests can
pass their own without touching the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple


def _env_list(name: str, default: str) -> Tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


FAMILY_KEYS: Tuple[str, ...] = _env_list("QTO_FAMILY_KEYS", "Family Name,Family")
TYPE_KEYS: Tuple[str, ...] = _env_list("QTO_TYPE_KEYS", "Type Name,Type")
MEASURE_KEY: str = os.getenv("QTO_MEASURE_KEY", "Volume")
MEASURE_UNIT: str = os.getenv("QTO_MEASURE_UNIT", "m³")

# Number of element ids sent to the scene graph per bulk property query.
BULK_BATCH_SIZE: int = _env_int("QTO_BULK_BATCH_SIZE", 500)

# Maximum number of scene snapshots held by the in-memory registry.
MAX_SCENES: int = _env_int("QTO_MAX_SCENES", 16)

LOG_LEVEL: str = os.getenv("QTO_LOG_LEVEL", "INFO").upper()


def extract_debug_enabled() -> bool:
    """Return True when per-fragment extraction diagnostics are requested."""
    return bool(os.getenv("QTO_EXTRACT_DEBUG"))


@dataclass(frozen=True)
class QuantitySettings:
    """Parameters of a quantity takeoff.

    Attributes:
        family_keys: Family property names in priority order.
        type_keys: Type property names in priority order.
        measure_key: Name of the numeric property summed per bucket.
        measure_unit: Unit suffix used when formatting the measure.
        bulk_batch_size: Element ids per bulk property query.
    """

    family_keys: Tuple[str, ...] = FAMILY_KEYS
    type_keys: Tuple[str, ...] = TYPE_KEYS
    measure_key: str = MEASURE_KEY
    measure_unit: str = MEASURE_UNIT
    bulk_batch_size: int = BULK_BATCH_SIZE

    @property
    def property_names(self) -> list[str]:
        """Property names requested from the scene graph, without duplicates."""
        names: list[str] = []
        for name in (*self.family_keys, *self.type_keys, self.measure_key):
            if name not in names:
                names.append(name)
        return names


def load_quantity_settings() -> QuantitySettings:
    """Build settings from the current environment-derived constants."""
    return QuantitySettings()
