"""
Quantity aggregation keyed by family and type.

Property records coming back from a bulk query are folded into buckets
keyed ``"<family>|<type>"``.  Each bucket collects the element ids that
fell into it and the sum of one numeric property (``Volume`` by
default).  Missing family or type values become ``"Unknown"`` and a
measure that is missing or cannot be read as a number contributes 0, so
aggregation never fails on heterogeneous model data.

Bucket accumulation is commutative: partial aggregations over disjoint
batches can be combined with :func:`merge_buckets` in any order.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from .scene_graph import PropertyRecord

UNKNOWN = "Unknown"
KEY_SEPARATOR = "|"

# Leading decimal number, the same prefix a browser's parseFloat accepts.
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass
class AggregationBucket:
    element_ids: List[int] = field(default_factory=list)
    total_measure: float = 0.0

    @property
    def count(self) -> int:
        return len(self.element_ids)


def parse_measure(value: Any) -> float:
    """Read a property value as a number, defaulting to 0.

    Numbers are used as they are.  Strings contribute their leading
    numeric prefix (``"2.5 m³"`` reads as 2.5).  Everything else, and
    any non-finite result, reads as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value))
        if match is None:
            return 0.0
        number = float(match.group(1))
    return number if math.isfinite(number) else 0.0


def _first_value(record: PropertyRecord, keys: Sequence[str]) -> Any:
    for key in keys:
        value = record.value_of(key)
        if value is not None:
            return value
    return None


def bucket_key(family: Any, type_name: Any) -> str:
    # Any falsy value (None, "", 0) reads as missing.
    family = str(family) if family else UNKNOWN
    type_name = str(type_name) if type_name else UNKNOWN
    return f"{family}{KEY_SEPARATOR}{type_name}"


def split_bucket_key(key: str) -> Tuple[str, str]:
    family, _, type_name = key.partition(KEY_SEPARATOR)
    return family, type_name


def aggregate(
    records: Iterable[PropertyRecord],
    family_keys: Sequence[str],
    type_keys: Sequence[str],
    measure_key: str,
) -> Dict[str, AggregationBucket]:
    """Fold property records into family/type buckets.

    Args:
        records: Property records, typically from a bulk query.
        family_keys: Family property names in priority order.
        type_keys: Type property names in priority order.
        measure_key: Name of the numeric property to sum.

    Returns:
        Buckets keyed ``"family|type"``, in order of first occurrence.
    """
    buckets: Dict[str, AggregationBucket] = {}
    for record in records:
        key = bucket_key(_first_value(record, family_keys), _first_value(record, type_keys))
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = AggregationBucket()
        bucket.element_ids.append(record.db_id)
        bucket.total_measure += parse_measure(record.value_of(measure_key))
    return buckets


def merge_buckets(*partials: Mapping[str, AggregationBucket]) -> Dict[str, AggregationBucket]:
    """Combine partial aggregations into new buckets.

    Inputs are not modified.  Key order follows first occurrence across
    ``partials`` in the order given.
    """
    merged: Dict[str, AggregationBucket] = {}
    for partial in partials:
        for key, bucket in partial.items():
            target = merged.get(key)
            if target is None:
                target = merged[key] = AggregationBucket()
            target.element_ids.extend(bucket.element_ids)
            target.total_measure += bucket.total_measure
    return merged


def format_measure(value: float, unit: str) -> str:
    """Format a bucket measure for display, ``"-"`` when nothing to show."""
    rounded = round(value, 2)
    if rounded <= 0:
        return "-"
    return f"{rounded:.2f} {unit}".rstrip()


def format_quantity_rows(
    buckets: Mapping[str, AggregationBucket],
    unit: str,
) -> List[Dict[str, Any]]:
    """Return takeoff table rows (family, type, count, measure) in bucket order."""
    rows: List[Dict[str, Any]] = []
    for key, bucket in buckets.items():
        family, type_name = split_bucket_key(key)
        rows.append(
            {
                "family": family,
                "type": type_name,
                "count": bucket.count,
                "measure": format_measure(bucket.total_measure, unit),
                "elementIds": list(bucket.element_ids),
            }
        )
    return rows
