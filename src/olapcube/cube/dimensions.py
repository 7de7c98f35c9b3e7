"""
Dimension utilities: coordinate domains and ordinals for the display axes.
"""

import numbers
from typing import Any, Dict, Iterable, List, Sequence

from olapcube.cube.schema import Fact, QUARTER, QUARTER_DOMAIN, check_dimension


def dimension_label(value: Any) -> str:
    """String form of a dimension value used for matching and deduplication."""
    if value is None:
        return ""
    return str(value)


def _sort_key(value: Any):
    # Numbers first in numeric order, then everything else lexically.
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return (0, float(value), "")
    return (1, 0.0, dimension_label(value))


def unique_values(facts: Iterable[Fact], dimension: str) -> List[Any]:
    """
    Distinct values a dimension takes across a fact collection.

    Values are deduplicated by their string representation (the first value
    seen for a given label is kept) and returned in ascending order.
    """
    check_dimension(dimension)
    seen: Dict[str, Any] = {}
    for fact in facts:
        value = fact.get(dimension)
        seen.setdefault(dimension_label(value), value)
    return sorted(seen.values(), key=_sort_key)


def axis_domain(facts: Iterable[Fact], dimension: str) -> List[Any]:
    """
    Coordinate domain of an axis.

    The quarter axis always spans the fixed [Q1, Q2, Q3, Q4, Total] sequence so
    that roll-up and drill-down do not change the axis geometry.
    """
    if dimension == QUARTER:
        return list(QUARTER_DOMAIN)
    return unique_values(facts, dimension)


def ordinal_map(values: Sequence[Any]) -> Dict[str, int]:
    """Map each value's label to its position in ``values``."""
    return {dimension_label(v): idx for idx, v in enumerate(values)}
