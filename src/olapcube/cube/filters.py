"""
Filter operations: slice (one dimension) and dice (several dimensions).

Both match a case-insensitive substring against the stringified dimension
value and share a single predicate evaluator.
"""

from typing import Dict, List, Mapping, Optional, Sequence

from olapcube.cube.dimensions import dimension_label
from olapcube.cube.schema import Fact, check_dimension


def active_filters(filters: Optional[Mapping[str, Optional[str]]]) -> Dict[str, str]:
    """Drop predicates with an empty value; those place no restriction."""
    if not filters:
        return {}
    return {dim: str(value) for dim, value in filters.items() if dim and value}


def matches_filters(fact: Fact, filters: Mapping[str, str]) -> bool:
    """True if the fact satisfies every predicate (logical AND)."""
    for dimension, value in filters.items():
        label = dimension_label(fact.get(dimension)).lower()
        if value.lower() not in label:
            return False
    return True


def dice_facts(facts: Sequence[Fact],
               filters: Optional[Mapping[str, Optional[str]]]) -> List[Fact]:
    """
    Keep facts satisfying all non-empty predicates in ``filters``.

    Returns the input unchanged when no predicate is active.
    """
    active = active_filters(filters)
    if not active:
        return list(facts)
    for dimension in active:
        check_dimension(dimension)
    return [f for f in facts if matches_filters(f, active)]


def slice_facts(facts: Sequence[Fact], dimension: Optional[str],
                value: Optional[str]) -> List[Fact]:
    """Keep facts whose ``dimension`` contains ``value`` (case-insensitive)."""
    if not dimension or not value:
        return list(facts)
    return dice_facts(facts, {dimension: value})
