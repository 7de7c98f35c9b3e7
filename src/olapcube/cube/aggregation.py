"""
Aggregation operations over the quarter -> Total hierarchy.

Roll-up collapses the quarter facts of each (continent, region, product)
entity into one ``Total`` fact; drill-down restores the collection held
before the roll-up.
"""

import math
from typing import Dict, List, Sequence, Tuple

from olapcube.cube.dimensions import dimension_label
from olapcube.cube.schema import Fact, TOTAL, is_missing


def rollup_id(key: Tuple[str, str, str]) -> str:
    return "-".join(key)


def roll_up(facts: Sequence[Fact]) -> List[Fact]:
    """
    Aggregate facts into one ``Total`` fact per entity.

    Groups are kept in first-appearance order. Totals use exactly rounded
    summation, so they do not depend on the order of the input facts.
    Facts that are already totals contribute their total, which makes
    ``roll_up(roll_up(S)) == roll_up(S)``. Entities are compared by their
    labels, so a missing value and an empty string fall in one group.
    """
    groups: Dict[Tuple[str, str, str], Tuple[Fact, List[float]]] = {}
    for fact in facts:
        key = tuple(dimension_label(v) for v in fact.entity_key)
        if key not in groups:
            groups[key] = (fact, [])
        measure = fact.display_value
        if not is_missing(measure):
            groups[key][1].append(measure)

    rolled = []
    for key, (first, values) in groups.items():
        rolled.append(Fact(
            id=rollup_id(key),
            continent=first.continent,
            region=first.region,
            product=first.product,
            quarter=TOTAL,
            value=None,
            q1=first.q1,
            q2=first.q2,
            q3=first.q3,
            q4=first.q4,
            total=math.fsum(values),
        ))
    return rolled


def drill_down(snapshot: Sequence[Fact]) -> List[Fact]:
    """
    Inverse of :func:`roll_up`: return the collection captured before it.

    Below the quarter level there is no finer granularity, so the snapshot
    is the only thing a rolled-up collection can expand into.
    """
    return list(snapshot)
