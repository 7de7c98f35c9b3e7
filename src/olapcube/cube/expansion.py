"""
Fact expansion: turns wide raw rows (one row per entity, four quarter
columns) into a normalized fact collection (one fact per entity per quarter).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Union

from olapcube.cube.schema import (
    AxisMapping, Fact, RawRecord, QUARTER, QUARTERS, is_missing
)

logger = logging.getLogger(__name__)

RawRow = Union[RawRecord, Mapping[str, Any]]


@dataclass
class SkippedRow:
    """A raw row excluded from expansion and the dimensions it was missing."""
    row: RawRecord
    missing: List[str]

    def describe(self) -> str:
        return f"row {self.row.id} missing value for {', '.join(self.missing)}"


@dataclass
class ExpansionResult:
    """Facts emitted by an expansion plus the rows it had to skip."""
    facts: List[Fact] = field(default_factory=list)
    skipped: List[SkippedRow] = field(default_factory=list)


def coerce_rows(rows: Iterable[RawRow]) -> List[RawRecord]:
    """Accept RawRecord objects or plain table-row mappings."""
    return [r if isinstance(r, RawRecord) else RawRecord.from_dict(r) for r in rows]


def _lacks(row: RawRecord, dimension: str) -> bool:
    # Quarter is derived per fact, so every row carries it.
    if dimension == QUARTER:
        return False
    value = row.get(dimension)
    return is_missing(value) or value == ""


def expand_rows(rows: Iterable[RawRow], axis_mapping: AxisMapping,
                log_skipped: bool = True) -> ExpansionResult:
    """
    Expand raw rows into quarter facts under an axis mapping.

    Rows without a value for the X- or Y-mapped dimension are skipped as a
    whole and reported in ``ExpansionResult.skipped``. Each surviving row
    yields one fact per quarter that has a value, in Q1..Q4 order.
    """
    result = ExpansionResult()
    for row in coerce_rows(rows):
        missing = [d for d in (axis_mapping.x, axis_mapping.y) if _lacks(row, d)]
        if missing:
            skipped = SkippedRow(row=row, missing=missing)
            result.skipped.append(skipped)
            if log_skipped:
                logger.warning(f"Skipping {skipped.describe()}")
            continue

        measures = row.measures
        for quarter in QUARTERS:
            value = measures[quarter]
            if is_missing(value):
                continue
            result.facts.append(Fact(
                id=f"{row.id}-{quarter}",
                continent=row.continent,
                region=row.region,
                product=row.product,
                quarter=quarter,
                value=value,
                q1=row.q1,
                q2=row.q2,
                q3=row.q3,
                q4=row.q4,
            ))
    return result


def expand(rows: Iterable[RawRow], axis_mapping: AxisMapping) -> List[Fact]:
    """Expand raw rows into facts, dropping the skip diagnostics."""
    return expand_rows(rows, axis_mapping).facts


def derive_baseline(rows: Iterable[RawRow], axis_mapping: AxisMapping,
                    log_skipped: bool = True) -> ExpansionResult:
    """Baseline fact collection: raw data projected onto the current axes."""
    result = expand_rows(rows, axis_mapping, log_skipped=log_skipped)
    logger.info(
        f"Derived baseline of {len(result.facts)} facts "
        f"({len(result.skipped)} rows skipped) under {axis_mapping.to_dict()}"
    )
    return result
