"""
Raw table editing: the row operations of the input data table.

All helpers return a new list of records; the input list is never mutated,
so a list already handed to the cube stays valid for that computation.
"""

import math
import re
from dataclasses import replace
from typing import Any, List, Sequence

import pandas as pd

from olapcube.cube.schema import (
    ENTITY_DIMENSIONS, QUARTERS, RawRecord, UnknownRowError
)

_LEADING_NUMBER = re.compile(r"\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")

TABLE_COLUMNS = ["id"] + list(ENTITY_DIMENSIONS) + list(QUARTERS)


def parse_measure(value: Any) -> float:
    """
    Coerce a quarter cell edit to a number.

    Reads the leading numeric part of strings ("12.5k" -> 12.5); anything
    unparseable, empty or NaN becomes 0.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value)) if value is not None else None
        if not match:
            return 0.0
        number = float(match.group(0))
    return 0.0 if math.isnan(number) else number


def next_row_id(rows: Sequence[RawRecord]) -> int:
    return max((r.id for r in rows), default=0) + 1


def add_row(rows: Sequence[RawRecord], continent: str = "", region: str = "",
            product: str = "", **quarters: Any) -> List[RawRecord]:
    """Append a row with the next free id; quarters default to 0."""
    measures = {q.lower(): parse_measure(quarters.get(q, 0)) for q in QUARTERS}
    row = RawRecord(id=next_row_id(rows), continent=continent,
                    region=region, product=product, **measures)
    return list(rows) + [row]


def _find(rows: Sequence[RawRecord], row_id: int) -> int:
    for idx, row in enumerate(rows):
        if row.id == row_id:
            return idx
    raise UnknownRowError(row_id)


def update_cell(rows: Sequence[RawRecord], row_id: int, column: str,
                value: Any) -> List[RawRecord]:
    """Set one cell; quarter columns are coerced with :func:`parse_measure`."""
    idx = _find(rows, row_id)
    if column in QUARTERS:
        changes = {column.lower(): parse_measure(value)}
    elif column in ENTITY_DIMENSIONS:
        changes = {column: value}
    else:
        raise KeyError(f"Column {column!r} is not editable")
    updated = list(rows)
    updated[idx] = replace(rows[idx], **changes)
    return updated


def delete_row(rows: Sequence[RawRecord], row_id: int) -> List[RawRecord]:
    idx = _find(rows, row_id)
    return [r for i, r in enumerate(rows) if i != idx]


def records_from_frame(df: pd.DataFrame, id_column: str = "id") -> List[RawRecord]:
    """
    Read raw records from a DataFrame with continent/region/product/Q1..Q4
    columns. Rows get sequential ids starting at 1 when the frame has no
    ``id_column``. Missing columns and NaN cells become None.
    """
    frame = df.copy()
    if id_column in frame.columns:
        frame = frame.rename(columns={id_column: "id"})
    else:
        frame["id"] = range(1, len(frame) + 1)

    records = []
    for row in frame.to_dict(orient="records"):
        row["id"] = int(row["id"])
        records.append(RawRecord.from_dict(row))
    return records


def records_to_frame(rows: Sequence[RawRecord]) -> pd.DataFrame:
    return pd.DataFrame([r.to_dict() for r in rows], columns=TABLE_COLUMNS)
