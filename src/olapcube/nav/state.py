"""
Cube state: the live exploration state and its renderer-facing snapshot.

A CubeState is immutable. Every transition builds a new state from the old
one, so a caller never observes a half-applied operation.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Tuple

import numpy as np
import pandas as pd

from olapcube.cube.expansion import RawRow, SkippedRow, coerce_rows, derive_baseline
from olapcube.cube.grid import CubeGrid, build_grid
from olapcube.cube.schema import (
    AxisMapping, DEFAULT_AXIS_MAPPING, DIMENSIONS, Fact, QUARTERS, RawRecord, TOTAL,
    is_missing,
)


class CubeStatus(Enum):
    """Phases of the exploration state machine."""
    BASE = "base"
    FILTERED = "filtered"
    ROLLED_UP = "rolled_up"


@dataclass(frozen=True)
class CubeState:
    """
    Attributes:
        raw_rows: Raw records the cube was derived from
        axis_mapping: Current assignment of dimensions to axes
        baseline: Facts derived from raw_rows under axis_mapping, unfiltered
        facts: Current derived fact collection shown to the renderer
        filters: Active substring predicates, dimension -> value (read-only)
        rolled_up: Whether facts are per-entity totals
        pre_rollup_snapshot: Facts held immediately before the last roll-up
        skipped: Rows excluded by the last expansion
    """
    raw_rows: Tuple[RawRecord, ...] = ()
    axis_mapping: AxisMapping = DEFAULT_AXIS_MAPPING
    baseline: Tuple[Fact, ...] = ()
    facts: Tuple[Fact, ...] = ()
    filters: Mapping[str, str] = field(default_factory=dict)
    rolled_up: bool = False
    pre_rollup_snapshot: Tuple[Fact, ...] = ()
    skipped: Tuple[SkippedRow, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "filters", MappingProxyType(dict(self.filters)))

    @property
    def status(self) -> CubeStatus:
        if self.rolled_up:
            return CubeStatus.ROLLED_UP
        if self.filters:
            return CubeStatus.FILTERED
        return CubeStatus.BASE

    @property
    def has_data(self) -> bool:
        return bool(self.raw_rows)

    @classmethod
    def derive(cls, raw_rows: Iterable[RawRow], axis_mapping: AxisMapping,
               log_skipped: bool = True) -> "CubeState":
        """Fresh BASE state: raw data projected onto ``axis_mapping``."""
        rows = tuple(coerce_rows(raw_rows))
        if not rows:
            return cls(axis_mapping=axis_mapping)
        result = derive_baseline(rows, axis_mapping, log_skipped=log_skipped)
        baseline = tuple(result.facts)
        return cls(
            raw_rows=rows,
            axis_mapping=axis_mapping,
            baseline=baseline,
            facts=baseline,
            skipped=tuple(result.skipped),
        )

    def snapshot(self) -> "CubeSnapshot":
        return CubeSnapshot(
            facts=list(self.facts),
            axis_mapping=self.axis_mapping,
            filters=dict(self.filters),
            status=self.status,
        )


FRAME_COLUMNS = ["id"] + list(DIMENSIONS) + ["value"] + list(QUARTERS) + [TOTAL]


@dataclass
class CubeSnapshot:
    """
    What the renderer receives: current facts plus the axis mapping.

    An empty snapshot is a valid result (e.g. a filter that matched nothing),
    not an error.
    """
    facts: List[Fact]
    axis_mapping: AxisMapping
    filters: Dict[str, str]
    status: CubeStatus

    @property
    def is_empty(self) -> bool:
        return not self.facts

    @property
    def row_count(self) -> int:
        return len(self.facts)

    def to_frame(self) -> pd.DataFrame:
        """Facts as a DataFrame; ``Total`` is NaN for quarter facts."""
        return pd.DataFrame([f.to_dict() for f in self.facts], columns=FRAME_COLUMNS)

    def grid(self) -> CubeGrid:
        return build_grid(self.facts, self.axis_mapping)

    def statistics(self) -> Dict[str, float]:
        """Summary statistics of the displayed measure (value, or Total)."""
        values = np.array([f.display_value for f in self.facts
                           if not is_missing(f.display_value)], dtype=float)
        if len(values) == 0:
            return {"count": 0}
        return {
            "count": int(len(values)),
            "sum": float(values.sum()),
            "mean": float(values.mean()),
            "std": float(values.std(ddof=1)) if len(values) > 1 else 0.0,
            "min": float(values.min()),
            "max": float(values.max()),
        }

    def get_summary(self) -> Dict[str, Any]:
        return {
            "row_count": self.row_count,
            "status": self.status.value,
            "axis_mapping": self.axis_mapping.to_dict(),
            "filters": self.filters,
            "measures": self.statistics(),
        }
