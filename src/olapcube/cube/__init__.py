"""
Cube module: fact model and pure OLAP operations.
"""

from olapcube.cube.schema import (
    AxisMapping, Fact, RawRecord, CubeError, InvalidAxisMappingError,
    UnknownDimensionError, UnknownRowError, DIMENSIONS, QUARTERS,
    QUARTER_DOMAIN, TOTAL, DEFAULT_AXIS_MAPPING
)
from olapcube.cube.dimensions import unique_values, axis_domain, ordinal_map
from olapcube.cube.expansion import (
    expand, expand_rows, derive_baseline, ExpansionResult, SkippedRow
)
from olapcube.cube.filters import slice_facts, dice_facts, active_filters
from olapcube.cube.aggregation import roll_up, drill_down
from olapcube.cube.grid import CubeGrid, CubeCell, build_grid

__all__ = [
    "AxisMapping", "Fact", "RawRecord",
    "CubeError", "InvalidAxisMappingError", "UnknownDimensionError", "UnknownRowError",
    "DIMENSIONS", "QUARTERS", "QUARTER_DOMAIN", "TOTAL", "DEFAULT_AXIS_MAPPING",
    "unique_values", "axis_domain", "ordinal_map",
    "expand", "expand_rows", "derive_baseline", "ExpansionResult", "SkippedRow",
    "slice_facts", "dice_facts", "active_filters",
    "roll_up", "drill_down",
    "CubeGrid", "CubeCell", "build_grid",
]
