"""
Configuration for cube sessions.
"""

from dataclasses import dataclass
from typing import Tuple

from olapcube.cube.schema import (
    AxisMapping, DEFAULT_AXIS_MAPPING, DIMENSIONS, QUARTER
)


@dataclass
class CubeConfig:
    """
    Configuration for a cube session.

    Attributes:
        default_axis_mapping: Mapping used initially and restored on reset
        available_dimensions: Dimensions a pivot may place on an axis
        log_skipped_rows: Emit a warning for every row skipped by expansion
        history_limit: Maximum number of transitions kept (0 = unbounded)
    """
    default_axis_mapping: AxisMapping = DEFAULT_AXIS_MAPPING
    available_dimensions: Tuple[str, ...] = DIMENSIONS
    log_skipped_rows: bool = True
    history_limit: int = 0

    def __post_init__(self):
        self.default_axis_mapping.validate(self.available_dimensions)

    @property
    def filterable_dimensions(self) -> Tuple[str, ...]:
        """Dimensions offered for slice/dice; quarter is derived, not a source field."""
        return tuple(d for d in self.available_dimensions if d != QUARTER)
