"""
olapcube: slice, dice, pivot, roll-up and drill-down over a small sales cube.

Flat quarterly sales rows are expanded into a dimensional fact model; a cube
session applies OLAP operations to it and exposes the resulting facts and
axis mapping to a renderer.
"""

__version__ = "0.1.0"

from olapcube.config import CubeConfig
from olapcube.cube.schema import AxisMapping, Fact, RawRecord
from olapcube.nav.session import CubeSession, Transition
from olapcube.nav.state import CubeSnapshot, CubeState, CubeStatus

__all__ = [
    "CubeConfig",
    "AxisMapping",
    "Fact",
    "RawRecord",
    "CubeSession",
    "Transition",
    "CubeSnapshot",
    "CubeState",
    "CubeStatus",
]
