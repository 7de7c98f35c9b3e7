"""
Cube grid: positions facts on the three display axes for a renderer.

Each fact becomes one cell whose coordinates are the ordinals of its
dimension values in the axis domains. Geometry (sizes, spacing, camera) is
left to the renderer.
"""

import colorsys
import hashlib
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from olapcube.cube.dimensions import axis_domain, dimension_label, ordinal_map
from olapcube.cube.schema import AxisMapping, Fact


@dataclass
class CubeCell:
    """One block of the cube: a fact at integer (x, y, z) ordinals."""
    fact_id: str
    x: int
    y: int
    z: int
    value: Optional[float]
    color: str

    @property
    def position(self) -> Tuple[int, int, int]:
        return (self.x, self.y, self.z)


@dataclass
class CubeGrid:
    """Axis domains and the cells placed on them."""
    axis_mapping: AxisMapping
    domains: Dict[str, List[Any]]
    cells: List[CubeCell]

    @property
    def shape(self) -> Tuple[int, int, int]:
        return tuple(len(self.domains[axis]) for axis in ("x", "y", "z"))

    def to_frame(self) -> pd.DataFrame:
        columns = ["fact_id", "x", "y", "z", "x_label", "y_label", "z_label",
                   "value", "color"]
        rows = []
        for cell in self.cells:
            rows.append({
                "fact_id": cell.fact_id,
                "x": cell.x,
                "y": cell.y,
                "z": cell.z,
                "x_label": self.domains["x"][cell.x],
                "y_label": self.domains["y"][cell.y],
                "z_label": self.domains["z"][cell.z],
                "value": cell.value,
                "color": cell.color,
            })
        return pd.DataFrame(rows, columns=columns)


def block_color(fact: Fact, saturation: float = 0.7, lightness: float = 0.5) -> str:
    """Hex colour whose hue is derived from a hash of the fact id."""
    digest = hashlib.md5(fact.id.encode()).hexdigest()
    hue = int(digest[:8], 16) / 0xFFFFFFFF
    r, g, b = colorsys.hls_to_rgb(hue, lightness, saturation)
    return "#{:02x}{:02x}{:02x}".format(round(r * 255), round(g * 255), round(b * 255))


def build_grid(facts: Sequence[Fact], axis_mapping: AxisMapping) -> CubeGrid:
    """Place every fact on the grid spanned by the mapped axis domains."""
    domains = {
        axis: axis_domain(facts, dim)
        for axis, dim in zip(("x", "y", "z"), axis_mapping.axes)
    }
    ordinals = {axis: ordinal_map(values) for axis, values in domains.items()}

    cells = []
    for fact in facts:
        coords = {}
        for axis, dim in zip(("x", "y", "z"), axis_mapping.axes):
            coords[axis] = ordinals[axis].get(dimension_label(fact.get(dim)))
        if None in coords.values():
            continue
        cells.append(CubeCell(
            fact_id=fact.id,
            value=fact.display_value,
            color=block_color(fact),
            **coords,
        ))
    return CubeGrid(axis_mapping=axis_mapping, domains=domains, cells=cells)
