"""
Cube schema: the dimensional fact model of the sales cube.

A raw record carries one entity's quarterly series; expansion turns it into
facts, one per (entity, quarter). An axis mapping assigns three distinct
dimensions to the X/Y/Z display axes.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple


CONTINENT = "continent"
REGION = "region"
PRODUCT = "product"
QUARTER = "quarter"

DIMENSIONS: Tuple[str, ...] = (CONTINENT, REGION, PRODUCT, QUARTER)
ENTITY_DIMENSIONS: Tuple[str, ...] = (CONTINENT, REGION, PRODUCT)

QUARTERS: Tuple[str, ...] = ("Q1", "Q2", "Q3", "Q4")
TOTAL = "Total"
QUARTER_DOMAIN: Tuple[str, ...] = QUARTERS + (TOTAL,)


class CubeError(Exception):
    """Base class for cube engine errors."""


class InvalidAxisMappingError(CubeError, ValueError):
    """Raised when an axis mapping does not occupy three distinct dimensions."""


class UnknownDimensionError(CubeError, KeyError):
    """Raised when a dimension name is not part of the schema."""


class UnknownRowError(CubeError, KeyError):
    """Raised when a raw row id does not exist in the table."""


def is_missing(value: Any) -> bool:
    """True for absent measures and dimension values (None or NaN)."""
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def check_dimension(name: str) -> str:
    if name not in DIMENSIONS:
        raise UnknownDimensionError(name)
    return name


@dataclass(frozen=True)
class RawRecord:
    """
    One entity's quarterly sales series, as edited in the input table.

    Attributes:
        id: Unique row identifier
        continent, region, product: Free-text dimension values (may be blank)
        q1..q4: Quarterly measures; None when the quarter has no value
    """
    id: int
    continent: Optional[str] = None
    region: Optional[str] = None
    product: Optional[str] = None
    q1: Optional[float] = None
    q2: Optional[float] = None
    q3: Optional[float] = None
    q4: Optional[float] = None

    def get(self, dimension: str) -> Any:
        """Return the value of a dimension or quarter column (``'Q1'``..``'Q4'``)."""
        if dimension in QUARTERS:
            return getattr(self, dimension.lower())
        return getattr(self, check_dimension(dimension), None)

    @property
    def measures(self) -> Dict[str, Optional[float]]:
        return {q: getattr(self, q.lower()) for q in QUARTERS}

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, CONTINENT: self.continent,
                REGION: self.region, PRODUCT: self.product}
        data.update(self.measures)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawRecord":
        """Build a record from a table row, accepting ``Q1`` or ``q1`` keys."""
        quarters = {}
        for q in QUARTERS:
            value = data.get(q, data.get(q.lower()))
            quarters[q.lower()] = None if is_missing(value) else value
        dims = {}
        for d in ENTITY_DIMENSIONS:
            value = data.get(d)
            dims[d] = None if is_missing(value) else value
        return cls(id=data["id"], **dims, **quarters)


@dataclass(frozen=True)
class Fact:
    """
    A single measured value at one (continent, region, product, quarter) cell.

    For quarter facts ``value`` is that quarter's measure and ``total`` is None.
    For rolled-up facts ``quarter`` is ``'Total'``, ``value`` is None and the
    aggregate lives in ``total``. The four original quarterly measures are
    always kept so the entity can be re-aggregated later.
    """
    id: str
    continent: Optional[str]
    region: Optional[str]
    product: Optional[str]
    quarter: str
    value: Optional[float] = None
    q1: Optional[float] = None
    q2: Optional[float] = None
    q3: Optional[float] = None
    q4: Optional[float] = None
    total: Optional[float] = None

    @property
    def entity_key(self) -> Tuple[Any, Any, Any]:
        """The (continent, region, product) triple identifying the source entity."""
        return (self.continent, self.region, self.product)

    @property
    def is_total(self) -> bool:
        return self.quarter == TOTAL

    @property
    def display_value(self) -> Optional[float]:
        return self.total if self.is_total else self.value

    def get(self, dimension: str) -> Any:
        return getattr(self, check_dimension(dimension))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the field names used at the renderer boundary."""
        data = {
            "id": self.id,
            CONTINENT: self.continent,
            REGION: self.region,
            PRODUCT: self.product,
            QUARTER: self.quarter,
            "value": self.value,
            "Q1": self.q1,
            "Q2": self.q2,
            "Q3": self.q3,
            "Q4": self.q4,
        }
        if self.is_total:
            data[TOTAL] = self.total
        return data


@dataclass(frozen=True)
class AxisMapping:
    """
    Assignment of dimensions to the three display axes.

    Attributes:
        x: Dimension on the X axis
        y: Dimension on the Y axis
        z: Dimension on the Z axis (conventionally ``quarter``)
    """
    x: str = CONTINENT
    y: str = REGION
    z: str = QUARTER

    @property
    def axes(self) -> Tuple[str, str, str]:
        return (self.x, self.y, self.z)

    def validate(self, dimensions: Sequence[str] = DIMENSIONS) -> "AxisMapping":
        """Check that the three axes hold three distinct dimensions from ``dimensions``."""
        unknown = [d for d in self.axes if d not in dimensions]
        if unknown:
            raise InvalidAxisMappingError(
                f"Unknown dimension(s) {unknown}; expected one of {list(dimensions)}"
            )
        if len(set(self.axes)) != 3:
            raise InvalidAxisMappingError(
                f"X, Y and Z axes must be unique, got {self.to_dict()}"
            )
        return self

    @property
    def is_valid(self) -> bool:
        try:
            self.validate()
        except InvalidAxisMappingError:
            return False
        return True

    def to_dict(self) -> Dict[str, str]:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, data: Mapping[str, str]) -> "AxisMapping":
        missing = [axis for axis in ("x", "y", "z") if not data.get(axis)]
        if missing:
            raise InvalidAxisMappingError(f"No dimension given for axis {', '.join(missing)}")
        return cls(x=data["x"], y=data["y"], z=data["z"])


DEFAULT_AXIS_MAPPING = AxisMapping()
