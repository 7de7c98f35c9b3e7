"""
Cube events: the operations a user can submit to a cube session.

An event e: S -> S' is a partial function over cube states. ``apply`` returns
the new state, or None when the event is not applicable to the given state
(a disabled operation). Events never mutate the state they are applied to.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from olapcube.cube.aggregation import drill_down, roll_up
from olapcube.cube.expansion import RawRow
from olapcube.cube.filters import active_filters, dice_facts
from olapcube.cube.schema import (
    AxisMapping, DEFAULT_AXIS_MAPPING, DIMENSIONS, InvalidAxisMappingError
)
from olapcube.nav.state import CubeState, CubeStatus


class ActionType(Enum):
    """Types of cube events."""
    LOAD_ROWS = "load_rows"
    SLICE = "slice"
    DICE = "dice"
    PIVOT = "pivot"
    ROLL_UP = "roll_up"
    DRILL_DOWN = "drill_down"
    RESET = "reset"


class CubeEvent(ABC):
    """Abstract base class for cube events."""

    @property
    @abstractmethod
    def action_type(self) -> ActionType:
        pass

    @abstractmethod
    def is_applicable(self, state: CubeState) -> bool:
        pass

    @abstractmethod
    def apply(self, state: CubeState) -> Optional[CubeState]:
        """Return the state after this event, or None if not applicable."""
        pass

    @abstractmethod
    def describe(self) -> str:
        pass

    def rejection_reason(self, state: CubeState) -> str:
        return f"{self.action_type.value} is not available in {state.status.value} state"


@dataclass
class LoadRowsEvent(CubeEvent):
    """Raw data changed: recompute everything under the current mapping."""
    rows: Sequence[RawRow]
    log_skipped: bool = True

    @property
    def action_type(self) -> ActionType:
        return ActionType.LOAD_ROWS

    def is_applicable(self, state: CubeState) -> bool:
        return True

    def apply(self, state: CubeState) -> Optional[CubeState]:
        return CubeState.derive(self.rows, state.axis_mapping, self.log_skipped)

    def describe(self) -> str:
        return f"Load {len(self.rows)} rows"


class _FilterEvent(CubeEvent):
    """Slice and dice both re-filter the unfiltered baseline."""

    @abstractmethod
    def filter_map(self) -> Dict[str, str]:
        pass

    def is_applicable(self, state: CubeState) -> bool:
        # Filters are frozen while the cube is rolled up.
        return not state.rolled_up

    def apply(self, state: CubeState) -> Optional[CubeState]:
        if not self.is_applicable(state):
            return None
        filters = self.filter_map()
        return replace(
            state,
            facts=tuple(dice_facts(state.baseline, filters)),
            filters=filters,
        )


@dataclass
class SliceEvent(_FilterEvent):
    """Single-dimension substring filter."""
    dimension: str
    value: Optional[str]

    @property
    def action_type(self) -> ActionType:
        return ActionType.SLICE

    def filter_map(self) -> Dict[str, str]:
        return active_filters({self.dimension: self.value})

    def describe(self) -> str:
        return f"Slice {self.dimension} ~ {self.value!r}"


@dataclass
class DiceEvent(_FilterEvent):
    """Multi-dimension conjunctive substring filter."""
    filters: Dict[str, Optional[str]] = field(default_factory=dict)

    @property
    def action_type(self) -> ActionType:
        return ActionType.DICE

    def filter_map(self) -> Dict[str, str]:
        return active_filters(self.filters)

    def describe(self) -> str:
        active = self.filter_map()
        if not active:
            return "Dice (no filters)"
        return "Dice " + ", ".join(f"{d} ~ {v!r}" for d, v in active.items())


@dataclass
class PivotEvent(CubeEvent):
    """
    Re-map dimensions onto axes.

    A valid mapping forces a full recomputation from raw data, which clears
    any filters and roll-up. The mapping may be given as an ``{x, y, z}``
    dict; it is only resolved when the event is applied, so a malformed
    request is rejected like any other invalid mapping.
    """
    axis_mapping: Union[AxisMapping, Mapping[str, str]]
    available_dimensions: Tuple[str, ...] = DIMENSIONS
    log_skipped: bool = True

    @property
    def action_type(self) -> ActionType:
        return ActionType.PIVOT

    def resolve(self) -> AxisMapping:
        """Return the requested mapping, validated against ``available_dimensions``."""
        mapping = self.axis_mapping
        if not isinstance(mapping, AxisMapping):
            mapping = AxisMapping.from_dict(mapping)
        return mapping.validate(self.available_dimensions)

    def is_applicable(self, state: CubeState) -> bool:
        try:
            self.resolve()
        except InvalidAxisMappingError:
            return False
        return True

    def apply(self, state: CubeState) -> Optional[CubeState]:
        if not self.is_applicable(state):
            return None
        return CubeState.derive(state.raw_rows, self.resolve(), self.log_skipped)

    def rejection_reason(self, state: CubeState) -> str:
        try:
            self.resolve()
        except InvalidAxisMappingError as e:
            return str(e)
        return super().rejection_reason(state)

    def describe(self) -> str:
        m = self.axis_mapping
        if isinstance(m, AxisMapping):
            return f"Pivot to x={m.x}, y={m.y}, z={m.z}"
        return "Pivot to " + ", ".join(f"{axis}={dim}" for axis, dim in m.items())


@dataclass
class RollUpEvent(CubeEvent):
    """Aggregate quarter facts into per-entity totals."""

    @property
    def action_type(self) -> ActionType:
        return ActionType.ROLL_UP

    def is_applicable(self, state: CubeState) -> bool:
        return not state.rolled_up

    def apply(self, state: CubeState) -> Optional[CubeState]:
        if not self.is_applicable(state):
            return None
        return replace(
            state,
            facts=tuple(roll_up(state.facts)),
            rolled_up=True,
            pre_rollup_snapshot=state.facts,
        )

    def describe(self) -> str:
        return "Roll up quarters to Total"


@dataclass
class DrillDownEvent(CubeEvent):
    """
    Undo a roll-up by restoring the pre-rollup snapshot, or, when not rolled
    up, clear active filters and recompute the baseline from raw data.
    """
    log_skipped: bool = True

    @property
    def action_type(self) -> ActionType:
        return ActionType.DRILL_DOWN

    def is_applicable(self, state: CubeState) -> bool:
        return state.rolled_up or bool(state.filters)

    def apply(self, state: CubeState) -> Optional[CubeState]:
        if state.rolled_up:
            return replace(
                state,
                facts=tuple(drill_down(state.pre_rollup_snapshot)),
                rolled_up=False,
                pre_rollup_snapshot=(),
            )
        if state.filters:
            return CubeState.derive(state.raw_rows, state.axis_mapping, self.log_skipped)
        return None

    def describe(self) -> str:
        return "Drill down"


@dataclass
class ResetEvent(CubeEvent):
    """Restore the default mapping with no filters and no roll-up."""
    axis_mapping: AxisMapping = DEFAULT_AXIS_MAPPING
    log_skipped: bool = True

    @property
    def action_type(self) -> ActionType:
        return ActionType.RESET

    def is_applicable(self, state: CubeState) -> bool:
        return True

    def apply(self, state: CubeState) -> Optional[CubeState]:
        return CubeState.derive(state.raw_rows, self.axis_mapping, self.log_skipped)

    def describe(self) -> str:
        return "Reset cube"


def available_actions(state: CubeState) -> List[ActionType]:
    """
    Operations a caller may offer in the given state.

    Pivot is listed because a valid mapping is always accepted; whether a
    particular mapping is valid is decided when the event is applied.
    """
    actions = [ActionType.LOAD_ROWS]
    if state.status is not CubeStatus.ROLLED_UP:
        actions.extend([ActionType.SLICE, ActionType.DICE, ActionType.ROLL_UP])
    else:
        actions.append(ActionType.DRILL_DOWN)
    if state.status is CubeStatus.FILTERED:
        actions.append(ActionType.DRILL_DOWN)
    actions.extend([ActionType.PIVOT, ActionType.RESET])
    return actions
