"""
Cube session: owns the raw data and cube state and applies events to them.

Events are handled synchronously, one at a time. The session swaps its state
reference only once the new state is fully built, and records every event,
whether it was applied or rejected, in its history.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from olapcube.config import CubeConfig
from olapcube.cube import table
from olapcube.cube.expansion import RawRow
from olapcube.cube.schema import AxisMapping, CubeError, RawRecord
from olapcube.nav.events import (
    ActionType, CubeEvent, DiceEvent, DrillDownEvent, LoadRowsEvent,
    PivotEvent, ResetEvent, RollUpEvent, SliceEvent, available_actions
)
from olapcube.nav.state import CubeSnapshot, CubeState, CubeStatus

logger = logging.getLogger(__name__)


@dataclass
class Transition:
    """
    Outcome of one event: s_t --e--> s_{t+1}.

    Attributes:
        event: The submitted event
        applied: False if the event was rejected or disabled
        from_status: Status before the event
        to_status: Status after the event (unchanged when not applied)
        fact_count: Size of the fact collection after the event
        reason: Why the event was not applied
        timestamp: When the event was handled
    """
    event: CubeEvent
    applied: bool
    from_status: CubeStatus
    to_status: CubeStatus
    fact_count: int
    reason: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.event.action_type.value,
            "description": self.event.describe(),
            "applied": self.applied,
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "fact_count": self.fact_count,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
        }


class CubeSession:
    """
    Interactive OLAP session over a small sales dataset.

    Callers submit events (load rows, slice, dice, pivot, roll up, drill
    down, reset) and read the resulting snapshot; the state itself is never
    handed out for modification.
    """

    def __init__(self, config: Optional[CubeConfig] = None,
                 rows: Optional[Sequence[RawRow]] = None):
        self.config = config or CubeConfig()
        self.session_id = str(uuid.uuid4())[:8]
        self.history: List[Transition] = []
        self._state = CubeState(axis_mapping=self.config.default_axis_mapping)
        if rows:
            self.load_rows(rows)

    @property
    def state(self) -> CubeState:
        return self._state

    @property
    def status(self) -> CubeStatus:
        return self._state.status

    @property
    def rows(self) -> List[RawRecord]:
        return list(self._state.raw_rows)

    def snapshot(self) -> CubeSnapshot:
        return self._state.snapshot()

    def available_actions(self) -> List[ActionType]:
        return available_actions(self._state)

    def dispatch(self, event: CubeEvent) -> Transition:
        """Apply a single event and record the transition."""
        before = self._state
        reason = None
        try:
            after = event.apply(before)
        except CubeError as e:
            after = None
            reason = str(e)

        if after is None:
            reason = reason or event.rejection_reason(before)
            if event.action_type is ActionType.PIVOT:
                logger.warning(f"Rejected {event.describe()}: {reason}")
            else:
                logger.debug(f"Ignored {event.describe()}: {reason}")
            transition = Transition(
                event=event, applied=False, from_status=before.status,
                to_status=before.status, fact_count=len(before.facts),
                reason=reason,
            )
        else:
            self._state = after
            logger.info(
                f"{event.describe()}: {before.status.value} -> "
                f"{after.status.value} ({len(after.facts)} facts)"
            )
            transition = Transition(
                event=event, applied=True, from_status=before.status,
                to_status=after.status, fact_count=len(after.facts),
            )

        self.history.append(transition)
        if self.config.history_limit and len(self.history) > self.config.history_limit:
            del self.history[:-self.config.history_limit]
        return transition

    def load_rows(self, rows: Sequence[RawRow]) -> Transition:
        return self.dispatch(LoadRowsEvent(
            rows=list(rows), log_skipped=self.config.log_skipped_rows
        ))

    def slice(self, dimension: str, value: Optional[str]) -> Transition:
        return self.dispatch(SliceEvent(dimension=dimension, value=value))

    def dice(self, filters: Mapping[str, Optional[str]]) -> Transition:
        return self.dispatch(DiceEvent(filters=dict(filters)))

    def pivot(self, axis_mapping: Union[AxisMapping, Mapping[str, str]]) -> Transition:
        """Accepts an AxisMapping or an ``{x, y, z}`` mapping."""
        return self.dispatch(PivotEvent(
            axis_mapping=axis_mapping,
            available_dimensions=tuple(self.config.available_dimensions),
            log_skipped=self.config.log_skipped_rows,
        ))

    def roll_up(self) -> Transition:
        return self.dispatch(RollUpEvent())

    def drill_down(self) -> Transition:
        return self.dispatch(DrillDownEvent(log_skipped=self.config.log_skipped_rows))

    def reset(self) -> Transition:
        return self.dispatch(ResetEvent(
            axis_mapping=self.config.default_axis_mapping,
            log_skipped=self.config.log_skipped_rows,
        ))

    # Table edits raise the raw-data-changed event.

    def add_row(self, continent: str = "", region: str = "", product: str = "",
                **quarters: Any) -> Transition:
        return self.load_rows(table.add_row(
            self.rows, continent=continent, region=region, product=product, **quarters
        ))

    def update_cell(self, row_id: int, column: str, value: Any) -> Transition:
        return self.load_rows(table.update_cell(self.rows, row_id, column, value))

    def delete_row(self, row_id: int) -> Transition:
        return self.load_rows(table.delete_row(self.rows, row_id))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "status": self.status.value,
            "axis_mapping": self._state.axis_mapping.to_dict(),
            "filters": dict(self._state.filters),
            "row_count": len(self._state.raw_rows),
            "fact_count": len(self._state.facts),
            "skipped_rows": [s.describe() for s in self._state.skipped],
            "history": [t.to_dict() for t in self.history],
        }
