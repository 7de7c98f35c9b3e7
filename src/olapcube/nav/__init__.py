"""
Navigation module: cube state, events and the session state machine.
"""

from olapcube.nav.state import CubeState, CubeStatus, CubeSnapshot
from olapcube.nav.events import (
    ActionType, CubeEvent, LoadRowsEvent, SliceEvent, DiceEvent,
    PivotEvent, RollUpEvent, DrillDownEvent, ResetEvent, available_actions
)
from olapcube.nav.session import CubeSession, Transition

__all__ = [
    "CubeState", "CubeStatus", "CubeSnapshot",
    "ActionType", "CubeEvent", "LoadRowsEvent", "SliceEvent", "DiceEvent",
    "PivotEvent", "RollUpEvent", "DrillDownEvent", "ResetEvent", "available_actions",
    "CubeSession", "Transition",
]
