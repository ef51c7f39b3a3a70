"""
Bed lifecycle state machine

A bed moves around a fixed cycle and never skips a step:

    available --assign--> occupied --discharge--> maintenance --clean--> available

Each transition has exactly one source state. The occupancy invariant is a
pure function checked against the values a transition is about to write.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from bed_tracker.domain.beds.models import BedState


def occupancy_is_consistent(
    state: BedState,
    patient_name: Optional[str],
    urgency_level: Optional[str],
) -> bool:
    """Check that the patient fields agree with the bed state.

    Both patient fields are set together or not at all. An occupied bed needs
    non-blank values, an available bed has none, and a bed in maintenance keeps
    whatever its last occupant left until it is cleaned.
    """
    has_name = patient_name is not None
    has_urgency = urgency_level is not None
    if has_name != has_urgency:
        return False

    if state == BedState.OCCUPIED:
        return has_name and bool(patient_name.strip()) and bool(urgency_level.strip())
    if state == BedState.AVAILABLE:
        return not has_name
    return state == BedState.MAINTENANCE


@dataclass(frozen=True)
class Transition:
    name: str
    source: BedState
    target: BedState
    rejection: str
    changes: Callable[..., Dict[str, Any]]

    def allowed_from(self, state: BedState) -> bool:
        return state == self.source


def _assign_changes(now: datetime, patient_name: str, urgency_level: str) -> Dict[str, Any]:
    return {
        "state": BedState.OCCUPIED,
        "patient_name": patient_name,
        "urgency_level": urgency_level,
        "assigned_at": now,
    }


def _discharge_changes(now: datetime) -> Dict[str, Any]:
    # Patient fields stay put so the maintenance record shows who left the bed
    return {
        "state": BedState.MAINTENANCE,
        "discharged_at": now,
    }


def _clean_changes(now: datetime) -> Dict[str, Any]:
    return {
        "state": BedState.AVAILABLE,
        "patient_name": None,
        "urgency_level": None,
        "assigned_at": None,
        "discharged_at": None,
    }


ASSIGN = Transition(
    name="assign",
    source=BedState.AVAILABLE,
    target=BedState.OCCUPIED,
    rejection="Bed not available",
    changes=_assign_changes,
)

DISCHARGE = Transition(
    name="discharge",
    source=BedState.OCCUPIED,
    target=BedState.MAINTENANCE,
    rejection="No patient to discharge",
    changes=_discharge_changes,
)

CLEAN = Transition(
    name="clean",
    source=BedState.MAINTENANCE,
    target=BedState.AVAILABLE,
    rejection="Bed not in maintenance",
    changes=_clean_changes,
)

TRANSITIONS = {t.name: t for t in (ASSIGN, DISCHARGE, CLEAN)}
