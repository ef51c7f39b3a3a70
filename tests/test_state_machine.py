from datetime import datetime, timezone

import pytest

from bed_tracker.domain.beds.models import BedState
from bed_tracker.domain.beds.state_machine import (
    ASSIGN,
    CLEAN,
    DISCHARGE,
    TRANSITIONS,
    occupancy_is_consistent,
)

NOW = datetime(2026, 1, 1, 8, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "state, name, urgency, expected",
    [
        (BedState.OCCUPIED, "J. Doe", "critical", True),
        (BedState.OCCUPIED, None, None, False),
        (BedState.OCCUPIED, "J. Doe", None, False),
        (BedState.OCCUPIED, "  ", "critical", False),
        (BedState.OCCUPIED, "J. Doe", "", False),
        (BedState.AVAILABLE, None, None, True),
        (BedState.AVAILABLE, "J. Doe", "critical", False),
        (BedState.MAINTENANCE, "J. Doe", "critical", True),
        (BedState.MAINTENANCE, None, None, True),
        (BedState.MAINTENANCE, None, "critical", False),
    ],
)
def test_occupancy_is_consistent(state, name, urgency, expected):
    assert occupancy_is_consistent(state, name, urgency) is expected


def test_transitions_form_a_single_cycle():
    """Each state is the source of exactly one transition and the cycle closes"""
    assert {t.source for t in TRANSITIONS.values()} == set(BedState)
    assert ASSIGN.target == DISCHARGE.source
    assert DISCHARGE.target == CLEAN.source
    assert CLEAN.target == ASSIGN.source


@pytest.mark.parametrize("transition", [ASSIGN, DISCHARGE, CLEAN])
def test_guard_accepts_only_the_source_state(transition):
    for state in BedState:
        assert transition.allowed_from(state) is (state == transition.source)


def test_assign_changes():
    changes = ASSIGN.changes(NOW, patient_name="J. Doe", urgency_level="critical")
    assert changes == {
        "state": BedState.OCCUPIED,
        "patient_name": "J. Doe",
        "urgency_level": "critical",
        "assigned_at": NOW,
    }
    assert "discharged_at" not in changes


def test_discharge_keeps_patient_fields():
    changes = DISCHARGE.changes(NOW)
    assert changes == {"state": BedState.MAINTENANCE, "discharged_at": NOW}


def test_clean_clears_everything():
    changes = CLEAN.changes(NOW)
    assert changes["state"] == BedState.AVAILABLE
    for field in ("patient_name", "urgency_level", "assigned_at", "discharged_at"):
        assert changes[field] is None


def test_rejection_messages():
    assert ASSIGN.rejection == "Bed not available"
    assert DISCHARGE.rejection == "No patient to discharge"
    assert CLEAN.rejection == "Bed not in maintenance"
