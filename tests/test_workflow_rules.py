"""
Unit tests for the application status transition rules.
"""
import pytest

from admissions.core.workflow_rules import (
    ApplicationStatus,
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    validate_transition,
    allowed_transitions,
    is_terminal,
    is_valid_status,
    can_edit,
    can_delete,
    humanize_status,
)

ALL_STATUSES = [status.value for status in ApplicationStatus]

EXPECTED_TABLE = {
    "submitted": {"under-review"},
    "under-review": {"interview-scheduled", "rejected"},
    "interview-scheduled": {"approved", "rejected"},
    "approved": {"waitlisted", "enrolled"},
    "waitlisted": {"approved", "rejected", "enrolled"},
    "rejected": set(),
    "enrolled": set(),
    "deleted": set(),
}


def test_table_matches_admissions_policy():
    """Test the transition table holds exactly the allowed admin moves."""
    for current, allowed in EXPECTED_TABLE.items():
        assert {s.value for s in ALLOWED_TRANSITIONS[ApplicationStatus(current)]} == allowed


@pytest.mark.parametrize("current", ALL_STATUSES)
def test_validate_transition_matches_table_for_every_pair(current):
    """Test every (current, requested) pair validates iff it is in the table."""
    for requested in ALL_STATUSES:
        expected = requested in EXPECTED_TABLE[current]
        assert validate_transition(current, requested) is expected, (current, requested)


@pytest.mark.parametrize("status", ALL_STATUSES)
def test_self_loops_are_rejected(status):
    """Test no-op transitions are never valid."""
    assert validate_transition(status, status) is False


@pytest.mark.parametrize("terminal", ["rejected", "enrolled"])
def test_terminal_statuses_allow_nothing(terminal):
    """Test nothing validates out of a terminal status."""
    assert is_terminal(terminal)
    assert allowed_transitions(terminal) == []
    assert not any(validate_transition(terminal, requested) for requested in ALL_STATUSES)


def test_terminal_set():
    assert TERMINAL_STATUSES == {ApplicationStatus.REJECTED, ApplicationStatus.ENROLLED}
    assert not is_terminal("submitted")


def test_unknown_requested_status_is_rejected():
    """Test an unknown target status never validates."""
    assert validate_transition("submitted", "accepted") is False
    assert validate_transition("submitted", "") is False
    assert validate_transition("submitted", None) is False


def test_unknown_current_status_fails_closed():
    """Test corrupt current status is never treated as permissive."""
    assert validate_transition("corrupted", "under-review") is False
    assert validate_transition(None, "under-review") is False
    assert allowed_transitions("corrupted") == []


def test_enum_members_and_strings_are_interchangeable():
    assert validate_transition(ApplicationStatus.SUBMITTED, "under-review")
    assert validate_transition("approved", ApplicationStatus.ENROLLED)


def test_allowed_transitions_sorted():
    assert allowed_transitions("waitlisted") == ["approved", "enrolled", "rejected"]
    assert allowed_transitions(ApplicationStatus.UNDER_REVIEW) == ["interview-scheduled", "rejected"]


def test_deleted_is_never_an_admin_target():
    """Test soft delete does not go through the admin graph."""
    assert not any(validate_transition(current, "deleted") for current in ALL_STATUSES)


def test_student_edit_gate():
    """Test students can edit only submitted or under-review applications."""
    editable = {status for status in ALL_STATUSES if can_edit(status)}
    assert editable == {"submitted", "under-review"}
    assert can_edit("bogus") is False


def test_student_delete_gate():
    """Test students can delete only submitted applications."""
    deletable = {status for status in ALL_STATUSES if can_delete(status)}
    assert deletable == {"submitted"}


def test_is_valid_status():
    assert is_valid_status("interview-scheduled")
    assert not is_valid_status("interview_scheduled")


def test_humanize_status():
    assert humanize_status("interview-scheduled") == "Interview scheduled"
    assert humanize_status(ApplicationStatus.UNDER_REVIEW) == "Under review"
