"""
Application status workflow rules.

Single source of truth for the application lifecycle: the status values,
the admin transition table and the student edit/delete allow-lists.
Every status-mutating code path checks one of these before writing.
"""
import enum
from typing import Dict, FrozenSet, List, Optional


class ApplicationStatus(str, enum.Enum):
    """Lifecycle states of an admission application."""
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under-review"
    INTERVIEW_SCHEDULED = "interview-scheduled"
    APPROVED = "approved"
    REJECTED = "rejected"
    WAITLISTED = "waitlisted"
    ENROLLED = "enrolled"
    DELETED = "deleted"


# Admin transition table (current -> allowed next)
ALLOWED_TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    ApplicationStatus.SUBMITTED: frozenset({
        ApplicationStatus.UNDER_REVIEW,
    }),
    ApplicationStatus.UNDER_REVIEW: frozenset({
        ApplicationStatus.INTERVIEW_SCHEDULED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.INTERVIEW_SCHEDULED: frozenset({
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.APPROVED: frozenset({
        ApplicationStatus.WAITLISTED,
        ApplicationStatus.ENROLLED,
    }),
    ApplicationStatus.WAITLISTED: frozenset({
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.ENROLLED,
    }),
    ApplicationStatus.REJECTED: frozenset(),  # terminal
    ApplicationStatus.ENROLLED: frozenset(),  # terminal
    ApplicationStatus.DELETED: frozenset(),  # soft-deleted, no admin moves
}

TERMINAL_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.REJECTED,
    ApplicationStatus.ENROLLED,
})

# Student self-service gates, separate from the admin graph
EDITABLE_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.SUBMITTED,
    ApplicationStatus.UNDER_REVIEW,
})
DELETABLE_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.SUBMITTED,
})


def parse_status(value) -> Optional[ApplicationStatus]:
    """Return the ApplicationStatus for value, or None if it is not a known status."""
    if isinstance(value, ApplicationStatus):
        return value
    try:
        return ApplicationStatus(value)
    except ValueError:
        return None


def is_valid_status(value) -> bool:
    return parse_status(value) is not None


def is_terminal(status) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def allowed_transitions(current) -> List[str]:
    """
    Get the statuses an admin may move an application to from `current`.

    Args:
        current: Current status (enum member or raw string)

    Returns:
        Sorted list of status strings; empty for terminal or unknown statuses
    """
    status = parse_status(current)
    if status is None:
        return []
    return sorted(s.value for s in ALLOWED_TRANSITIONS.get(status, frozenset()))


def validate_transition(current, requested) -> bool:
    """
    Check whether an admin status change from `current` to `requested` is legal.

    Unknown values on either side fail closed. Self-loops are never valid.
    """
    current_status = parse_status(current)
    requested_status = parse_status(requested)
    if current_status is None or requested_status is None:
        return False
    if current_status == requested_status:
        return False
    return requested_status in ALLOWED_TRANSITIONS.get(current_status, frozenset())


def can_edit(status) -> bool:
    """Students may edit their application only while it is submitted or under review."""
    return parse_status(status) in EDITABLE_STATUSES


def can_delete(status) -> bool:
    """Students may withdraw (soft delete) their application only while it is submitted."""
    return parse_status(status) in DELETABLE_STATUSES


def humanize_status(status) -> str:
    """'interview-scheduled' -> 'Interview scheduled'."""
    value = status.value if isinstance(status, ApplicationStatus) else str(status)
    return value.replace("-", " ").capitalize()
