"""
Workflow error kinds.

Raised inside the workflow engine and converted into failed results at the
operation boundary; they never reach the HTTP layer as exceptions.
"""
from typing import Any, Dict, Optional


class WorkflowError(Exception):
    """Base class for workflow failures."""
    kind = "workflow_error"

    def __init__(self, message: str, **payload: Any):
        super().__init__(message)
        self.message = message
        self.payload: Dict[str, Any] = payload


class NotFoundError(WorkflowError):
    kind = "not_found"


class InvalidTransitionError(WorkflowError):
    kind = "invalid_transition"

    def __init__(self, current_status: str, requested_status: str, message: Optional[str] = None):
        super().__init__(
            message or f"Cannot change application status from '{current_status}' to '{requested_status}'",
            current_status=current_status,
            requested_status=requested_status,
        )


class ForbiddenError(WorkflowError):
    kind = "forbidden"


class ConflictError(WorkflowError):
    kind = "conflict"


class PersistenceError(WorkflowError):
    kind = "persistence_failure"


# HTTP status used by the routes for each error kind
ERROR_STATUS_CODES: Dict[str, int] = {
    NotFoundError.kind: 404,
    InvalidTransitionError.kind: 400,
    ForbiddenError.kind: 403,
    ConflictError.kind: 409,
    PersistenceError.kind: 500,
}
