"""
Application status workflow service.

Validates and applies application status changes, writes the status history
audit trail in the same transaction, and notifies the applicant afterwards.

Every operation returns a WorkflowResult; workflow errors never escape as
exceptions. Notification delivery is best effort: a failed notification is
logged and never undoes a committed status change.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from admissions.core.errors import (
    WorkflowError,
    NotFoundError,
    InvalidTransitionError,
    ForbiddenError,
    ConflictError,
    PersistenceError,
)
from admissions.core.notification_templates import (
    APPLICATION_DELETED,
    APPLICATION_UPDATED,
    get_status_notification,
    render,
)
from admissions.core.workflow_rules import (
    ApplicationStatus,
    can_delete,
    can_edit,
    humanize_status,
    parse_status,
    validate_transition,
)
from admissions.db.models.status_history import StatusHistory
from admissions.db.models.user import UserRole
from admissions.schemas.workflow import BulkStatusResult, WorkflowResult
from admissions.services.application_store import ApplicationSnapshot, ApplicationStore, EDITABLE_FIELDS
from admissions.services.history_store import HistoryStore
from admissions.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

T = TypeVar("T")

ADMIN_CHANGE_REASON = "Status updated by admin"
SUBMITTED_REASON = "Application submitted"
# Student edits while under review are audited as an under-review -> under-review entry
STUDENT_EDIT_REASON = "Application updated by student"
STUDENT_DELETE_REASON = "Application deleted by student"

# Concurrent submissions can race for the same application number
SUBMIT_ATTEMPTS = 3


class WorkflowService:
    """
    Orchestrates application status changes.

    The stores share the service's session so that the status write and the
    history entry commit or roll back together. Pass custom stores to swap
    persistence (tests inject failing or stale stores this way).
    """

    def __init__(
        self,
        db: Session,
        applications: Optional[ApplicationStore] = None,
        history: Optional[HistoryStore] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self.db = db
        self.applications = applications or ApplicationStore(db)
        self.history = history or HistoryStore(db)
        self.notifications = notifications or NotificationService(db)

    # ------------------------------------------------------------------
    # Admin operations
    # ------------------------------------------------------------------

    def apply_status_change(
        self,
        application_id: int,
        requested_status: str,
        actor_id: int,
        notes: Optional[str] = None,
        *,
        actor_role: str,
        expected_status: Optional[str] = None,
    ) -> WorkflowResult:
        """
        Move an application to `requested_status`.

        Args:
            application_id: Application to change
            requested_status: Target status
            actor_id: User performing the change (recorded in the history)
            notes: Optional reason, stored as the review note and in the history
            actor_role: Role of the actor; only admins may change status
            expected_status: Status the caller last saw; a mismatch is a conflict

        Returns:
            WorkflowResult with old_status/new_status on success, or the error kind
        """
        try:
            return self._apply_status_change(
                application_id, requested_status, actor_id, notes, actor_role, expected_status
            )
        except WorkflowError as e:
            logger.warning(
                f"Status change rejected: application_id={application_id}, "
                f"requested={requested_status}, actor_id={actor_id}, error={e.kind}"
            )
            return WorkflowResult.failure(e)

    def _apply_status_change(
        self,
        application_id: int,
        requested_status: str,
        actor_id: int,
        notes: Optional[str],
        actor_role: str,
        expected_status: Optional[str],
    ) -> WorkflowResult:
        if actor_role != UserRole.ADMIN.value:
            raise ForbiddenError("Only admins can change application status", actor_role=actor_role)

        application = self._load(application_id)

        if expected_status is not None and expected_status != application.status:
            raise ConflictError(
                "Application status has changed since it was loaded",
                current_status=application.status,
                expected_status=expected_status,
            )

        if not validate_transition(application.status, requested_status):
            requested = (
                requested_status.value if isinstance(requested_status, ApplicationStatus) else str(requested_status)
            )
            raise InvalidTransitionError(application.status, requested)

        new_status = parse_status(requested_status).value
        now = datetime.utcnow()
        extra: Dict[str, Any] = {"reviewed_by": actor_id, "reviewed_at": now}
        if notes:
            extra["review_notes"] = notes

        def write():
            self._cas_status(application, new_status, now, **extra)
            self.history.append(StatusHistory(
                application_id=application.id,
                old_status=application.status,
                new_status=new_status,
                changed_by=actor_id,
                change_reason=notes or ADMIN_CHANGE_REASON,
                changed_at=now,
            ))

        self._write_atomically("save status change", write, application_id=application.id)

        logger.info(
            f"Application status changed: application_id={application.id}, "
            f"{application.status} -> {new_status}, actor_id={actor_id}"
        )

        self._notify(
            application,
            get_status_notification(new_status, application.application_number),
        )

        return WorkflowResult.ok(
            "Application status updated successfully",
            application_id=application.id,
            application_number=application.application_number,
            old_status=application.status,
            new_status=new_status,
        )

    def bulk_apply_status_change(
        self,
        application_ids: Iterable[int],
        status: str,
        actor_id: int,
        notes: Optional[str] = None,
        *,
        actor_role: str,
    ) -> BulkStatusResult:
        """
        Apply the same status change to many applications.

        Each id is an independent transaction; one failure does not stop the rest.
        Duplicate ids are processed once.
        """
        results: Dict[int, WorkflowResult] = {}
        for application_id in dict.fromkeys(application_ids):
            results[application_id] = self.apply_status_change(
                application_id, status, actor_id, notes, actor_role=actor_role
            )

        successful = sum(1 for result in results.values() if result.success)
        bulk = BulkStatusResult(successful=successful, failed=len(results) - successful, results=results)
        logger.info(
            f"Bulk status change: status={status}, actor_id={actor_id}, "
            f"successful={bulk.successful}, failed={bulk.failed}"
        )
        return bulk

    # ------------------------------------------------------------------
    # Student operations
    # ------------------------------------------------------------------

    def submit_application(self, actor_id: int, details: Dict[str, Any]) -> WorkflowResult:
        """Create an application in `submitted` together with its first history entry."""
        try:
            now = datetime.utcnow()

            def write() -> ApplicationSnapshot:
                number = self.applications.next_application_number(now)
                created = self.applications.create(actor_id, number, details, now)
                self.history.append(StatusHistory(
                    application_id=created.id,
                    old_status=None,
                    new_status=ApplicationStatus.SUBMITTED.value,
                    changed_by=actor_id,
                    change_reason=SUBMITTED_REASON,
                    changed_at=now,
                ))
                return created

            for attempt in range(1, SUBMIT_ATTEMPTS + 1):
                try:
                    application = self._write_atomically("submit application", write, user_id=actor_id)
                    break
                except PersistenceError as e:
                    if attempt == SUBMIT_ATTEMPTS or not isinstance(e.__cause__, IntegrityError):
                        raise
                    logger.warning(
                        f"Application number collision, retrying: user_id={actor_id}, attempt={attempt}"
                    )
        except WorkflowError as e:
            return WorkflowResult.failure(e)

        logger.info(
            f"Application submitted: application_id={application.id}, "
            f"number={application.application_number}, user_id={actor_id}"
        )

        self._notify(
            application,
            get_status_notification(ApplicationStatus.SUBMITTED, application.application_number),
        )

        return WorkflowResult.ok(
            "Application submitted successfully",
            application_id=application.id,
            application_number=application.application_number,
            status=application.status,
        )

    def edit_application(self, application_id: int, actor_id: int, changes: Dict[str, Any]) -> WorkflowResult:
        """
        Apply a student's edits to their own application.

        Allowed only while the application is submitted or under review.
        """
        try:
            application = self._load_owned(application_id, actor_id)

            if not can_edit(application.status):
                raise ForbiddenError(
                    "This application cannot be edited in its current status: "
                    f"{humanize_status(application.status)}",
                    current_status=application.status,
                )

            fields = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
            now = datetime.utcnow()

            def write():
                if not self.applications.cas_update_fields(application.id, application.status, fields, now):
                    raise self._conflict(application)
                if application.status == ApplicationStatus.UNDER_REVIEW.value:
                    self.history.append(StatusHistory(
                        application_id=application.id,
                        old_status=application.status,
                        new_status=application.status,
                        changed_by=actor_id,
                        change_reason=STUDENT_EDIT_REASON,
                        changed_at=now,
                    ))

            self._write_atomically("update application", write, application_id=application.id)
        except WorkflowError as e:
            logger.warning(f"Edit rejected: application_id={application_id}, actor_id={actor_id}, error={e.kind}")
            return WorkflowResult.failure(e)

        logger.info(
            f"Application edited by student: application_id={application.id}, "
            f"fields={sorted(fields)}, status={application.status}"
        )

        self._notify(application, render(APPLICATION_UPDATED, application_number=application.application_number))

        return WorkflowResult.ok(
            "Application updated successfully",
            application_id=application.id,
            application_number=application.application_number,
            status=application.status,
            updated_fields=sorted(fields),
        )

    def delete_application(self, application_id: int, actor_id: int) -> WorkflowResult:
        """Soft-delete a student's own application. Allowed only while it is submitted."""
        try:
            application = self._load_owned(application_id, actor_id)

            if not can_delete(application.status):
                raise ForbiddenError(
                    f'Applications in "{humanize_status(application.status)}" status cannot be deleted. '
                    "Please contact support if you need assistance.",
                    current_status=application.status,
                )

            deleted = ApplicationStatus.DELETED.value
            now = datetime.utcnow()

            def write():
                self._cas_status(application, deleted, now)
                self.history.append(StatusHistory(
                    application_id=application.id,
                    old_status=application.status,
                    new_status=deleted,
                    changed_by=actor_id,
                    change_reason=STUDENT_DELETE_REASON,
                    changed_at=now,
                ))

            self._write_atomically("delete application", write, application_id=application.id)
        except WorkflowError as e:
            logger.warning(f"Delete rejected: application_id={application_id}, actor_id={actor_id}, error={e.kind}")
            return WorkflowResult.failure(e)

        logger.info(f"Application deleted by student: application_id={application.id}, user_id={actor_id}")

        self._notify(application, render(APPLICATION_DELETED, application_number=application.application_number))

        return WorkflowResult.ok(
            "Application deleted successfully",
            application_id=application.id,
            application_number=application.application_number,
            old_status=application.status,
            new_status=deleted,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load(self, application_id: int) -> ApplicationSnapshot:
        application = self.applications.load(application_id)
        if application is None:
            raise NotFoundError("Application not found", application_id=application_id)
        return application

    def _load_owned(self, application_id: int, actor_id: int) -> ApplicationSnapshot:
        """Load an application the actor owns; other users' applications look absent."""
        application = self.applications.load(application_id)
        if application is None or application.user_id != actor_id:
            raise NotFoundError("Application not found or access denied", application_id=application_id)
        return application

    def _conflict(self, application: ApplicationSnapshot) -> ConflictError:
        return ConflictError(
            "Application was modified by another request, please reload and try again",
            application_id=application.id,
            expected_status=application.status,
        )

    def _cas_status(self, application: ApplicationSnapshot, new_status: str, now: datetime, **extra) -> None:
        if not self.applications.cas_update_status(application.id, application.status, new_status, now, **extra):
            raise self._conflict(application)

    def _write_atomically(self, action: str, write: Callable[[], T], **context: Any) -> T:
        """Run `write` and commit; any failure rolls back every write it made."""
        try:
            result = write()
            self.db.commit()
            return result
        except WorkflowError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {context}, error={e}", exc_info=True)
            raise PersistenceError(f"Failed to {action}", **context) from e

    def _notify(self, application: ApplicationSnapshot, notification: Dict[str, str]) -> None:
        try:
            self.notifications.send(
                application.user_id,
                notification["title"],
                notification["message"],
                notification["type"],
                related_application_id=application.id,
            )
        except Exception as e:
            logger.error(
                f"Notification failed: user_id={application.user_id}, "
                f"application_id={application.id}, title='{notification['title']}', error={e}",
                exc_info=True,
            )
