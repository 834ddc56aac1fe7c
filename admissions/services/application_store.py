"""
Application store.

Persistence for application records. Writes only flush; the caller owns the
transaction (commit/rollback).
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from admissions.db.models.application import Application
from admissions.core.workflow_rules import ApplicationStatus

logger = logging.getLogger(__name__)

# Fields a student may change on their own application
EDITABLE_FIELDS = (
    "program",
    "program_level",
    "start_term",
    "nationality",
    "address",
    "notes",
)

# Extra columns an admin status change may write alongside the status
STATUS_CHANGE_FIELDS = ("reviewed_by", "reviewed_at", "review_notes")


@dataclass(frozen=True)
class ApplicationSnapshot:
    """Point-in-time, detached view of an application row."""
    id: int
    application_number: str
    user_id: int
    status: str
    program: Optional[str] = None
    program_level: Optional[str] = None
    start_term: Optional[str] = None
    nationality: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    review_notes: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, application: Application) -> "ApplicationSnapshot":
        return cls(
            id=application.id,
            application_number=application.application_number,
            user_id=application.user_id,
            status=application.status,
            program=application.program,
            program_level=application.program_level,
            start_term=application.start_term,
            nationality=application.nationality,
            address=application.address,
            notes=application.notes,
            review_notes=application.review_notes,
            reviewed_by=application.reviewed_by,
            reviewed_at=application.reviewed_at,
            submitted_at=application.submitted_at,
            updated_at=application.updated_at,
        )


class ApplicationStore:
    """SQLAlchemy-backed application store."""

    def __init__(self, db: Session):
        self.db = db

    def load(self, application_id: int) -> Optional[ApplicationSnapshot]:
        """Read the current row, bypassing any stale copy in the session identity map."""
        application = (
            self.db.query(Application)
            .filter(Application.id == application_id)
            .populate_existing()
            .first()
        )
        if application is None:
            return None
        return ApplicationSnapshot.from_model(application)

    def cas_update_status(
        self,
        application_id: int,
        expected_status: str,
        new_status: str,
        timestamp: datetime,
        **extra: Any
    ) -> bool:
        """
        Conditionally move an application to `new_status`.

        The UPDATE only matches while the row still holds `expected_status`.

        Returns:
            True if exactly one row was updated, False if the status had already changed
        """
        values = {"status": new_status, "updated_at": timestamp}
        for key, value in extra.items():
            if key not in STATUS_CHANGE_FIELDS:
                raise ValueError(f"Unsupported status change field: {key}")
            values[key] = value

        rows = (
            self.db.query(Application)
            .filter(Application.id == application_id, Application.status == expected_status)
            .update(values, synchronize_session=False)
        )
        logger.debug(
            f"CAS status update: application_id={application_id}, "
            f"expected={expected_status}, new={new_status}, rows={rows}"
        )
        return rows == 1

    def cas_update_fields(
        self,
        application_id: int,
        expected_status: str,
        changes: Dict[str, Any],
        timestamp: datetime
    ) -> bool:
        """Conditionally update editable fields while the status is still `expected_status`."""
        values = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
        values["updated_at"] = timestamp

        rows = (
            self.db.query(Application)
            .filter(Application.id == application_id, Application.status == expected_status)
            .update(values, synchronize_session=False)
        )
        return rows == 1

    def next_application_number(self, now: datetime) -> str:
        """
        Generate the next application number for the month of `now`.

        Format is YYYYMM followed by an (at least) 4-digit sequence, e.g. 2026100001.
        Past 9999 the sequence widens to 5 digits, so the highest number is the
        longest one first, then the lexically greatest.
        """
        prefix = now.strftime("%Y%m")
        last = (
            self.db.query(Application.application_number)
            .filter(Application.application_number.like(f"{prefix}%"))
            .order_by(func.length(Application.application_number).desc(), Application.application_number.desc())
            .first()
        )
        sequence = int(last[0][len(prefix):]) + 1 if last else 1
        return f"{prefix}{sequence:04d}"

    def create(
        self,
        user_id: int,
        application_number: str,
        details: Dict[str, Any],
        timestamp: datetime
    ) -> ApplicationSnapshot:
        application = Application(
            user_id=user_id,
            application_number=application_number,
            status=ApplicationStatus.SUBMITTED.value,
            submitted_at=timestamp,
            updated_at=timestamp,
            **{key: value for key, value in details.items() if key in EDITABLE_FIELDS}
        )
        self.db.add(application)
        self.db.flush()
        return ApplicationSnapshot.from_model(application)

    def list_for_user(self, user_id: int, include_deleted: bool = False) -> List[Application]:
        query = self.db.query(Application).filter(Application.user_id == user_id)
        if not include_deleted:
            query = query.filter(Application.status != ApplicationStatus.DELETED.value)
        return query.order_by(Application.submitted_at.desc(), Application.id.desc()).all()

    def list_all(
        self,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Application], int]:
        """List non-deleted applications for review, newest first, with the total count."""
        query = self.db.query(Application).filter(Application.status != ApplicationStatus.DELETED.value)
        if status:
            query = query.filter(Application.status == status)
        total = query.count()
        applications = (
            query.order_by(Application.submitted_at.desc(), Application.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return applications, total

    def status_counts(self) -> Dict[str, int]:
        """Count of non-deleted applications per status (every status present, zero-filled)."""
        rows = (
            self.db.query(Application.status, func.count(Application.id))
            .filter(Application.status != ApplicationStatus.DELETED.value)
            .group_by(Application.status)
            .all()
        )
        counts = {status.value: 0 for status in ApplicationStatus if status != ApplicationStatus.DELETED}
        for status, count in rows:
            counts[status] = int(count)
        counts["total"] = sum(counts.values())
        return counts
