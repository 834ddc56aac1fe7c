"""
Student account management for the admin portal.

Listing and search, a per-student application summary, and account
activation. Deactivating a student blocks login and any token they still hold;
their applications and history are left untouched.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from admissions.core.workflow_rules import ApplicationStatus
from admissions.db.models.application import Application
from admissions.db.models.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass
class StudentSummary:
    """A student with aggregate counts over their (non-deleted) applications."""
    user: User
    total_applications: int = 0
    approved_applications: int = 0
    enrolled_applications: int = 0
    last_application_at: Optional[datetime] = None
    programs: List[str] = field(default_factory=list)


class StudentService:

    def __init__(self, db: Session):
        self.db = db

    def _students(self):
        return self.db.query(User).filter(User.role == UserRole.STUDENT.value)

    def list_students(
        self,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Tuple[User, int]], int]:
        """
        List students, active accounts first, newest first.

        Args:
            search: Case-insensitive match on name or email
            is_active: Only active (True) or deactivated (False) accounts
            limit: Page size
            offset: Rows to skip

        Returns:
            ([(user, application_count), ...], total matching students)
        """
        query = self._students()
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(or_(
                func.lower(User.full_name).like(pattern),
                func.lower(User.email).like(pattern),
            ))
        if is_active is not None:
            query = query.filter(User.is_active.is_(is_active))

        total = query.count()
        users = (
            query.order_by(User.is_active.desc(), User.created_at.desc(), User.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        counts = self._application_counts([user.id for user in users])
        return [(user, counts.get(user.id, 0)) for user in users], total

    def _application_counts(self, user_ids: List[int]) -> dict:
        if not user_ids:
            return {}
        rows = (
            self.db.query(Application.user_id, func.count(Application.id))
            .filter(
                Application.user_id.in_(user_ids),
                Application.status != ApplicationStatus.DELETED.value,
            )
            .group_by(Application.user_id)
            .all()
        )
        return {user_id: int(count) for user_id, count in rows}

    def get_student(self, user_id: int) -> Optional[StudentSummary]:
        """Profile plus application summary, or None if no such student."""
        user = self._students().filter(User.id == user_id).first()
        if user is None:
            return None

        applications = (
            self.db.query(Application)
            .filter(
                Application.user_id == user_id,
                Application.status != ApplicationStatus.DELETED.value,
            )
            .order_by(Application.submitted_at.desc(), Application.id.desc())
            .all()
        )
        programs = list(dict.fromkeys(app.program for app in applications if app.program))
        return StudentSummary(
            user=user,
            total_applications=len(applications),
            approved_applications=sum(1 for app in applications if app.status == ApplicationStatus.APPROVED.value),
            enrolled_applications=sum(1 for app in applications if app.status == ApplicationStatus.ENROLLED.value),
            last_application_at=applications[0].submitted_at if applications else None,
            programs=programs,
        )

    def set_active(self, user_id: int, is_active: bool, admin_id: int) -> Optional[User]:
        """Activate or deactivate a student account. Returns None if no such student."""
        user = self._students().filter(User.id == user_id).first()
        if user is None:
            return None

        user.is_active = is_active
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Failed to update student status: user_id={user_id}", exc_info=True)
            raise
        self.db.refresh(user)

        logger.info(
            f"Student {'activated' if is_active else 'deactivated'}: user_id={user_id}, admin_id={admin_id}"
        )
        return user
