"""
Notification service.

Stores in-app notifications for users. Delivery (polling, toasts) is up to the client.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from admissions.db.models.notification import Notification
from admissions.core.notification_templates import SEVERITIES, SEVERITY_INFO

logger = logging.getLogger(__name__)


def _check_severity(severity: str) -> None:
    if severity not in SEVERITIES:
        raise ValueError(f"Unknown notification severity: {severity}")


class NotificationService:
    """SQLAlchemy-backed notification sink and inbox."""

    def __init__(self, db: Session):
        self.db = db

    def send(
        self,
        user_id: int,
        title: str,
        message: str,
        severity: str = SEVERITY_INFO,
        related_application_id: Optional[int] = None
    ) -> Notification:
        """
        Queue a notification for one user and commit it.

        Raises:
            ValueError: Unknown severity
            SQLAlchemyError: The insert failed (the session is rolled back first)
        """
        _check_severity(severity)
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=severity,
            related_application_id=related_application_id,
            is_read=False,
            created_at=datetime.utcnow(),
        )
        try:
            self.db.add(notification)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.debug(f"Notification queued: user_id={user_id}, title='{title}', type={severity}")
        return notification

    def send_bulk(
        self,
        user_ids: Iterable[int],
        title: str,
        message: str,
        severity: str = SEVERITY_INFO
    ) -> int:
        """Queue the same notification for many users; all or nothing. Returns how many were sent."""
        _check_severity(severity)
        recipients = list(dict.fromkeys(user_ids))
        now = datetime.utcnow()
        try:
            self.db.add_all([
                Notification(
                    user_id=user_id,
                    title=title,
                    message=message,
                    type=severity,
                    is_read=False,
                    created_at=now,
                )
                for user_id in recipients
            ])
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Bulk notification failed: recipients={len(recipients)}", exc_info=True)
            raise

        logger.info(f"Bulk notification sent: recipients={len(recipients)}, title='{title}'")
        return len(recipients)

    def list_for_user(self, user_id: int, limit: int = 10, unread_only: bool = False) -> List[Notification]:
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

    def unread_count(self, user_id: int) -> int:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .count()
        )

    def mark_read(self, notification_id: int, user_id: int) -> bool:
        """Mark one of the user's notifications as read. False if it isn't theirs or doesn't exist."""
        rows = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .update({"is_read": True, "read_at": datetime.utcnow()}, synchronize_session=False)
        )
        self.db.commit()
        return rows == 1

    def mark_all_read(self, user_id: int) -> int:
        rows = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update({"is_read": True, "read_at": datetime.utcnow()}, synchronize_session=False)
        )
        self.db.commit()
        return rows
