"""
Status history store - append-only audit log of application transitions.
"""
from typing import List

from sqlalchemy.orm import Session

from admissions.db.models.status_history import StatusHistory


class HistoryStore:
    """Append and read status history. Writes only flush; the caller commits."""

    def __init__(self, db: Session):
        self.db = db

    def append(self, entry: StatusHistory) -> StatusHistory:
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_by_application(self, application_id: int) -> List[StatusHistory]:
        """Entries for one application, oldest first."""
        return (
            self.db.query(StatusHistory)
            .filter(StatusHistory.application_id == application_id)
            .order_by(StatusHistory.changed_at.asc(), StatusHistory.id.asc())
            .all()
        )
