from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, event
from datetime import datetime
from admissions.db.base import Base


class StatusHistory(Base):
    """
    Append-only audit record of one application status transition.

    old_status is NULL for the creation entry.
    """
    __tablename__ = "application_status_history"

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False, index=True)
    old_status = Column(String(32), nullable=True)
    new_status = Column(String(32), nullable=False)
    changed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    change_reason = Column(Text, nullable=True)
    changed_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        Index("idx_history_application_changed", "application_id", "changed_at"),
    )


@event.listens_for(StatusHistory, "before_update")
def _reject_history_update(mapper, connection, target):
    raise ValueError("Status history entries are immutable")


@event.listens_for(StatusHistory, "before_delete")
def _reject_history_delete(mapper, connection, target):
    raise ValueError("Status history entries cannot be deleted")
