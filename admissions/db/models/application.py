"""
Application model - one admission application and its current status.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship, validates
from datetime import datetime
from admissions.db.base import Base
from admissions.core.workflow_rules import ApplicationStatus


class Application(Base):
    """
    Admission application.

    `status` is only written through the workflow service. `application_number`
    is assigned once at creation and can never change.
    """
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    application_number = Column(String(16), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(32), nullable=False, default=ApplicationStatus.SUBMITTED.value, index=True)

    # Programme and applicant details editable by the student
    program = Column(String, nullable=True)
    program_level = Column(String, nullable=True)  # "Bachelor", "Master", "PhD"
    start_term = Column(String, nullable=True)
    nationality = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Review bookkeeping
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_notes = Column(Text, nullable=True)  # admin only, separate from the student's notes

    # Timestamps
    submitted_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", foreign_keys=[user_id], backref="applications")

    __table_args__ = (
        Index("idx_application_user_status", "user_id", "status"),
    )

    @validates("application_number")
    def _freeze_application_number(self, key, value):
        if self.application_number is not None and value != self.application_number:
            raise ValueError("application_number is immutable once assigned")
        return value

    def __repr__(self):
        return f"<Application(id={self.id}, number='{self.application_number}', status='{self.status}')>"
