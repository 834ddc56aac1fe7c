from sqlalchemy import Column, Integer, String, Boolean, DateTime, true
from sqlalchemy.sql import func
import enum
from admissions.db.base import Base


class UserRole(str, enum.Enum):
    """Account roles."""
    STUDENT = "student"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True)
    password_hash = Column(String)
    role = Column(String, nullable=False, default=UserRole.STUDENT.value, index=True)  # student | admin
    # Deactivated accounts cannot log in or use existing tokens
    is_active = Column(Boolean, nullable=False, default=True, server_default=true(), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
