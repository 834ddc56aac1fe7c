"""
Database models module.

This module imports all database models to ensure they are registered with SQLAlchemy's Base.metadata
before table creation.

All models must be imported here to be included in database migrations and table creation.
"""
from admissions.db.models.user import User, UserRole
from admissions.db.models.application import Application
from admissions.db.models.status_history import StatusHistory
from admissions.db.models.notification import Notification

# Explicitly export all models for clarity
__all__ = [
    "User",
    "UserRole",
    "Application",
    "StatusHistory",
    "Notification",
]
