"""
Unit tests for the workflow service.
Tests admin status changes, audit history, notifications, optimistic
concurrency and transactional rollback.
"""
import re
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from admissions.db.base import Base
from admissions.db.models import User, Application, Notification
from admissions.core.workflow_rules import ApplicationStatus
from admissions.services.application_store import ApplicationStore
from admissions.services.history_store import HistoryStore
from admissions.services.notification_service import NotificationService
from admissions.services.workflow_service import WorkflowService, ADMIN_CHANGE_REASON


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def student(db):
    user = User(full_name="Test Student", email="student@example.com", password_hash="x", role="student")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db):
    user = User(full_name="Test Admin", email="admin@example.com", password_hash="x", role="admin")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def service(db):
    return WorkflowService(db)


@pytest.fixture
def application_id(service, student):
    """A freshly submitted application."""
    result = service.submit_application(student.id, {"program": "Computer Science", "program_level": "Master"})
    assert result.success
    return result.data["application_id"]


def advance(service, application_id, admin, *statuses):
    """Walk an application through valid admin transitions."""
    for status in statuses:
        result = service.apply_status_change(application_id, status, admin.id, actor_role="admin")
        assert result.success, result


def current_status(db, application_id):
    return ApplicationStore(db).load(application_id).status


def history(db, application_id):
    return HistoryStore(db).list_by_application(application_id)


def notification_titles(db, user_id):
    return [n.title for n in db.query(Notification).filter(Notification.user_id == user_id).order_by(Notification.id)]


class FailingHistoryStore(HistoryStore):
    def append(self, entry):
        raise SQLAlchemyError("history table unavailable")


class FailingNotificationService(NotificationService):
    def send(self, *args, **kwargs):
        raise RuntimeError("notification sink down")


class RacingApplicationStore(ApplicationStore):
    """Hands out an already-taken number once, as if another request won the race."""

    def __init__(self, db, taken_number):
        super().__init__(db)
        self.taken_number = taken_number
        self.calls = 0

    def next_application_number(self, now):
        self.calls += 1
        if self.calls == 1:
            return self.taken_number
        return super().next_application_number(now)


class StaleApplicationStore(ApplicationStore):
    """Always hands out the snapshot captured at construction."""

    def __init__(self, db, snapshot):
        super().__init__(db)
        self.snapshot = snapshot

    def load(self, application_id):
        return self.snapshot


# ============================================
# Submission
# ============================================

def test_submit_creates_application_and_history(db, service, student, application_id):
    """Test submission records a creation entry with no previous status."""
    assert current_status(db, application_id) == "submitted"

    entries = history(db, application_id)
    assert len(entries) == 1
    assert entries[0].old_status is None
    assert entries[0].new_status == "submitted"
    assert entries[0].changed_by == student.id
    assert entries[0].change_reason == "Application submitted"

    assert notification_titles(db, student.id) == ["Application Received"]


def test_application_numbers_follow_month_sequence(db, service, student):
    """Test numbers are YYYYMM plus a 4-digit sequence, increasing per submission."""
    first = service.submit_application(student.id, {"program": "Physics"}).data["application_number"]
    second = service.submit_application(student.id, {"program": "Chemistry"}).data["application_number"]

    assert re.fullmatch(r"\d{10}", first)
    assert first[:6] == second[:6]
    assert int(second[-4:]) == int(first[-4:]) + 1


def test_application_numbers_past_9999(db, service, student):
    """Test the sequence keeps increasing once it needs a fifth digit."""
    now = datetime.utcnow()
    prefix = now.strftime("%Y%m")
    db.add(Application(
        user_id=student.id,
        application_number=f"{prefix}9999",
        status="submitted",
        submitted_at=now,
        updated_at=now,
    ))
    db.commit()

    first = service.submit_application(student.id, {"program": "Physics"})
    second = service.submit_application(student.id, {"program": "Chemistry"})

    assert first.success and second.success
    assert first.data["application_number"] == f"{prefix}10000"
    assert second.data["application_number"] == f"{prefix}10001"


def test_submit_retries_on_number_collision(db, student, application_id):
    """Test a submission that lost the race for a number retries with a fresh one."""
    taken = ApplicationStore(db).load(application_id).application_number
    store = RacingApplicationStore(db, taken)
    service = WorkflowService(db, applications=store)

    result = service.submit_application(student.id, {"program": "Biology"})

    assert result.success is True
    assert store.calls == 2
    assert result.data["application_number"] != taken
    assert len(history(db, result.data["application_id"])) == 1


def test_application_number_is_immutable(db, application_id):
    application = db.query(Application).filter(Application.id == application_id).first()
    with pytest.raises(ValueError):
        application.application_number = "2000010001"


# ============================================
# Admin status changes
# ============================================

def test_submitted_to_under_review(db, service, student, admin, application_id):
    """Test a valid change updates status, appends history and notifies the applicant."""
    result = service.apply_status_change(application_id, "under-review", admin.id, actor_role="admin")

    assert result.success is True
    assert result.data["old_status"] == "submitted"
    assert result.data["new_status"] == "under-review"
    assert current_status(db, application_id) == "under-review"

    entries = history(db, application_id)
    assert len(entries) == 2
    latest = entries[-1]
    assert (latest.old_status, latest.new_status) == ("submitted", "under-review")
    assert latest.changed_by == admin.id
    assert latest.change_reason == ADMIN_CHANGE_REASON

    notification = (
        db.query(Notification)
        .filter(Notification.user_id == student.id)
        .order_by(Notification.id.desc())
        .first()
    )
    assert notification.title == "Application Under Review"
    assert notification.type == "info"
    assert notification.related_application_id == application_id


def test_status_change_records_reviewer_and_notes(db, service, admin, application_id):
    service.apply_status_change(application_id, "under-review", admin.id, "Documents verified", actor_role="admin")

    snapshot = ApplicationStore(db).load(application_id)
    assert snapshot.reviewed_by == admin.id
    assert snapshot.reviewed_at is not None
    assert snapshot.review_notes == "Documents verified"
    assert snapshot.notes is None
    assert history(db, application_id)[-1].change_reason == "Documents verified"


def test_invalid_transition_changes_nothing(db, service, student, admin, application_id):
    """Test rejected -> approved fails and leaves status, history and inbox untouched."""
    advance(service, application_id, admin, "under-review", "rejected")
    entries_before = len(history(db, application_id))
    notifications_before = notification_titles(db, student.id)

    result = service.apply_status_change(application_id, "approved", admin.id, actor_role="admin")

    assert result.success is False
    assert result.error == "invalid_transition"
    assert result.data == {"current_status": "rejected", "requested_status": "approved"}
    assert current_status(db, application_id) == "rejected"
    assert len(history(db, application_id)) == entries_before
    assert notification_titles(db, student.id) == notifications_before


def test_unknown_status_is_invalid_transition(service, admin, application_id):
    result = service.apply_status_change(application_id, "accepted", admin.id, actor_role="admin")
    assert result.error == "invalid_transition"


def test_enum_target_reported_by_value(service, admin, application_id):
    result = service.apply_status_change(application_id, ApplicationStatus.APPROVED, admin.id, actor_role="admin")

    assert result.error == "invalid_transition"
    assert result.data["requested_status"] == "approved"
    assert "ApplicationStatus" not in result.message


def test_self_loop_is_invalid_transition(service, admin, application_id):
    result = service.apply_status_change(application_id, "submitted", admin.id, actor_role="admin")
    assert result.error == "invalid_transition"


def test_missing_application_is_not_found(service, admin):
    result = service.apply_status_change(9999, "under-review", admin.id, actor_role="admin")
    assert result.success is False
    assert result.error == "not_found"


def test_non_admin_is_forbidden(db, service, student, application_id):
    """Test only admins may drive the review workflow."""
    result = service.apply_status_change(application_id, "under-review", student.id, actor_role="student")

    assert result.error == "forbidden"
    assert current_status(db, application_id) == "submitted"
    assert len(history(db, application_id)) == 1


def test_full_happy_path_to_enrolled(db, service, student, admin, application_id):
    advance(service, application_id, admin, "under-review", "interview-scheduled", "approved", "enrolled")

    assert current_status(db, application_id) == "enrolled"
    assert [e.new_status for e in history(db, application_id)] == [
        "submitted", "under-review", "interview-scheduled", "approved", "enrolled",
    ]
    assert notification_titles(db, student.id)[-1] == "Welcome to Our University!"

    result = service.apply_status_change(application_id, "waitlisted", admin.id, actor_role="admin")
    assert result.error == "invalid_transition"


def test_history_chain_is_consistent(db, service, admin, application_id):
    """Test each entry's old_status is the previous entry's new_status."""
    advance(service, application_id, admin, "under-review", "interview-scheduled", "approved", "waitlisted")
    entries = history(db, application_id)
    for previous, entry in zip(entries, entries[1:]):
        assert entry.old_status == previous.new_status
    assert entries[-1].new_status == current_status(db, application_id)


# ============================================
# Concurrency
# ============================================

def test_expected_status_mismatch_is_conflict(db, service, admin, application_id):
    """Test two admins acting on the same view: only the first wins."""
    first = service.apply_status_change(
        application_id, "under-review", admin.id, actor_role="admin", expected_status="submitted"
    )
    second = service.apply_status_change(
        application_id, "under-review", admin.id, actor_role="admin", expected_status="submitted"
    )

    assert first.success is True
    assert second.error == "conflict"
    assert len(history(db, application_id)) == 2


def test_stale_read_loses_compare_and_set(db, service, admin, application_id):
    """Test a change based on a stale read is rejected at write time."""
    stale_snapshot = ApplicationStore(db).load(application_id)
    stale_service = WorkflowService(db, applications=StaleApplicationStore(db, stale_snapshot))

    winner = service.apply_status_change(application_id, "under-review", admin.id, actor_role="admin")
    loser = stale_service.apply_status_change(application_id, "under-review", admin.id, actor_role="admin")

    assert winner.success is True
    assert loser.success is False
    assert loser.error == "conflict"

    entries = history(db, application_id)
    assert [(e.old_status, e.new_status) for e in entries] == [(None, "submitted"), ("submitted", "under-review")]


# ============================================
# Atomicity and notification failures
# ============================================

def test_history_failure_rolls_back_status(db, student, admin, application_id):
    """Test the status write is undone when the history insert fails."""
    service = WorkflowService(db, history=FailingHistoryStore(db))
    notifications_before = notification_titles(db, student.id)

    result = service.apply_status_change(application_id, "under-review", admin.id, actor_role="admin")

    assert result.success is False
    assert result.error == "persistence_failure"
    assert current_status(db, application_id) == "submitted"
    assert len(history(db, application_id)) == 1
    assert notification_titles(db, student.id) == notifications_before


def test_notification_failure_does_not_undo_change(db, admin, application_id):
    """Test a broken notification sink never rolls back a committed change."""
    service = WorkflowService(db, notifications=FailingNotificationService(db))

    result = service.apply_status_change(application_id, "under-review", admin.id, actor_role="admin")

    assert result.success is True
    assert current_status(db, application_id) == "under-review"
    assert len(history(db, application_id)) == 2


def test_history_entries_are_immutable(db, application_id):
    entry = history(db, application_id)[0]

    entry.change_reason = "tampered"
    with pytest.raises(ValueError):
        db.commit()
    db.rollback()

    db.delete(history(db, application_id)[0])
    with pytest.raises(ValueError):
        db.commit()
    db.rollback()

    assert history(db, application_id)[0].change_reason == "Application submitted"


# ============================================
# Bulk
# ============================================

def test_bulk_reports_partial_success(db, service, student, admin):
    """Test a bulk change with one invalid target updates the rest."""
    ids = [
        service.submit_application(student.id, {"program": f"Program {i}"}).data["application_id"]
        for i in range(3)
    ]
    advance(service, ids[2], admin, "under-review", "rejected")

    bulk = service.bulk_apply_status_change(ids, "under-review", admin.id, actor_role="admin")

    assert bulk.successful == 2
    assert bulk.failed == 1
    assert bulk.results[ids[2]].error == "invalid_transition"
    assert bulk.message == "Updated 2 of 3 applications"
    assert current_status(db, ids[0]) == "under-review"
    assert current_status(db, ids[1]) == "under-review"
    assert current_status(db, ids[2]) == "rejected"


def test_bulk_ignores_duplicate_ids(db, service, admin, application_id):
    bulk = service.bulk_apply_status_change(
        [application_id, application_id], "under-review", admin.id, actor_role="admin"
    )

    assert bulk.successful == 1
    assert bulk.failed == 0
    assert len(history(db, application_id)) == 2


def test_bulk_reports_missing_ids(service, admin, application_id):
    bulk = service.bulk_apply_status_change([application_id, 4242], "under-review", admin.id, actor_role="admin")

    assert bulk.successful == 1
    assert bulk.results[4242].error == "not_found"
