"""
Tests for the create_admin maintenance script.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from admissions.db.base import Base
from admissions.db.models import User
from admissions.core.security import verify_password
from scripts.create_admin import make_user_admin


TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=test_engine)
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


def test_creates_new_admin(db):
    assert make_user_admin(db, "Office@Example.edu", "S3curePass!", "Admissions Office") is True

    user = db.query(User).filter(User.email == "office@example.edu").first()
    assert user.role == "admin"
    assert user.full_name == "Admissions Office"
    assert verify_password("S3curePass!", user.password_hash)


def test_promotes_existing_student(db):
    db.add(User(full_name="Student", email="student@example.edu", password_hash="x", role="student"))
    db.commit()

    assert make_user_admin(db, "student@example.edu") is True
    assert db.query(User).filter(User.email == "student@example.edu").first().role == "admin"


def test_missing_user_without_password(db):
    assert make_user_admin(db, "ghost@example.edu") is False
    assert db.query(User).count() == 0
