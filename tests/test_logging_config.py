"""
Tests for log sanitising.
"""
from admissions.core.logging_config import sanitize_log_data


def test_secrets_are_redacted():
    data = {"full_name": "Jane Doe", "password": "hunter22", "access_token": "abc"}

    sanitized = sanitize_log_data(data)

    assert sanitized["full_name"] == "Jane Doe"
    assert sanitized["password"] == "***REDACTED***"
    assert sanitized["access_token"] == "***REDACTED***"
    assert data["password"] == "hunter22"


def test_email_is_masked():
    assert sanitize_log_data({"email": "jane.doe@example.com"}) == {"email": "j***@example.com"}
    assert sanitize_log_data({"email": "not-an-email"}) == {"email": "***REDACTED***"}


def test_nested_structures():
    sanitized = sanitize_log_data({"users": [{"email": "a@b.edu", "api_key": "k"}], "count": 1})

    assert sanitized == {"users": [{"email": "a***@b.edu", "api_key": "***REDACTED***"}], "count": 1}
