"""
Unit tests for status notification templates.
"""
import pytest

from admissions.core.notification_templates import (
    APPLICATION_DELETED,
    get_status_notification,
    render,
)


@pytest.mark.parametrize(
    "status,title,severity",
    [
        ("submitted", "Application Received", "info"),
        ("under-review", "Application Under Review", "info"),
        ("interview-scheduled", "Interview Scheduled", "success"),
        ("approved", "Application Approved!", "success"),
        ("rejected", "Application Decision", "warning"),
        ("waitlisted", "Application Waitlisted", "info"),
        ("enrolled", "Welcome to Our University!", "success"),
    ],
)
def test_status_templates(status, title, severity):
    """Test each status maps to its title and severity."""
    notification = get_status_notification(status, "2026100001")
    assert notification["title"] == title
    assert notification["type"] == severity
    assert "#2026100001" in notification["message"]


def test_unknown_status_uses_fallback():
    """Test statuses without a template get the generic update message."""
    notification = get_status_notification("deleted", "2026100002")
    assert notification["title"] == "Application Status Updated"
    assert notification["type"] == "info"
    assert notification["message"].endswith("updated to: Deleted")


def test_render_student_event():
    notification = render(APPLICATION_DELETED, application_number="2026100003")
    assert notification == {
        "title": "Application Deleted",
        "message": "Your application #2026100003 has been deleted successfully.",
        "type": "warning",
    }
