"""
Notification content for application status changes.

Status -> (title, message, severity). Adding a status only needs a new entry here.
"""
from typing import Dict

from admissions.core.workflow_rules import ApplicationStatus, parse_status, humanize_status

SEVERITY_INFO = "info"
SEVERITY_SUCCESS = "success"
SEVERITY_WARNING = "warning"

SEVERITIES = (SEVERITY_INFO, SEVERITY_SUCCESS, SEVERITY_WARNING)

STATUS_NOTIFICATIONS: Dict[ApplicationStatus, Dict[str, str]] = {
    ApplicationStatus.SUBMITTED: {
        "title": "Application Received",
        "message": "Your application #{application_number} has been successfully submitted and is being processed.",
        "type": SEVERITY_INFO,
    },
    ApplicationStatus.UNDER_REVIEW: {
        "title": "Application Under Review",
        "message": "Your application #{application_number} is now under review by our admissions team.",
        "type": SEVERITY_INFO,
    },
    ApplicationStatus.INTERVIEW_SCHEDULED: {
        "title": "Interview Scheduled",
        "message": (
            "Congratulations! An interview has been scheduled for your application "
            "#{application_number}. Please check your email for details."
        ),
        "type": SEVERITY_SUCCESS,
    },
    ApplicationStatus.APPROVED: {
        "title": "Application Approved!",
        "message": (
            "Excellent news! Your application #{application_number} has been approved. "
            "Check your email for next steps."
        ),
        "type": SEVERITY_SUCCESS,
    },
    ApplicationStatus.REJECTED: {
        "title": "Application Decision",
        "message": "We regret to inform you that your application #{application_number} was not approved at this time.",
        "type": SEVERITY_WARNING,
    },
    ApplicationStatus.WAITLISTED: {
        "title": "Application Waitlisted",
        "message": (
            "Your application #{application_number} has been placed on our waitlist. "
            "We will notify you of any updates."
        ),
        "type": SEVERITY_INFO,
    },
    ApplicationStatus.ENROLLED: {
        "title": "Welcome to Our University!",
        "message": (
            "Congratulations! You are now officially enrolled. "
            "Your application #{application_number} process is complete."
        ),
        "type": SEVERITY_SUCCESS,
    },
}

DEFAULT_NOTIFICATION = {
    "title": "Application Status Updated",
    "message": "Your application #{application_number} status has been updated to: {status_label}",
    "type": SEVERITY_INFO,
}

# Student self-service events
APPLICATION_UPDATED = {
    "title": "Application Updated",
    "message": "Your application #{application_number} has been updated successfully.",
    "type": SEVERITY_SUCCESS,
}
APPLICATION_DELETED = {
    "title": "Application Deleted",
    "message": "Your application #{application_number} has been deleted successfully.",
    "type": SEVERITY_WARNING,
}


def render(template: Dict[str, str], **values) -> Dict[str, str]:
    """Fill a template's placeholders, returning title/message/type."""
    return {
        "title": template["title"],
        "message": template["message"].format(**values),
        "type": template["type"],
    }


def get_status_notification(status, application_number: str) -> Dict[str, str]:
    """
    Build the notification for an application entering `status`.

    Args:
        status: New status (enum member or raw string)
        application_number: Human-readable application number

    Returns:
        Dict with title, message and type (severity)
    """
    template = STATUS_NOTIFICATIONS.get(parse_status(status), DEFAULT_NOTIFICATION)
    return render(
        template,
        application_number=application_number,
        status_label=humanize_status(status),
    )
