"""
Logging setup for the Admissions API.

Console output for operators plus a rotating file under LOG_DIR. Request
payloads pass through sanitize_log_data before they are logged so that
credentials and applicant contact details stay out of the log files.
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_NAME = "admissions.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Keys whose values are replaced outright
SECRET_KEYS = ("password", "token", "secret", "key", "database_url", "authorization")
# Applicant PII that is masked but kept recognisable
MASKED_KEYS = ("email",)

REDACTED = "***REDACTED***"

# Chatty libraries we only want to hear from on problems
QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "sqlalchemy.engine", "passlib")


def setup_logging(log_level: str = "INFO", log_dir: str = "logs") -> None:
    """
    Configure the root logger.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL); unknown names fall back to INFO
        log_dir: Directory for the rotating log file, created if missing
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))

    file_handler = RotatingFileHandler(
        log_path / LOG_FILE_NAME,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for handler in (console_handler, file_handler):
        handler.setLevel(level)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _mask_email(value: str) -> str:
    """'jane.doe@example.com' -> 'j***@example.com'."""
    local, sep, domain = value.partition("@")
    if not sep or not local:
        return REDACTED
    return f"{local[0]}***@{domain}"


def sanitize_log_data(data: Any) -> Any:
    """
    Return a copy of `data` that is safe to log.

    Secrets are replaced, email addresses are masked. Nested dicts and
    lists are walked; the input is never modified.
    """
    if isinstance(data, dict):
        sanitized = {}
        for key, value in data.items():
            lowered = str(key).lower()
            if any(secret in lowered for secret in SECRET_KEYS):
                sanitized[key] = REDACTED
            elif any(masked in lowered for masked in MASKED_KEYS) and isinstance(value, str):
                sanitized[key] = _mask_email(value)
            else:
                sanitized[key] = sanitize_log_data(value)
        return sanitized
    if isinstance(data, (list, tuple)):
        return type(data)(sanitize_log_data(item) for item in data)
    return data
