import logging

from admissions.db.session import engine
from admissions.db.base import Base
import admissions.db.models  # noqa: F401  registers all tables on Base.metadata

logger = logging.getLogger(__name__)


def init_db(bind=None):
    """Create any missing tables (used when RUN_MIGRATIONS is off)."""
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
