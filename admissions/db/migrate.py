"""
Alembic migration runner used at startup when RUN_MIGRATIONS=1.

Several API workers can boot at once; on PostgreSQL they serialise on an
advisory lock so only one of them upgrades the schema at a time.
"""
import logging
import os
from contextlib import contextmanager
from typing import Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

MIGRATION_LOCK_ID = 724310551

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
ALEMBIC_INI_PATH = os.path.join(PROJECT_ROOT, "alembic.ini")


@contextmanager
def migration_lock(engine: Engine):
    """Hold a PostgreSQL advisory lock for the duration of the block; no-op on other backends."""
    if engine.dialect.name != "postgresql":
        yield
        return

    with engine.connect() as conn:
        locked = False
        try:
            conn.execute(text("SELECT pg_advisory_lock(:lock_id)"), {"lock_id": MIGRATION_LOCK_ID})
            conn.commit()
            locked = True
            logger.info(f"Migration lock acquired: lock_id={MIGRATION_LOCK_ID}")
        except Exception as e:
            logger.warning(f"Could not acquire migration lock: {e}")

        try:
            yield
        finally:
            if locked:
                try:
                    conn.execute(text("SELECT pg_advisory_unlock(:lock_id)"), {"lock_id": MIGRATION_LOCK_ID})
                    conn.commit()
                except Exception as e:
                    logger.warning(f"Could not release migration lock: {e}")


def build_alembic_config(database_url: str) -> Config:
    alembic_cfg = Config(ALEMBIC_INI_PATH)
    alembic_cfg.set_main_option("script_location", os.path.join(PROJECT_ROOT, "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    return alembic_cfg


def run_migrations(database_url: Optional[str] = None) -> None:
    """
    Upgrade the database to the head revision.

    Raises:
        ValueError: No database URL configured
        Exception: Whatever Alembic raised; the failure is logged first
    """
    from admissions.core import config

    database_url = database_url or config.DATABASE_URL
    if not database_url:
        raise ValueError("DATABASE_URL is not set")

    engine = create_engine(database_url, pool_pre_ping=True)
    try:
        with migration_lock(engine):
            logger.info("Running alembic upgrade head")
            command.upgrade(build_alembic_config(database_url), "head")
            logger.info("Migrations complete")
    except Exception:
        logger.exception("Migration failed")
        raise
    finally:
        engine.dispose()
