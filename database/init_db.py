import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from tenacity import retry, stop_after_attempt, wait_fixed

from core.config_loader import AppConfig
from core.matching.staleness import StalenessTracker
from database.models import Base
from database.uow import match_uow

logger = logging.getLogger(__name__)


@retry(stop=stop_after_attempt(5), wait=wait_fixed(2), reraise=True)
def create_schema(engine: Engine) -> None:
    """Wait for the database and create any missing tables."""
    logger.info("Initializing database...")
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        Base.metadata.create_all(bind=engine)
        logger.info("Tables created or verified.")
    except Exception as e:
        logger.error(f"Error initializing DB: {e}")
        raise


def init_db(config: AppConfig, engine: Optional[Engine] = None, session_factory=None) -> bool:
    """
    Create the schema and reconcile the signal-weights fingerprint.

    Returns True when a weights change invalidated the score cache.
    """
    if engine is None:
        from database.database import engine as default_engine
        engine = default_engine
    create_schema(engine)

    tracker = StalenessTracker(config.scoring)
    with match_uow(session_factory) as repos:
        return tracker.sync_weights_version(repos, config.scoring.weights)
