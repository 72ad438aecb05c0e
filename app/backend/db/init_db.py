"""Initialize database tables and seed data."""
import logging
from app.backend.core.config import settings
from app.backend.db.session import engine, session_scope
from app.backend.db.models import Base
from app.backend.db.seed import seed_database, write_external_rates_feed


logger = logging.getLogger(__name__)


def init_db(seed: bool = None) -> None:
    """Create all database tables, optionally loading seed data."""
    Base.metadata.create_all(bind=engine)
    
    if seed is None:
        seed = settings.seed_on_startup
    
    if seed:
        with session_scope() as db:
            seed_database(db)
        if write_external_rates_feed(settings.external_rates_path):
            logger.info("Wrote mock external rate feed to %s", settings.external_rates_path)
    
    logger.info("Database initialized successfully.")


if __name__ == "__main__":
    init_db()
