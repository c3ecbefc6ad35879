"""Initialize database tables."""
import logging

from sqlmodel import SQLModel

from carecalendar.db.config import engine
from carecalendar.models import CareLog, CareTask  # noqa: F401  registers the tables

logger = logging.getLogger(__name__)


def init_db(bind=None):
    """Create all tables in the database."""
    SQLModel.metadata.create_all(bind or engine)
    logger.info("Care calendar tables created")


if __name__ == "__main__":
    init_db()
