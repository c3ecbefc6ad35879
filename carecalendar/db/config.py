"""Database configuration for the Care Calendar backend."""
from typing import Generator
import logging

from sqlalchemy import event
from sqlmodel import create_engine, Session

from carecalendar.config import DATABASE_URL, IS_SQLITE

logger = logging.getLogger(__name__)

# SQLite connections are shared with the threadpool FastAPI runs sync endpoints on
connect_args = {"check_same_thread": False} if IS_SQLITE else {}

engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)

if IS_SQLITE:
    logger.info(f"Using SQLite database: {DATABASE_URL}")

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        # Needed for ON DELETE CASCADE from care_tasks to care_logs
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    logger.info("Using PostgreSQL database")


def get_session() -> Generator[Session, None, None]:
    """Dependency for getting database sessions. Instances are not expired on commit."""
    with Session(engine, expire_on_commit=False) as session:
        yield session
