"""Shared fixtures: in-memory database, fixed clock and an API client."""

from datetime import datetime

import pytest
import pytz
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from carecalendar.db.config import get_session
from carecalendar.main import app
from carecalendar.models import CareLog, CareTask
from carecalendar.services.clock import FixedClock, get_clock
from carecalendar.services.persistence import normalize_log, normalize_task
from carecalendar.utils.metrics import metrics_collector

# Friday 2024-03-15, 10:00 UTC
NOW = datetime(2024, 3, 15, 10, 0, tzinfo=pytz.utc)
USER_ID = "keeper-1"


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=pytz.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics_collector.reset()
    yield


@pytest.fixture
def make_task(session):
    """Insert a care task directly, bypassing validation."""
    def _make(**overrides) -> CareTask:
        fields = {
            "user_id": USER_ID,
            "title": "Feed leopard gecko",
            "type": "feeding",
            "frequency": "daily",
            "next_due_at": NOW,
        }
        fields.update(overrides)
        task = CareTask(**fields)
        session.add(task)
        session.commit()
        session.refresh(task)
        return normalize_task(task)
    return _make


@pytest.fixture
def add_log(session):
    def _add(task: CareTask, completed_at: datetime, skipped: bool = False, **fields) -> CareLog:
        log = CareLog(
            task_id=task.id,
            user_id=task.user_id,
            completed_at=completed_at,
            skipped=skipped,
            **fields
        )
        session.add(log)
        session.commit()
        session.refresh(log)
        return normalize_log(log)
    return _add


@pytest.fixture
def client(session, clock):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()
