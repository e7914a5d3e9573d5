"""
Pytest configuration and fixtures for tally tests.
"""
from datetime import datetime

import pytest

from tally.config import Settings
from tally.db import Database
from tally.models import Base, WorkSession
from tally.services.lifecycle import SessionLifecycle
from tally.services.store import SessionStore
from tally.services.timekeeping import FixedClock


@pytest.fixture
def database():
    """In-memory store with the schema created from the ORM metadata."""
    db = Database("sqlite://")
    Base.metadata.create_all(db.engine)
    yield db
    db.close()


@pytest.fixture
def db_session(database):
    session = database.new_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def store(db_session):
    return SessionStore(db_session)


@pytest.fixture
def clock():
    """Monday 2024-01-15 09:00:00 local time."""
    return FixedClock(datetime(2024, 1, 15, 9, 0, 0))


@pytest.fixture
def lifecycle(store, clock):
    return SessionLifecycle(store, clock)


@pytest.fixture
def make_session(store):
    """Insert a session row directly, bypassing the lifecycle checks."""

    def _make(**fields) -> WorkSession:
        fields.setdefault("status", "running")
        fields.setdefault("paused_seconds", 0)
        session = WorkSession(**fields)
        store.insert(session)
        return session

    return _make


@pytest.fixture
def settings(tmp_path):
    return Settings(database_url=f"sqlite:///{tmp_path / 'tally.db'}", export_dir=tmp_path / "exports")
