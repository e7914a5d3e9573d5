from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings
from .migration_runner import run_migrations_once

logger = logging.getLogger(__name__)


def _build_engine(database_url: str) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, future=True)
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise each checkout sees an empty database
        kwargs["poolclass"] = StaticPool
    return create_engine(database_url, future=True, **kwargs)


class Database:
    """Store handle for one command invocation.

    Owns the engine and hands out ORM sessions through ``session_scope``.
    """

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.engine = _build_engine(database_url)
        self._session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    def new_session(self) -> Session:
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        session = self.new_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        self.engine.dispose()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_database(settings: Settings) -> Database:
    run_migrations_once(settings.database_url)
    logger.debug("Opening store at %s", settings.database_url)
    return Database(settings.database_url)
