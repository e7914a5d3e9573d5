from __future__ import annotations

import logging
from pathlib import Path
from threading import Lock

from alembic import command
from alembic.config import Config

logger = logging.getLogger(__name__)
_run_lock = Lock()
_upgraded: set[str] = set()


def alembic_config(database_url: str) -> Config:
    # no ini file here: the CLI owns logging configuration
    cfg = Config()
    cfg.set_main_option("script_location", str(Path(__file__).resolve().parent / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def run_migrations_once(database_url: str) -> None:
    """Apply Alembic migrations for ``database_url`` once per process."""
    if database_url in _upgraded:
        return

    with _run_lock:
        if database_url in _upgraded:
            return

        logger.info("Applying database migrations...")
        command.upgrade(alembic_config(database_url), "head")
        _upgraded.add(database_url)
        logger.info("Database schema is up to date.")
