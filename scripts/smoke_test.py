#!/usr/bin/env python
"""Smoke test to catch migration or connectivity issues against the configured store."""

from __future__ import annotations

import sys
from pathlib import Path

from alembic import command
from sqlalchemy import text

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from tally.config import get_settings  # noqa: E402  (import after sys.path tweak)
from tally.db import open_database  # noqa: E402
from tally.migration_runner import alembic_config  # noqa: E402


def _verify_migration_state(database_url: str) -> None:
    command.current(alembic_config(database_url))


def _verify_database() -> None:
    with open_database(get_settings()) as database, database.session_scope() as session:
        session.execute(text("SELECT 1 FROM sessions LIMIT 1"))


def main() -> int:
    try:
        _verify_database()
        _verify_migration_state(get_settings().database_url)
    except Exception as exc:
        print(f"[smoke_test] failure: {exc}", file=sys.stderr)
        return 1
    print("[smoke_test] passed", flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
