from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..errors import SessionNotFound
from ..models import ACTIVE_STATUSES, SessionStatus, WorkSession

logger = logging.getLogger(__name__)

_UPDATABLE = frozenset(
    {"start_time", "end_time", "pause_time", "paused_seconds", "total_seconds", "project", "tag", "note", "status"}
)


class SessionStore:
    """Queries and mutations over ``sessions``.

    The single-active-session rule is enforced by callers, not here. Every
    mutation is committed immediately.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, session_id: int) -> Optional[WorkSession]:
        return self.db.get(WorkSession, session_id)

    def find_active_session(self) -> Optional[WorkSession]:
        return self._latest_with_status(*ACTIVE_STATUSES)

    def find_running_session(self) -> Optional[WorkSession]:
        return self._latest_with_status(SessionStatus.RUNNING)

    def find_paused_session(self) -> Optional[WorkSession]:
        return self._latest_with_status(SessionStatus.PAUSED)

    def find_orphan_session(self, before_date: date) -> Optional[WorkSession]:
        cutoff = datetime.combine(before_date, datetime.min.time())
        return (
            self.db.query(WorkSession)
            .filter(WorkSession.status.in_(ACTIVE_STATUSES), WorkSession.start_time < cutoff)
            .order_by(WorkSession.start_time.desc())
            .first()
        )

    def find_by_date_range(
        self, start_date: date, end_date: date, status: Optional[str] = SessionStatus.COMPLETED
    ) -> list[WorkSession]:
        query = self.db.query(WorkSession).filter(
            WorkSession.start_time >= datetime.combine(start_date, datetime.min.time()),
            WorkSession.start_time <= datetime.combine(end_date, datetime.max.time()),
        )
        if status:
            query = query.filter(WorkSession.status == status)
        return query.order_by(WorkSession.start_time.asc(), WorkSession.id.asc()).all()

    def find_completed_on(self, day: date) -> list[WorkSession]:
        return self.find_by_date_range(day, day, SessionStatus.COMPLETED)

    def insert(self, session: WorkSession) -> int:
        self.db.add(session)
        self.db.commit()
        logger.debug("Inserted session %s", session.id)
        return session.id

    def update(self, session_id: int, **fields) -> WorkSession:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        session = self._require(session_id)
        for key, value in fields.items():
            setattr(session, key, value)
        self.db.commit()
        return session

    def delete(self, session_id: int) -> None:
        session = self._require(session_id)
        self.db.delete(session)
        self.db.commit()
        logger.debug("Deleted session %s", session_id)

    def _require(self, session_id: int) -> WorkSession:
        session = self.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def _latest_with_status(self, *statuses: str) -> Optional[WorkSession]:
        return (
            self.db.query(WorkSession)
            .filter(WorkSession.status.in_(statuses))
            .order_by(WorkSession.id.desc())
            .first()
        )
