from __future__ import annotations

import logging
from typing import Optional

from ..errors import ActiveSessionExists, NoActiveSession, NoPausedSession, NoRunningSession
from ..models import SessionStatus, WorkSession
from ..schemas.session import (
    PauseResult,
    ResumeResult,
    SessionRead,
    StartResult,
    StatusResult,
    StopResult,
)
from .store import SessionStore
from .timekeeping import Clock, elapsed_seconds, seconds_between

logger = logging.getLogger(__name__)

DEFAULT_NOTE_SEPARATOR = " | "


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def merge_notes(existing: Optional[str], additional: Optional[str], separator: str = DEFAULT_NOTE_SEPARATOR) -> Optional[str]:
    if existing and additional:
        return f"{existing}{separator}{additional}"
    return additional or existing


class SessionLifecycle:
    """running -> paused -> running -> completed, one active session at a time."""

    def __init__(self, store: SessionStore, clock: Clock, note_separator: str = DEFAULT_NOTE_SEPARATOR):
        self.store = store
        self.clock = clock
        self.note_separator = note_separator

    def start(self, project: Optional[str] = None, tag: Optional[str] = None, note: Optional[str] = None) -> StartResult:
        existing = self.store.find_active_session()
        if existing is not None:
            raise ActiveSessionExists(existing.status, existing.start_time)

        session = WorkSession(
            start_time=self.clock.now(),
            paused_seconds=0,
            project=_clean(project),
            tag=_clean(tag),
            note=_clean(note),
            status=SessionStatus.RUNNING,
        )
        self.store.insert(session)
        logger.info("Started session %s", session.id)
        return StartResult(session=SessionRead.model_validate(session))

    def pause(self) -> PauseResult:
        session = self.store.find_running_session()
        if session is None:
            raise NoRunningSession()

        now = self.clock.now()
        session = self.store.update(session.id, status=SessionStatus.PAUSED, pause_time=now)
        elapsed = elapsed_seconds(session, now)
        logger.info("Paused session %s after %ss", session.id, elapsed)
        return PauseResult(session=SessionRead.model_validate(session), elapsed_seconds=elapsed)

    def resume(self) -> ResumeResult:
        session = self.store.find_paused_session()
        if session is None:
            raise NoPausedSession()

        now = self.clock.now()
        pause_seconds = max(0, seconds_between(session.pause_time, now)) if session.pause_time else 0
        session = self.store.update(
            session.id,
            status=SessionStatus.RUNNING,
            pause_time=None,
            paused_seconds=(session.paused_seconds or 0) + pause_seconds,
        )
        logger.info("Resumed session %s after a %ss pause", session.id, pause_seconds)
        return ResumeResult(
            session=SessionRead.model_validate(session),
            pause_seconds=pause_seconds,
            paused_seconds=session.paused_seconds,
        )

    def stop(self, additional_note: Optional[str] = None) -> StopResult:
        session = self.store.find_active_session()
        if session is None:
            raise NoActiveSession()

        now = self.clock.now()
        total = elapsed_seconds(session, now)
        session = self.store.update(
            session.id,
            end_time=now,
            pause_time=None,
            status=SessionStatus.COMPLETED,
            total_seconds=total,
            note=merge_notes(session.note, _clean(additional_note), self.note_separator),
        )
        logger.info("Stopped session %s with %ss of work", session.id, total)
        return StopResult(session=SessionRead.model_validate(session), total_seconds=total)

    def status(self) -> StatusResult:
        now = self.clock.now()
        completed = self.store.find_completed_on(now.date())
        active = self.store.find_active_session()
        return StatusResult(
            active=SessionRead.model_validate(active) if active is not None else None,
            elapsed_seconds=elapsed_seconds(active, now) if active is not None else 0,
            today_completed_seconds=sum(s.total_seconds or 0 for s in completed),
            today_completed_count=len(completed),
        )
