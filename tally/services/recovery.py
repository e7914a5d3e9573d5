"""Detect and resolve a session left active on a previous calendar day."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from ..models import SessionStatus, WorkSession
from ..schemas.recovery import Disposition, OrphanNotice, RecoveryOutcome
from ..schemas.session import SessionRead
from .store import SessionStore
from .timekeeping import Clock, elapsed_seconds, end_of_day, seconds_between

logger = logging.getLogger(__name__)

Prompt = Callable[[OrphanNotice], str]

_ANSWERS = {
    "k": Disposition.KEEP,
    "keep": Disposition.KEEP,
    "d": Disposition.DISCARD,
    "discard": Disposition.DISCARD,
    "c": Disposition.CLOSE,
    "close": Disposition.CLOSE,
    "s": Disposition.CLOSE,
    "stop": Disposition.CLOSE,
}


def parse_disposition(answer: Optional[str]) -> Optional[Disposition]:
    return _ANSWERS.get((answer or "").strip().lower())


def closing_total_seconds(session: WorkSession) -> int:
    """Work time of an orphan closed at 23:59:59 on its start date.

    Only the accumulated pauses are deducted; an open pause is not charged.
    """
    day_end = end_of_day(session.start_time.date())
    return max(0, seconds_between(session.start_time, day_end) - (session.paused_seconds or 0))


class RecoveryReconciler:
    def __init__(self, store: SessionStore, clock: Clock, prompt: Prompt):
        self.store = store
        self.clock = clock
        self.prompt = prompt

    def find_orphan(self) -> Optional[WorkSession]:
        return self.store.find_orphan_session(self.clock.now().date())

    def check(self) -> Optional[RecoveryOutcome]:
        orphan = self.find_orphan()
        if orphan is None:
            return None

        notice = OrphanNotice(
            session=SessionRead.model_validate(orphan),
            elapsed_seconds=elapsed_seconds(orphan, self.clock.now()),
        )
        disposition = parse_disposition(self.prompt(notice))
        if disposition is None:
            logger.info("Unrecognised answer for orphan session %s; keeping it", orphan.id)
            return RecoveryOutcome(session=notice.session, disposition=Disposition.KEEP, recognized=False)
        return self.apply(orphan, disposition)

    def apply(self, orphan: WorkSession, disposition: Disposition) -> RecoveryOutcome:
        if disposition is Disposition.DISCARD:
            snapshot = SessionRead.model_validate(orphan)
            self.store.delete(orphan.id)
            logger.info("Discarded orphan session %s", orphan.id)
            return RecoveryOutcome(session=snapshot, disposition=disposition)

        if disposition is Disposition.CLOSE:
            total = closing_total_seconds(orphan)
            closed = self.store.update(
                orphan.id,
                end_time=end_of_day(orphan.start_time.date()),
                pause_time=None,
                status=SessionStatus.COMPLETED,
                total_seconds=total,
            )
            logger.info("Closed orphan session %s at end of day with %ss", orphan.id, total)
            return RecoveryOutcome(session=SessionRead.model_validate(closed), disposition=disposition, total_seconds=total)

        logger.info("Kept orphan session %s as-is", orphan.id)
        return RecoveryOutcome(session=SessionRead.model_validate(orphan), disposition=Disposition.KEEP)
