"""Clock abstraction and the shared time-accounting helpers.

Every elapsed-time figure shown or persisted goes through ``elapsed_seconds``
so the live status and the value frozen at stop time never disagree.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Protocol

from ..models import SessionStatus, WorkSession
from ..schemas.session import SessionRead

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
END_OF_DAY = time(23, 59, 59)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Local wall-clock time, truncated to whole seconds."""

    def now(self) -> datetime:
        return datetime.now().replace(microsecond=0)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, current: datetime):
        self.current = current.replace(microsecond=0)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: int = 0, **kwargs) -> datetime:
        self.current = self.current + timedelta(seconds=seconds, **kwargs)
        return self.current

    def set(self, current: datetime) -> None:
        self.current = current.replace(microsecond=0)


def seconds_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 1)


def elapsed_seconds(session: WorkSession | SessionRead, now: datetime) -> int:
    """Work time of ``session`` at ``now``: wall-clock since start, minus
    accumulated pauses, minus the pause still in progress if paused."""
    elapsed = seconds_between(session.start_time, now) - (session.paused_seconds or 0)
    if session.status == SessionStatus.PAUSED and session.pause_time is not None:
        elapsed -= seconds_between(session.pause_time, now)
    return max(0, elapsed)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, END_OF_DAY)


def format_duration(seconds: int) -> str:
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date
    label: str


def _long_date_label(day: date) -> str:
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"


def get_date_range(period: str, today: date) -> DateRange:
    """Resolve a report period name (or a YYYY-MM-DD date) to a closed date range.

    Weeks start on Monday. Unknown periods fall back to today.
    """
    if _ISO_DATE.match(period):
        try:
            day = date.fromisoformat(period)
        except ValueError:
            day = None
        if day is not None:
            return DateRange(day, day, _long_date_label(day))

    normalized = period.lower()
    if normalized == "yesterday":
        day = today - timedelta(days=1)
        return DateRange(day, day, "Yesterday")
    if normalized == "week":
        start = today - timedelta(days=today.weekday())
        return DateRange(start, start + timedelta(days=6), "This Week")
    if normalized == "month":
        start = today.replace(day=1)
        next_month = (start + timedelta(days=32)).replace(day=1)
        return DateRange(start, next_month - timedelta(days=1), f"{today:%B} {today.year}")
    return DateRange(today, today, "Today")
