from __future__ import annotations

from ..models import SessionStatus
from ..schemas.report import DaySummary, Report
from ..schemas.session import SessionRead
from .store import SessionStore
from .timekeeping import DateRange


def build_report(store: SessionStore, period: str, date_range: DateRange) -> Report:
    """Completed sessions started within ``date_range``, with per-day totals."""
    rows = store.find_by_date_range(date_range.start, date_range.end, SessionStatus.COMPLETED)
    sessions = [SessionRead.model_validate(row) for row in rows]
    total_seconds = sum(s.total_seconds or 0 for s in sessions)
    return Report(
        period=period,
        label=date_range.label,
        start_date=date_range.start,
        end_date=date_range.end,
        sessions=sessions,
        total_seconds=total_seconds,
        total_hours=round(total_seconds / 3600, 2),
        session_count=len(sessions),
        days=group_by_day(sessions),
    )


def group_by_day(sessions: list[SessionRead]) -> list[DaySummary]:
    days: dict = {}
    for session in sorted(sessions, key=lambda s: s.start_time):
        day = session.start_time.date()
        summary = days.setdefault(day, DaySummary(day=day))
        summary.total_seconds += session.total_seconds or 0
        summary.session_count += 1
    return list(days.values())
