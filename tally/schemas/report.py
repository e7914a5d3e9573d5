from datetime import date

from pydantic import BaseModel

from .session import SessionRead


class DaySummary(BaseModel):
    day: date
    total_seconds: int = 0
    session_count: int = 0


class Report(BaseModel):
    period: str
    label: str
    start_date: date
    end_date: date
    sessions: list[SessionRead]
    total_seconds: int
    total_hours: float
    session_count: int
    days: list[DaySummary]

    @property
    def grouped(self) -> bool:
        return self.period in ("week", "month")
