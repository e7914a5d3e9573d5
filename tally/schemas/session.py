from datetime import datetime

from pydantic import BaseModel, ConfigDict


class SessionRead(BaseModel):
    id: int
    start_time: datetime
    end_time: datetime | None = None
    pause_time: datetime | None = None
    paused_seconds: int = 0
    total_seconds: int | None = None
    project: str | None = None
    tag: str | None = None
    note: str | None = None
    status: str

    model_config = ConfigDict(from_attributes=True)


class StartResult(BaseModel):
    session: SessionRead


class PauseResult(BaseModel):
    session: SessionRead
    elapsed_seconds: int


class ResumeResult(BaseModel):
    session: SessionRead
    pause_seconds: int
    paused_seconds: int


class StopResult(BaseModel):
    session: SessionRead
    total_seconds: int


class StatusResult(BaseModel):
    active: SessionRead | None = None
    elapsed_seconds: int = 0
    today_completed_seconds: int = 0
    today_completed_count: int = 0

    @property
    def today_total_seconds(self) -> int:
        return self.today_completed_seconds + self.elapsed_seconds

    @property
    def is_empty(self) -> bool:
        return self.active is None and self.today_completed_count == 0
