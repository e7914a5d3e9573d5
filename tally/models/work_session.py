from sqlalchemy import Column, DateTime, Enum, Index, Integer, String, Text

from . import Base


class SessionStatus:
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


ACTIVE_STATUSES = (SessionStatus.RUNNING, SessionStatus.PAUSED)

session_status_enum = Enum(
    SessionStatus.RUNNING,
    SessionStatus.PAUSED,
    SessionStatus.COMPLETED,
    name="session_status",
    create_constraint=True,
)


class WorkSession(Base):
    __tablename__ = "sessions"
    __table_args__ = (
        Index("idx_start_time", "start_time"),
        Index("idx_status", "status"),
        Index("idx_project", "project"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    pause_time = Column(DateTime, nullable=True)
    paused_seconds = Column(Integer, nullable=False, default=0)
    total_seconds = Column(Integer, nullable=True)
    project = Column(String, nullable=True)
    tag = Column(String, nullable=True)
    note = Column(Text, nullable=True)
    status = Column(session_status_enum, nullable=False, default=SessionStatus.RUNNING)
