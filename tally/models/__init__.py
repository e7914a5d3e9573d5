from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .work_session import ACTIVE_STATUSES, SessionStatus, WorkSession  # noqa: E402,F401
