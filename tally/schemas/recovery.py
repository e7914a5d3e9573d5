from enum import Enum

from pydantic import BaseModel

from .session import SessionRead


class Disposition(str, Enum):
    KEEP = "keep"
    DISCARD = "discard"
    CLOSE = "close"


class OrphanNotice(BaseModel):
    session: SessionRead
    elapsed_seconds: int


class RecoveryOutcome(BaseModel):
    session: SessionRead
    disposition: Disposition
    recognized: bool = True
    total_seconds: int | None = None
