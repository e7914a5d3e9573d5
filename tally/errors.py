from __future__ import annotations

from datetime import datetime


class TallyError(Exception):
    """Expected, user-correctable failure. Reported with a non-zero exit."""


class ActiveSessionExists(TallyError):
    def __init__(self, status: str, start_time: datetime):
        self.status = status
        self.start_time = start_time
        super().__init__(
            f"A session is already {status} (started at {start_time.strftime('%H:%M')}). "
            "Use 'tally stop' first or 'tally status' to check."
        )


class NoRunningSession(TallyError):
    def __init__(self):
        super().__init__("No running session to pause.")


class NoPausedSession(TallyError):
    def __init__(self):
        super().__init__("No paused session to resume.")


class NoActiveSession(TallyError):
    def __init__(self):
        super().__init__("No active session to stop.")


class UnsupportedExportFormat(TallyError):
    def __init__(self, fmt: str):
        self.fmt = fmt
        super().__init__(f"Unsupported export format '{fmt}'. Use json or csv.")


class SessionNotFound(LookupError):
    """Store-level: a mutation targeted an id that is not persisted."""

    def __init__(self, session_id: int):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")
