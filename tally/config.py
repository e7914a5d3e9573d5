import os
import sys
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def data_dir() -> Path:
    """Per-platform directory that holds the tally database."""
    home = Path.home()
    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA") or home / "AppData" / "Local")
    elif sys.platform == "darwin":
        base = home / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_DATA_HOME") or home / ".local" / "share")
    path = base / "tally"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _default_database_url() -> str:
    return f"sqlite:///{data_dir() / 'tally.db'}"


class Settings(BaseSettings):
    database_url: str = Field(default_factory=_default_database_url)
    log_level: str = "WARNING"
    live_refresh_seconds: float = 1.0
    export_dir: Path = Field(default_factory=Path.cwd)
    note_separator: str = " | "

    model_config = SettingsConfigDict(env_prefix="TALLY_", env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator("live_refresh_seconds")
    @classmethod
    def _positive_refresh(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("live_refresh_seconds must be positive")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
