"""Typed view of the diary configuration.

``Config`` stays a plain nested dict; ``Config.validated()`` checks it
against ``MemoGalaxyConfig`` when a caller wants real types (``Path``
objects, a known log level, a usable date format).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class PathsConfig(BaseModel):
    """Where the diary keeps its records, backups and logs.

    Unset sub-directories hang off ``data_dir``.
    """

    data_dir: Path
    entries_dir: Path | None = None
    backup_dir: Path | None = None
    log_dir: Path | None = None

    @field_validator("data_dir", "entries_dir", "backup_dir", "log_dir", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v

    @model_validator(mode="after")
    def _fill_from_data_dir(self) -> PathsConfig:
        if self.entries_dir is None:
            self.entries_dir = self.data_dir / "entries"
        if self.backup_dir is None:
            self.backup_dir = self.data_dir / "backups"
        if self.log_dir is None:
            self.log_dir = self.data_dir / "logs"
        return self


class LoggingConfig(BaseModel):
    """Log level and optional log file."""

    level: str = "WARNING"
    file: str | None = None

    @field_validator("level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {v!r}")
        return level


class DisplayConfig(BaseModel):
    """How entries are presented in the terminal."""

    date_format: str = "%Y-%m-%d %H:%M"
    image_before_text: bool = True

    @field_validator("date_format")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("date_format cannot be empty")
        return v


class MemoGalaxyConfig(BaseModel):
    """Root configuration model.

    Uses ``extra="allow"`` so callers can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    paths: PathsConfig = PathsConfig(data_dir=Path("~/.memogalaxy-data"))
    logging: LoggingConfig = LoggingConfig()
    display: DisplayConfig = DisplayConfig()
