"""
loguru setup for memogalaxy.

Library code only ever does ``from loguru import logger``. Front ends call
``setup_logging()`` (or ``configure_logging(config)``) once at startup to
decide where the messages go.
"""

import os
import sys

from loguru import logger

CONSOLE_FORMAT = "<level>[{level.name}]</level> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{line} | {message}"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    fmt: str = CONSOLE_FORMAT,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Replace every loguru sink with stderr plus an optional rotating file.

    Args:
        level: Minimum level for both sinks, any case (``"info"`` works).
        log_file: File to append to. Its directory is created if needed.
        fmt: Format of the console sink.
        rotation: When the file sink starts a new file.
        retention: How long rotated files are kept.
    """
    level = level.upper()
    handlers: list[dict] = [{"sink": sys.stderr, "level": level, "format": fmt}]
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        handlers.append(
            {
                "sink": log_file,
                "level": level,
                "format": FILE_FORMAT,
                "rotation": rotation,
                "retention": retention,
                "encoding": "utf-8",
            }
        )
    logger.configure(handlers=handlers)


def configure_logging(config) -> None:
    """Apply the ``logging`` section of a ``Config``.

    A relative ``logging.file`` is placed under ``paths.log_dir``.
    """
    log_file = config.get("logging.file")
    if log_file:
        log_file = os.path.expanduser(str(log_file))
        if not os.path.isabs(log_file):
            log_file = os.path.join(os.path.expanduser(config.get("paths.log_dir", ".")), log_file)
    setup_logging(level=str(config.get("logging.level", "WARNING")), log_file=log_file)
