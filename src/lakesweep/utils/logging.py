"""
Console and file logging for Lakesweep runs.

Everything logs under the ``lakesweep`` logger; module loggers such as
``lakesweep.statements.gateway`` propagate to the handlers attached here.
The Lambda entry point uses the JSON setup in
``lakesweep.observability.structured_logging`` instead.
"""

import logging
import sys
from pathlib import Path
from typing import Any

from rich.logging import RichHandler

ROOT_LOGGER = "lakesweep"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class FileFormatter(logging.Formatter):
    """One line per record: timestamp, level, logger, message."""

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s", datefmt=DATE_FORMAT)


class ConsoleFormatter(logging.Formatter):
    """Plain console format; errors also show where they were logged."""

    def __init__(self) -> None:
        super().__init__(datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        where = ""
        if record.levelno >= logging.ERROR and record.pathname:
            where = f"{Path(record.pathname).name}:{record.lineno} - "

        line = f"{record.levelname}: {self.formatTime(record)} - {where}{record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _parse_level(level: str | int) -> int:
    """Level name (any case) or number; unknown names fall back to INFO."""
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(str(level).upper(), logging.INFO)


def _console_handler(use_rich: bool) -> logging.Handler:
    if use_rich:
        return RichHandler(show_path=True, markup=False, rich_tracebacks=True, log_time_format="[%X]")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ConsoleFormatter())
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, mode="a")
    handler.setFormatter(FileFormatter())
    return handler


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    console_enabled: bool = True,
    use_rich: bool = True,
) -> logging.Logger:
    """
    Configure the ``lakesweep`` logger, replacing any handlers set before.

    Args:
        level: Level name or number (default: INFO)
        log_file: Append log lines to this file as well (parent directories
            are created)
        console_enabled: Log to stderr
        use_rich: Use rich's RichHandler rather than the plain formatter

    Returns:
        The ``lakesweep`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.setLevel(_parse_level(level))

    if console_enabled:
        logger.addHandler(_console_handler(use_rich))
    if log_file:
        logger.addHandler(_file_handler(Path(log_file)))

    logger.propagate = True
    return logger


def setup_logging_from_config(config: dict[str, Any], project_dir: Path | None = None) -> logging.Logger:
    """
    Configure logging from the ``logging`` section of a project config.

    Recognised keys: ``level``, ``file`` (relative paths resolve against
    ``project_dir``), ``console_enabled`` and ``console_type`` (``rich`` or
    ``plain``).
    """
    section = config.get("logging") or {}

    log_file = section.get("file")
    if log_file and project_dir and not Path(log_file).is_absolute():
        log_file = project_dir / log_file

    return setup_logging(
        level=section.get("level", logging.INFO),
        log_file=log_file,
        console_enabled=section.get("console_enabled", True),
        use_rich=section.get("console_type", "rich") == "rich",
    )


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    return logging.getLogger(name)
