"""
Structured JSON logging for the escrow client and its CLI.

Log lines go to stderr so command output on stdout stays machine-readable.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import IO, Any

ROOT_LOGGER_NAME = "escrow_client"

VALID_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


def _utc_day(created: float | None = None) -> str:
    moment = datetime.now(tz=UTC) if created is None else datetime.fromtimestamp(created, tz=UTC)
    return moment.strftime("%Y-%m-%d")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with ``extra=`` fields nested under "extra"."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        payload: dict[str, Any] = {
            "timestamp": created.isoformat(timespec="seconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        extra = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if extra:
            payload["extra"] = extra
        return json.dumps(payload, default=str, ensure_ascii=False)


class DailyFileHandler(logging.FileHandler):
    """Appends to ``<directory>/YYYY-MM-DD.log``, moving to a new file each UTC day.

    The day is taken from each record's creation time.
    """

    def __init__(self, directory: str) -> None:
        self.directory = directory
        self.day = _utc_day()
        super().__init__(self._path(self.day), encoding="utf-8", delay=True)

    def _path(self, day: str) -> str:
        return os.path.join(self.directory, f"{day}.log")

    def emit(self, record: logging.LogRecord) -> None:
        day = _utc_day(record.created)
        if day != self.day:
            if self.stream is not None:
                self.stream.close()
                self.stream = None  # type: ignore[assignment]
            self.baseFilename = os.path.abspath(self._path(day))
            self.day = day
        super().emit(record)


def setup_logging(
    level: str,
    name: str = ROOT_LOGGER_NAME,
    log_directory: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Configure JSON logging on the ``name`` logger, replacing earlier handlers.

    Records go to ``stream`` (stderr by default) and, when ``log_directory``
    is set, also to a daily file inside it.

    Raises:
        ValueError: If level is not a valid log level
    """
    level_name = level.upper()
    if level_name not in VALID_LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of {sorted(VALID_LOG_LEVELS)}")

    handlers: list[logging.Handler] = [
        logging.StreamHandler(stream if stream is not None else sys.stderr)
    ]
    if log_directory is not None:
        os.makedirs(log_directory, exist_ok=True)
        handlers.append(DailyFileHandler(log_directory))

    logger = logging.getLogger(name)
    logger.setLevel(level_name)
    for old in logger.handlers:
        old.close()
    logger.handlers.clear()

    formatter = JSONFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the escrow_client namespace.

    Module names already inside the namespace are used as-is.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
