"""Rotated transcript log.

Every console line of a session is also written to `<log dir>/relcut.log`
through the standard logging module with size-based rotation. The
transcript is the only record of what a session did; an operator resuming
after a failure reads it to see which tags and uploads already happened.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from relcut.core.config import LogConfig
from relcut.output.console import ConsoleProtocol, Style

__all__ = ["TranscriptConsole", "open_transcript"]

LOGGER_NAME = "relcut.transcript"
LOG_FILE_NAME = "relcut.log"

_LEVELS = {
    Style.ERROR: logging.ERROR,
    Style.WARNING: logging.WARNING,
    Style.DIM: logging.DEBUG,
}


def open_transcript(config: LogConfig) -> tuple[logging.Logger, Path]:
    """Attach a rotating file handler to the transcript logger.

    Returns the logger and the log file path. Calling it twice for the same
    file does not add a second handler.
    """
    log_dir = Path(config.dir).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    path = log_dir / LOG_FILE_NAME

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename) == path.resolve():
            return logger, path

    handler = RotatingFileHandler(
        path,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-7s %(message)s"))
    logger.addHandler(handler)
    return logger, path


class TranscriptConsole:
    """ConsoleProtocol that forwards to another console and logs every line."""

    def __init__(self, inner: ConsoleProtocol, logger: logging.Logger) -> None:
        self._inner = inner
        self._logger = logger

    def _log(self, message: str, style: Style) -> None:
        if message:
            self._logger.log(_LEVELS.get(style, logging.INFO), message)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._inner.print(message, style)
        self._log(message, style)

    def success(self, message: str) -> None:
        self._inner.success(message)
        self._log(f"OK {message}", Style.SUCCESS)

    def error(self, message: str) -> None:
        self._inner.error(message)
        self._log(f"error: {message}", Style.ERROR)

    def warning(self, message: str) -> None:
        self._inner.warning(message)
        self._log(f"warning: {message}", Style.WARNING)

    def info(self, message: str) -> None:
        self._inner.info(message)
        self._log(f"info: {message}", Style.INFO)

    def header(self, message: str) -> None:
        self._inner.header(message)
        self._log(f"== {message}", Style.HEADER)

    def newline(self) -> None:
        self._inner.newline()
