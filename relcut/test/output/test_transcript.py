"""Tests for the rotated transcript log."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from relcut.core.config import LogConfig
from relcut.output.console import MockConsole, Style
from relcut.output.transcript import LOGGER_NAME, TranscriptConsole, open_transcript


def _file_handlers(logger: logging.Logger) -> list[RotatingFileHandler]:
    # pytest attaches its own capture handlers; only ours matter here
    return [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]


def _detach_handlers() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    for handler in _file_handlers(logger):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture(autouse=True)
def _clean_logger() -> Iterator[None]:
    _detach_handlers()
    yield
    _detach_handlers()


def _flush(logger: logging.Logger) -> None:
    for handler in _file_handlers(logger):
        handler.flush()


def test_open_transcript_creates_log_dir(tmp_path: Path) -> None:
    logger, path = open_transcript(LogConfig(dir=str(tmp_path / "logs")))
    assert path == tmp_path / "logs" / "relcut.log"
    assert path.parent.is_dir()
    assert len(_file_handlers(logger)) == 1


def test_open_transcript_twice_adds_one_handler(tmp_path: Path) -> None:
    config = LogConfig(dir=str(tmp_path))
    logger, _ = open_transcript(config)
    logger, _ = open_transcript(config)
    assert len(_file_handlers(logger)) == 1


def test_rotation_settings(tmp_path: Path) -> None:
    logger, _ = open_transcript(LogConfig(dir=str(tmp_path), max_bytes=1024, backup_count=3))
    (handler,) = _file_handlers(logger)
    assert handler.maxBytes == 1024
    assert handler.backupCount == 3


def test_console_tees_into_log(tmp_path: Path) -> None:
    logger, path = open_transcript(LogConfig(dir=str(tmp_path)))
    inner = MockConsole()
    console = TranscriptConsole(inner, logger)

    console.header("push")
    console.print("$ git push origin refs/tags/v1.4.2 --dry-run", Style.DIM)
    console.success("tagged v1.4.2")
    console.error("push of release-1.4 failed")
    console.newline()
    _flush(logger)

    assert inner.messages == [
        "push",
        "$ git push origin refs/tags/v1.4.2 --dry-run",
        "OK tagged v1.4.2",
        "error: push of release-1.4 failed",
        "",
    ]
    text = path.read_text(encoding="utf-8")
    assert "== push" in text
    assert "DEBUG   $ git push origin refs/tags/v1.4.2 --dry-run" in text
    assert "OK tagged v1.4.2" in text
    assert "ERROR   error: push of release-1.4 failed" in text
