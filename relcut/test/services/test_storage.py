from __future__ import annotations

from pathlib import Path

import pytest

from relcut.core.config import StorageConfig
from relcut.core.result import Err, Ok, Result
from relcut.output.console import MockConsole
from relcut.platform import execution
from relcut.platform.execution import CommandRunner, ExecutionMode
from relcut.platform.process import ProcessError
from relcut.release.semver import SemVer
from relcut.services.release import storage

CONFIG = StorageConfig(bucket="widget-release", prefix="release")


def test_urls() -> None:
    assert storage.bucket_url(CONFIG) == "gs://widget-release"
    assert storage.release_url(CONFIG, "v1.4.2") == "gs://widget-release/release/v1.4.2"


def test_official_markers() -> None:
    assert storage.official_markers(CONFIG, SemVer(2, 1, 0)) == (
        "gs://widget-release/release/stable.txt",
        "gs://widget-release/release/stable-2.1.txt",
    )


def test_bucket_access_requires_gsutil(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(storage.shutil, "which", lambda _: None)
    runner = CommandRunner(mode=ExecutionMode(mock=False), console=MockConsole())
    result = storage.ensure_bucket_access(config=CONFIG, cwd=tmp_path, runner=runner)
    assert isinstance(result, Err)
    assert result.error.kind == "prerequisite"


def test_bucket_access_denied(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def denied(cmd: list[str], cwd: Path, env: object = None, **_: object) -> Result[str, ProcessError]:
        return Err(ProcessError(tuple(cmd), 1, "", "AccessDeniedException: 403"))

    monkeypatch.setattr(storage.shutil, "which", lambda _: "/usr/bin/gsutil")
    monkeypatch.setattr(execution, "run", denied)
    runner = CommandRunner(mode=ExecutionMode(mock=False), console=MockConsole())
    result = storage.ensure_bucket_access(config=CONFIG, cwd=tmp_path, runner=runner)
    assert isinstance(result, Err)
    assert result.error.hint == "AccessDeniedException: 403"


def test_copy_artifacts_mock_is_skipped(tmp_path: Path) -> None:
    console = MockConsole()
    runner = CommandRunner(mode=ExecutionMode(mock=True), console=console)
    result = storage.copy_artifacts(config=CONFIG, tag="v1.4.2", artifact_dir=tmp_path, runner=runner)
    assert result == Ok("gs://widget-release/release/v1.4.2")
    assert console.find("[mock] skip: gsutil -m cp -r")
