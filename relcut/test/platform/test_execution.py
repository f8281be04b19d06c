"""Tests for the execution mode controller."""

from __future__ import annotations

from pathlib import Path

import pytest

from relcut.core.result import Err, Ok, Result
from relcut.output.console import MockConsole
from relcut.platform import execution
from relcut.platform.execution import Command, CommandRunner, ExecutionMode
from relcut.platform.process import ProcessError


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[list[str], dict[str, str] | None, str | None]] = []

    def run(
        self,
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
        *,
        input: str | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        self.calls.append((cmd, env, input))
        return Ok("out")

    def run_streaming(
        self, cmd: list[str], cwd: Path, env: dict[str, str] | None = None
    ) -> Result[str, ProcessError]:
        self.calls.append((cmd, env, None))
        return Ok("")


@pytest.fixture
def recorder(monkeypatch: pytest.MonkeyPatch) -> _Recorder:
    rec = _Recorder()
    monkeypatch.setattr(execution, "run", rec.run)
    monkeypatch.setattr(execution, "run_streaming", rec.run_streaming)
    return rec


def _runner(mock: bool) -> tuple[CommandRunner, MockConsole]:
    console = MockConsole()
    return CommandRunner(mode=ExecutionMode(mock=mock), console=console), console


def test_mode_label() -> None:
    assert ExecutionMode().mock is True
    assert ExecutionMode().label == "mock"
    assert ExecutionMode(mock=False).label == "real"


def test_local_command_runs_in_mock_mode(recorder: _Recorder, tmp_path: Path) -> None:
    runner, _ = _runner(mock=True)
    result = runner.run(Command(("git", "tag", "-a", "v1.4.2", "-m", "x"), cwd=tmp_path))
    assert result == Ok("out")
    assert recorder.calls[0][0] == ["git", "tag", "-a", "v1.4.2", "-m", "x"]


def test_remote_command_with_dry_run_flag_gets_flag_in_mock_mode(
    recorder: _Recorder, tmp_path: Path
) -> None:
    runner, console = _runner(mock=True)
    cmd = Command(("git", "push", "origin", "release-1.4"), cwd=tmp_path, remote=True, dry_run_flag="--dry-run")
    runner.run(cmd)
    assert recorder.calls[0][0] == ["git", "push", "origin", "release-1.4", "--dry-run"]
    assert console.find("$ git push origin release-1.4 --dry-run")


def test_remote_command_without_flag_is_skipped_in_mock_mode(
    recorder: _Recorder, tmp_path: Path
) -> None:
    runner, console = _runner(mock=True)
    result = runner.run(Command(("docker", "push", "gcr.io/x/api:v1"), cwd=tmp_path, remote=True))
    assert result == Ok("")
    assert recorder.calls == []
    assert console.find("[mock] skip: docker push gcr.io/x/api:v1")
    assert runner.history[-1].argv == ("docker", "push", "gcr.io/x/api:v1")


def test_real_mode_runs_remote_commands_unchanged(recorder: _Recorder, tmp_path: Path) -> None:
    runner, _ = _runner(mock=False)
    runner.run(Command(("git", "push", "origin", "v1.4.2"), cwd=tmp_path, remote=True, dry_run_flag="--dry-run"))
    runner.run(Command(("docker", "push", "gcr.io/x/api:v1"), cwd=tmp_path, remote=True))
    assert [c[0] for c in recorder.calls] == [
        ["git", "push", "origin", "v1.4.2"],
        ["docker", "push", "gcr.io/x/api:v1"],
    ]


def test_same_command_in_both_modes_differs_only_by_flag(tmp_path: Path) -> None:
    cmd = Command(("git", "push", "origin", "master"), cwd=tmp_path, remote=True, dry_run_flag="--dry-run")
    mock_runner, _ = _runner(mock=True)
    real_runner, _ = _runner(mock=False)
    mocked = mock_runner.resolve(cmd)
    real = real_runner.resolve(cmd)
    assert mocked is not None and real is not None
    assert mocked.argv == (*real.argv, "--dry-run")


def test_env_is_layered_over_os_environ(
    recorder: _Recorder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("PATH_MARKER", "kept")
    runner, _ = _runner(mock=True)
    runner.run(Command(("make", "release"), cwd=tmp_path, env={"RELCUT_GIT_VERSION": "v1.5.0"}, stream=True))
    env = recorder.calls[0][1]
    assert env is not None
    assert env["RELCUT_GIT_VERSION"] == "v1.5.0"
    assert env["PATH_MARKER"] == "kept"


def test_input_is_passed_through(recorder: _Recorder, tmp_path: Path) -> None:
    runner, _ = _runner(mock=False)
    runner.run(Command(("sendmail", "-t", "-oi"), cwd=tmp_path, input="Subject: x\n\nbody"))
    assert recorder.calls[0][2] == "Subject: x\n\nbody"


def test_failure_is_returned(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def failing(cmd: list[str], cwd: Path, env: object = None, **_: object) -> Result[str, ProcessError]:
        return Err(ProcessError(tuple(cmd), 1, "", "nope"))

    monkeypatch.setattr(execution, "run", failing)
    runner, _ = _runner(mock=True)
    result = runner.run(Command(("git", "status"), cwd=tmp_path))
    assert isinstance(result, Err)
    assert result.error.stderr == "nope"
