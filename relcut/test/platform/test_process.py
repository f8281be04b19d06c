"""Tests for relcut.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from relcut.core.result import Err, Ok
from relcut.platform.process import ProcessError, run, run_streaming


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(("git", "push"), 1, "", "rejected")
        assert str(error) == "git push failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(("gsutil", "-m", "cp", "-r", "a", "b"), 1, "", "")
        assert str(error) == "gsutil -m cp ... failed (exit 1)"

    def test_detail_prefers_last_stderr_line(self) -> None:
        error = ProcessError(("git", "push"), 1, "", "hint: foo\nerror: failed to push some refs\n")
        assert error.detail() == "error: failed to push some refs"

    def test_detail_falls_back_to_summary(self) -> None:
        error = ProcessError(("make",), 2, "", "")
        assert error.detail() == "make failed (exit 2)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.strip() == "hello"

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import sys; sys.exit(42)"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 42

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert result.error.stderr

    def test_feeds_stdin(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; print(sys.stdin.read().upper())"],
            cwd=tmp_path,
            input="v1.4.2\n",
        )
        assert isinstance(result, Ok)
        assert "V1.4.2" in result.value

    def test_env(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import os; print(os.environ['RELCUT_GIT_VERSION'])"],
            cwd=tmp_path,
            env={"RELCUT_GIT_VERSION": "v1.4.2-beta.1"},
        )
        assert isinstance(result, Ok)
        assert result.value.strip() == "v1.4.2-beta.1"

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2)
        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr


class TestRunStreaming:
    def test_success(self, tmp_path: Path) -> None:
        result = run_streaming([sys.executable, "-c", "pass"], cwd=tmp_path)
        assert result == Ok("")

    def test_failure(self, tmp_path: Path) -> None:
        result = run_streaming([sys.executable, "-c", "import sys; sys.exit(3)"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 3
