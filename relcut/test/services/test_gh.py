from __future__ import annotations

import json
from pathlib import Path

import pytest

from relcut.core.result import Err, Ok, Result
from relcut.output.console import MockConsole
from relcut.platform import execution
from relcut.platform.execution import CommandRunner, ExecutionMode
from relcut.platform.process import ProcessError
from relcut.services.release import gh

SHA_A = "a" * 40
SHA_B = "b" * 40


def _patch(monkeypatch: pytest.MonkeyPatch, result: Result[str, ProcessError]) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake(cmd: list[str], cwd: Path, env: object = None, **_: object) -> Result[str, ProcessError]:
        calls.append(cmd)
        return result

    monkeypatch.setattr(execution, "run", fake)
    return calls


def _runner(mock: bool = True) -> CommandRunner:
    return CommandRunner(mode=ExecutionMode(mock=mock), console=MockConsole())


def test_green_head_shas(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    payload = [{"headSha": SHA_A}, {"headSha": SHA_A}, {"headSha": "short"}, {"nope": 1}, {"headSha": SHA_B}]
    calls = _patch(monkeypatch, Ok(json.dumps(payload)))

    result = gh.green_head_shas(
        slug="acme/widget", workflow="ci.yml", branch="release-1.4", limit=20, cwd=tmp_path, runner=_runner()
    )
    assert result == Ok([SHA_A, SHA_B])
    assert calls[0][:3] == ["gh", "run", "list"]
    assert "--status" in calls[0] and "success" in calls[0]


def test_green_head_shas_bad_payload(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _patch(monkeypatch, Ok('{"not": "a list"}'))
    result = gh.green_head_shas(slug="a/b", workflow="ci.yml", branch="master", limit=5, cwd=tmp_path, runner=_runner())
    assert isinstance(result, Err)
    assert result.error.kind == "resolution"


def test_green_head_shas_invalid_json(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _patch(monkeypatch, Ok("not json"))
    result = gh.green_head_shas(slug="a/b", workflow="ci.yml", branch="master", limit=5, cwd=tmp_path, runner=_runner())
    assert isinstance(result, Err)
    assert "invalid JSON" in result.error.message


def test_view_release_not_found(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _patch(monkeypatch, Err(ProcessError(("gh",), 1, "", "release not found")))
    assert gh.view_release(slug="a/b", tag="v1.4.2", cwd=tmp_path, runner=_runner()) == Ok(None)


def test_view_release_other_error(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _patch(monkeypatch, Err(ProcessError(("gh",), 1, "", "HTTP 502")))
    result = gh.view_release(slug="a/b", tag="v1.4.2", cwd=tmp_path, runner=_runner())
    assert isinstance(result, Err)
    assert result.error.hint == "HTTP 502"


def test_view_release(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _patch(monkeypatch, Ok(json.dumps({"tagName": "v1.4.2", "url": "u", "isDraft": True, "isPrerelease": False})))
    assert gh.view_release(slug="a/b", tag="v1.4.2", cwd=tmp_path, runner=_runner()) == Ok(
        gh.HostedRelease(tag="v1.4.2", url="u", draft=True, prerelease=False)
    )



def test_writes_are_skipped_in_mock_mode(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _patch(monkeypatch, Ok("url"))
    runner = _runner(mock=True)
    assert gh.delete_release(slug="a/b", tag="v1.4.2", cwd=tmp_path, runner=runner) == Ok("")
    assert gh.upload_asset(slug="a/b", tag="v1.4.2", path=tmp_path / "x.tar.gz", cwd=tmp_path, runner=runner) == Ok("")
    assert calls == []


def test_edit_release_prerelease_flag(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _patch(monkeypatch, Ok(""))
    gh.edit_release(
        slug="a/b", tag="v1.4.2", title="v1.4.2 (official)", notes_file=tmp_path / "n.md",
        prerelease=False, cwd=tmp_path, runner=_runner(mock=False),
    )
    assert calls[0][-1] == "--prerelease=false"


def test_gh_auth(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _patch(monkeypatch, Err(ProcessError(("gh",), 1, "", "not logged in")))
    result = gh.ensure_gh_auth(cwd=tmp_path, runner=_runner())
    assert isinstance(result, Err)
    assert result.error.hint == "Run: gh auth login"
