from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

GitFn = Callable[..., str]


def _git(cwd: Path, *args: str) -> str:
    proc = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=True)
    return proc.stdout.strip()


@pytest.fixture
def git(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> GitFn:
    """Run git with an isolated identity and config; returns stdout."""
    config = tmp_path / "gitconfig"
    config.write_text("[init]\n\tdefaultBranch = master\n", encoding="utf-8")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Release Bot")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "release@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Release Bot")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "release@example.com")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    return _git


@pytest.fixture
def origin_and_clone(tmp_path: Path, git: GitFn) -> tuple[Path, Path]:
    """A bare origin with two commits on master (the first tagged), and a clone of it."""
    origin = tmp_path / "origin.git"
    seed = tmp_path / "seed"
    clone = tmp_path / "clone"

    git(tmp_path, "init", "--bare", str(origin))
    git(tmp_path, "init", str(seed))
    (seed / "pkg" / "version").mkdir(parents=True)
    (seed / "pkg" / "version" / "base.go").write_text(
        'package version\n\nvar (\n\tgitVersion string = "v0.0.0-master+$Format:%h$"\n)\n',
        encoding="utf-8",
    )
    git(seed, "add", "--all")
    git(seed, "commit", "-m", "Initial commit")
    git(seed, "tag", "-a", "v1.5.0-alpha.2", "-m", "alpha release v1.5.0-alpha.2 on branch master")
    (seed / "README").write_text("widget\n", encoding="utf-8")
    git(seed, "add", "--all")
    git(seed, "commit", "-m", "Add README")
    git(seed, "remote", "add", "origin", str(origin))
    git(seed, "push", "origin", "master", "--tags")
    git(tmp_path, "clone", str(origin), str(clone))
    return origin, clone
