from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path

from relcut.core.result import Err, Ok, Result
from relcut.core.structured import as_obj_list, as_str_dict, get_bool, get_str
from relcut.platform.execution import Command, CommandRunner
from relcut.platform.process import ProcessError
from relcut.release.errors import ReleaseError, ReleaseErrorKind

GH_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class HostedRelease:
    tag: str
    url: str | None
    draft: bool
    prerelease: bool


def _hint(e: ProcessError) -> str | None:
    return e.stderr.strip() or None


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="prerequisite",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def ensure_gh_auth(*, cwd: Path, runner: CommandRunner) -> Result[None, ReleaseError]:
    result = runner.run(Command(("gh", "auth", "status"), cwd=cwd, timeout=GH_TIMEOUT_SECONDS))
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="prerequisite",
                message="gh auth required",
                hint="Run: gh auth login",
            )
        )
    return Ok(None)


def _read_json(
    *,
    cmd: tuple[str, ...],
    cwd: Path,
    runner: CommandRunner,
    kind: ReleaseErrorKind,
    message: str,
) -> Result[object, ReleaseError]:
    result = runner.run(Command(cmd, cwd=cwd, timeout=GH_TIMEOUT_SECONDS))
    if isinstance(result, Err):
        return Err(ReleaseError(kind=kind, message=message, hint=_hint(result.error)))
    try:
        obj: object = json.loads(result.value)
    except json.JSONDecodeError as e:
        return Err(ReleaseError(kind=kind, message=f"{message}: invalid JSON ({e})"))
    return Ok(obj)


def green_head_shas(
    *,
    slug: str,
    workflow: str,
    branch: str,
    limit: int,
    cwd: Path,
    runner: CommandRunner,
) -> Result[list[str], ReleaseError]:
    """Head commits of successful CI runs on branch, newest first."""
    obj = _read_json(
        cmd=(
            "gh",
            "run",
            "list",
            "--repo",
            slug,
            "--workflow",
            workflow,
            "--branch",
            branch,
            "--status",
            "success",
            "--limit",
            str(limit),
            "--json",
            "headSha",
        ),
        cwd=cwd,
        runner=runner,
        kind="resolution",
        message=f"failed to query CI runs for {branch}",
    )
    if isinstance(obj, Err):
        return obj

    raw = as_obj_list(obj.value)
    if raw is None:
        return Err(ReleaseError(kind="resolution", message="unexpected gh run list payload"))

    shas: list[str] = []
    for item in raw:
        d = as_str_dict(item)
        if d is None:
            continue
        sha = get_str(d, "headSha")
        if sha is None or len(sha) != 40 or sha in shas:
            continue
        shas.append(sha)
    return Ok(shas)


def view_release(
    *, slug: str, tag: str, cwd: Path, runner: CommandRunner
) -> Result[HostedRelease | None, ReleaseError]:
    """Look up the hosted release entry for tag; Ok(None) if there is none."""
    result = runner.run(
        Command(
            ("gh", "release", "view", tag, "--repo", slug, "--json", "tagName,url,isDraft,isPrerelease"),
            cwd=cwd,
            timeout=GH_TIMEOUT_SECONDS,
        )
    )
    if isinstance(result, Err):
        if "not found" in result.error.stderr.lower():
            return Ok(None)
        return Err(
            ReleaseError(
                kind="publish",
                message=f"failed to query release entry {tag}",
                hint=_hint(result.error),
            )
        )

    try:
        obj: object = json.loads(result.value)
    except json.JSONDecodeError as e:
        return Err(ReleaseError(kind="publish", message=f"invalid JSON from gh release view: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(ReleaseError(kind="publish", message="unexpected gh release view payload"))

    return Ok(
        HostedRelease(
            tag=get_str(data, "tagName") or tag,
            url=get_str(data, "url"),
            draft=get_bool(data, "isDraft") or False,
            prerelease=get_bool(data, "isPrerelease") or False,
        )
    )


def _write(
    cmd: tuple[str, ...], *, cwd: Path, runner: CommandRunner, message: str
) -> Result[str, ReleaseError]:
    result = runner.run(Command(cmd, cwd=cwd, remote=True))
    if isinstance(result, Err):
        return Err(ReleaseError(kind="publish", message=message, hint=_hint(result.error)))
    return Ok(result.value.strip())


def create_release(
    *,
    slug: str,
    tag: str,
    title: str,
    notes_file: Path,
    prerelease: bool,
    cwd: Path,
    runner: CommandRunner,
) -> Result[str, ReleaseError]:
    cmd = [
        "gh",
        "release",
        "create",
        tag,
        "--repo",
        slug,
        "--verify-tag",
        "--title",
        title,
        "--notes-file",
        str(notes_file),
    ]
    if prerelease:
        cmd.append("--prerelease")
    return _write(tuple(cmd), cwd=cwd, runner=runner, message=f"failed to create release entry {tag}")


def edit_release(
    *,
    slug: str,
    tag: str,
    title: str,
    notes_file: Path,
    prerelease: bool,
    cwd: Path,
    runner: CommandRunner,
) -> Result[str, ReleaseError]:
    cmd = (
        "gh",
        "release",
        "edit",
        tag,
        "--repo",
        slug,
        "--title",
        title,
        "--notes-file",
        str(notes_file),
        f"--prerelease={'true' if prerelease else 'false'}",
    )
    return _write(cmd, cwd=cwd, runner=runner, message=f"failed to update release entry {tag}")


def delete_release(
    *, slug: str, tag: str, cwd: Path, runner: CommandRunner
) -> Result[str, ReleaseError]:
    # Deletes the entry only; the git tag stays.
    cmd = ("gh", "release", "delete", tag, "--repo", slug, "--yes")
    return _write(cmd, cwd=cwd, runner=runner, message=f"failed to delete release entry {tag}")


def upload_asset(
    *, slug: str, tag: str, path: Path, cwd: Path, runner: CommandRunner
) -> Result[str, ReleaseError]:
    cmd = ("gh", "release", "upload", tag, str(path), "--repo", slug, "--clobber")
    return _write(cmd, cwd=cwd, runner=runner, message=f"failed to upload {path.name} to {tag}")
