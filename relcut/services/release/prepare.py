from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from relcut.core.config import Config
from relcut.core.result import Err, Ok, Result
from relcut.git.repository import GitError, Repository
from relcut.output.console import ConsoleProtocol, Style
from relcut.platform.execution import Command, CommandRunner
from relcut.release.errors import ReleaseError
from relcut.release.model import ReleaseSession
from relcut.services.release.planner import PlannedLabel


@dataclass(frozen=True, slots=True)
class PreparedLabel:
    label: str
    tag: str
    commit: str
    resumed: bool


def _prepare_error(message: str, hint: str | None = None) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="prepare", message=message, hint=hint))


def _from_git(e: GitError, what: str) -> Err[ReleaseError]:
    return _prepare_error(f"{what} failed", e.message)


def stamp_source(*, path: Path, pattern: str, stamp: str) -> Result[bool, ReleaseError]:
    """Rewrite every `version` group matched by pattern in path to stamp.

    Returns Ok(True) if the file changed.
    """
    try:
        regex = re.compile(pattern)
    except re.error as e:
        return _prepare_error(f"invalid stamp pattern: {e}", pattern)
    if "version" not in regex.groupindex:
        return _prepare_error("stamp pattern needs a (?P<version>...) group", pattern)

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return _prepare_error(f"cannot read version file: {e}", str(path))

    def _sub(m: re.Match[str]) -> str:
        start, end = m.span("version")
        return m.group(0)[: start - m.start()] + stamp + m.group(0)[end - m.start() :]

    updated, count = regex.subn(_sub, text)
    if count == 0:
        return _prepare_error(
            f"no version identifier found in {path.name}",
            f"pattern: {pattern}",
        )
    if updated == text:
        return Ok(False)

    try:
        path.write_text(updated, encoding="utf-8")
    except OSError as e:
        return _prepare_error(f"cannot write version file: {e}", str(path))
    return Ok(True)


def tag_message(planned: PlannedLabel) -> str:
    return f"{planned.label} release {planned.release.tag} on branch {planned.checkout_branch}"


def prepare_label(
    *,
    planned: PlannedLabel,
    session: ReleaseSession,
    repo: Repository,
    config: Config,
    runner: CommandRunner,
    console: ConsoleProtocol,
) -> Result[PreparedLabel, ReleaseError]:
    """Bring the tree to the commit for one label and tag it.

    Re-running on a tree where the tag already exists is only allowed in
    mock mode, where it resumes a previous dry run.
    """
    tag = planned.release.tag

    exists = repo.tag_exists(tag)
    if isinstance(exists, Err):
        return _from_git(exists.error, f"looking up tag {tag}")
    if exists.value:
        if not session.mock:
            return _prepare_error(
                f"tag {tag} already exists",
                "A real session never reuses a tag; inspect the tree and the remote.",
            )
        commit = repo.rev_parse(tag)
        if isinstance(commit, Err):
            return _from_git(commit.error, f"resolving {tag}")
        checked_out = repo.checkout_detached(tag)
        if isinstance(checked_out, Err):
            return _from_git(checked_out.error, f"checkout of {tag}")
        console.print(f"{tag} already tagged; resuming", Style.DIM)
        return Ok(PreparedLabel(label=planned.label, tag=tag, commit=commit.value, resumed=True))

    checked_out = _checkout(planned, repo)
    if isinstance(checked_out, Err):
        return checked_out

    if planned.stamps_source:
        stamped = stamp_source(
            path=repo.path / config.stamp.path,
            pattern=config.stamp.pattern,
            stamp=planned.release.stamp,
        )
        if isinstance(stamped, Err):
            return stamped
        if stamped.value:
            committed = repo.commit_all(f"Bump version to {planned.release.stamp}")
            if isinstance(committed, Err):
                return _from_git(committed.error, "committing version stamp")

    if planned.versionize_docs and config.docs.version_command is not None:
        docs = _versionize_docs(planned, repo, config, runner)
        if isinstance(docs, Err):
            return docs

    tagged = repo.tag(tag, tag_message(planned))
    if isinstance(tagged, Err):
        return _from_git(tagged.error, f"tagging {tag}")

    commit = repo.rev_parse(tag)
    if isinstance(commit, Err):
        return _from_git(commit.error, f"resolving {tag}")

    console.success(f"tagged {tag} at {commit.value[:12]}")
    return Ok(PreparedLabel(label=planned.label, tag=tag, commit=commit.value, resumed=False))


def _checkout(planned: PlannedLabel, repo: Repository) -> Result[None, ReleaseError]:
    match planned.checkout:
        case "create":
            start = planned.start_point or "HEAD"
            result = repo.checkout_new(planned.checkout_branch, start)
        case "parent" | "branch":
            result = repo.checkout(planned.checkout_branch)
    if isinstance(result, Err):
        return _from_git(result.error, f"checkout of {planned.checkout_branch}")
    return Ok(None)


def _versionize_docs(
    planned: PlannedLabel,
    repo: Repository,
    config: Config,
    runner: CommandRunner,
) -> Result[None, ReleaseError]:
    cmd = config.docs.version_command or ()
    result = runner.run(Command((*cmd, planned.release.tag), cwd=repo.path, stream=True))
    if isinstance(result, Err):
        return _prepare_error("doc versioning failed", str(result.error))
    committed = repo.commit_all(f"Versioned docs for {planned.release.tag}")
    if isinstance(committed, Err):
        return _from_git(committed.error, "committing versioned docs")
    return Ok(None)
