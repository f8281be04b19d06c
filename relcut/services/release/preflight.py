"""Checks run before a session touches anything.

Validation needs no external state; prerequisites check tools and
credentials. Both fail before the first clone, tag or upload.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from relcut.core.config import Config
from relcut.core.result import Err, Ok, Result
from relcut.output.console import ConsoleProtocol
from relcut.platform.execution import CommandRunner
from relcut.release.branch import ReleaseBranch, parse_branch
from relcut.release.contracts import ReleaseRequest
from relcut.release.errors import ReleaseError
from relcut.release.semver import parse_build_candidate
from relcut.services.release import announce, gh, registry, storage


@dataclass(frozen=True, slots=True)
class ValidatedRequest:
    branch: ReleaseBranch
    request: ReleaseRequest


def validate_request(request: ReleaseRequest) -> Result[ValidatedRequest, ReleaseError]:
    branch = parse_branch(request.branch)
    if isinstance(branch, Err):
        return branch

    if request.official and branch.value.is_master:
        return Err(
            ReleaseError(
                kind="validation",
                message="--official cannot be used with master",
                hint="Official releases are cut from release-X.Y branches.",
            )
        )

    if request.build_version is not None:
        parsed = parse_build_candidate(request.build_version, overridden=True)
        if isinstance(parsed, Err):
            return parsed

    return Ok(ValidatedRequest(branch=branch.value, request=request))


def _ensure_git() -> Result[None, ReleaseError]:
    if shutil.which("git") is None:
        return Err(
            ReleaseError(kind="prerequisite", message="git: missing", hint="Install git.")
        )
    return Ok(None)


def check_prerequisites(
    *,
    config: Config,
    mock: bool,
    cwd: Path,
    runner: CommandRunner,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    """Tools every session needs, plus bucket access for a real one."""
    # Mock sessions load and tag images locally and send the announcement
    # to the operator, so they need docker and sendmail too.
    checks = (
        _ensure_git,
        gh.ensure_gh_available,
        registry.ensure_docker_available,
        announce.ensure_sendmail_available,
    )
    for check in checks:
        result = check()
        if isinstance(result, Err):
            return result

    auth = gh.ensure_gh_auth(cwd=cwd, runner=runner)
    if isinstance(auth, Err):
        return auth

    if not mock:
        bucket = storage.ensure_bucket_access(config=config.storage, cwd=cwd, runner=runner)
        if isinstance(bucket, Err):
            return bucket

    console.success("prerequisites: OK")
    return Ok(None)
