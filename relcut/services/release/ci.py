"""Build-status source and branch lookups backing the resolver.

A build candidate is the `git describe` of the newest commit on a branch
whose CI workflow run succeeded, e.g. `v1.5.0-alpha.2-3-gdeadbee`.
"""

from __future__ import annotations

from dataclasses import dataclass

from relcut.core.config import Config
from relcut.core.result import Err, Ok, Result
from relcut.git.repository import Repository, remote_branch_exists
from relcut.platform.execution import CommandRunner
from relcut.release.errors import ReleaseError
from relcut.services.release.gh import green_head_shas


@dataclass
class RemoteLookup:
    """ResolverLookup over the configured remote, the CI runs and a local clone."""

    config: Config
    repo: Repository
    runner: CommandRunner

    def branch_exists(self, branch: str) -> Result[bool, ReleaseError]:
        result = remote_branch_exists(
            url=self.config.repo.url,
            branch=branch,
            cwd=self.repo.path,
            runner=self.runner,
        )
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="resolution",
                    message=f"failed to check whether {branch} exists",
                    hint=result.error.message,
                )
            )
        return Ok(result.value)

    def find_green_build(self, branch: str) -> Result[str, ReleaseError]:
        shas = green_head_shas(
            slug=self.config.repo.slug,
            workflow=self.config.ci.workflow,
            branch=branch,
            limit=self.config.ci.limit,
            cwd=self.repo.path,
            runner=self.runner,
        )
        if isinstance(shas, Err):
            return shas

        unpublished = self._unpublished_tags()
        if isinstance(unpublished, Err):
            return unpublished

        for sha in shas.value:
            described = self.repo.describe(sha, exclude=unpublished.value)
            if isinstance(described, Ok):
                return Ok(described.value)

        return Err(
            ReleaseError(
                kind="resolution",
                message=f"no green build found on {branch}",
                hint="Wait for CI to pass, or pass --buildversion explicitly.",
            )
        )

    def _unpublished_tags(self) -> Result[set[str], ReleaseError]:
        # Tags a previous session created in a reused clone but never pushed
        # must not move the candidate, or a resume would bump past them.
        local = self.repo.local_tags()
        if isinstance(local, Err):
            return Err(ReleaseError(kind="resolution", message="failed to list local tags", hint=local.error.message))
        remote = self.repo.remote_tags()
        if isinstance(remote, Err):
            return Err(
                ReleaseError(
                    kind="resolution",
                    message=f"failed to list tags on {self.repo.remote}",
                    hint=remote.error.message,
                )
            )
        return Ok(local.value - remote.value)
