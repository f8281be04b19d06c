from __future__ import annotations

import re
from dataclasses import dataclass

from relcut.core.result import Err, Ok, Result
from relcut.release.errors import ReleaseError

MASTER = "master"

_BRANCH_RE = re.compile(r"^release-(0|[1-9]\d*)\.(0|[1-9]\d*)(?:\.(0|[1-9]\d*))?$")


@dataclass(frozen=True, slots=True)
class ReleaseBranch:
    """A branch the release policy knows how to cut from.

    Either `master` or `release-<major>.<minor>[.<patch>]`.
    """

    name: str
    major: int | None = None
    minor: int | None = None
    patch: int | None = None

    @property
    def is_master(self) -> bool:
        return self.name == MASTER

    @property
    def is_patch_branch(self) -> bool:
        return self.patch is not None

    def implied_parent(self) -> ReleaseBranch:
        """The branch this one is cut from when it does not exist yet."""
        if self.is_master:
            raise ValueError("master has no parent branch")
        if self.patch is None:
            return ReleaseBranch(MASTER)
        return ReleaseBranch(f"release-{self.major}.{self.minor}", self.major, self.minor)

    def __str__(self) -> str:
        return self.name


def parse_branch(name: str) -> Result[ReleaseBranch, ReleaseError]:
    s = name.strip()
    if s == MASTER:
        return Ok(ReleaseBranch(MASTER))

    m = _BRANCH_RE.match(s)
    if m is None:
        return Err(
            ReleaseError(
                kind="validation",
                message=f"invalid release branch: {name!r}",
                hint="Expected: master or release-MAJOR.MINOR[.PATCH]",
            )
        )
    patch = m.group(3)
    return Ok(
        ReleaseBranch(
            name=s,
            major=int(m.group(1)),
            minor=int(m.group(2)),
            patch=int(patch) if patch is not None else None,
        )
    )
