from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from relcut.core.result import Err, Ok, Result
from relcut.release.errors import ReleaseError

PreReleaseKind = Literal["alpha", "beta", "rc"]

_NUM = r"(0|[1-9]\d*)"
# `git describe` output of a CI-green commit: v1.5.0-alpha.2-3-gdeadbee
_BUILD_RE = re.compile(
    rf"^v{_NUM}\.{_NUM}\.{_NUM}(?:-(alpha|beta|rc)\.{_NUM})?(?:-(\d+)-g([0-9a-f]{{7,40}}))?$"
)


@dataclass(frozen=True, slots=True)
class PreRelease:
    kind: PreReleaseKind
    n: int

    def __str__(self) -> str:
        return f"{self.kind}.{self.n}"


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    pre: PreRelease | None = None

    def to_tag(self) -> str:
        base = f"v{self.major}.{self.minor}.{self.patch}"
        if self.pre is None:
            return base
        return f"{base}-{self.pre}"

    def base(self) -> SemVer:
        """The same version without its pre-release part."""
        return SemVer(self.major, self.minor, self.patch)

    def with_pre(self, kind: PreReleaseKind, n: int) -> SemVer:
        return SemVer(self.major, self.minor, self.patch, PreRelease(kind, n))

    def next_patch(self) -> SemVer:
        return SemVer(self.major, self.minor, self.patch + 1)

    def __str__(self) -> str:
        return self.to_tag()


@dataclass(frozen=True, slots=True)
class BuildCandidate:
    """A CI-vetted build identifier, the basis for every version of a session.

    Attributes:
        raw: The identifier exactly as given or discovered.
        version: The tag it describes (`v1.4.2-beta.0` for `v1.4.2-beta.0-5-gfeedface`).
        commits: Commits since that tag, 0 for an exact tag.
        sha: Abbreviated commit hash, None for an exact tag.
        overridden: True when supplied on the command line.
    """

    raw: str
    version: SemVer
    commits: int
    sha: str | None
    overridden: bool = False


def _semver_from_groups(groups: tuple[str | None, ...]) -> SemVer:
    major, minor, patch, kind, n = groups[:5]
    pre: PreRelease | None = None
    if kind is not None and n is not None:
        pre = PreRelease(kind, int(n))  # type: ignore[arg-type]
    return SemVer(int(major or 0), int(minor or 0), int(patch or 0), pre)


def parse_build_candidate(raw: str, *, overridden: bool = False) -> Result[BuildCandidate, ReleaseError]:
    s = raw.strip()
    m = _BUILD_RE.match(s)
    if m is None:
        return Err(
            ReleaseError(
                kind="validation",
                message=f"invalid build version: {raw!r}",
                hint="Expected: vMAJOR.MINOR.PATCH[-(alpha|beta|rc).N][-COMMITS-gHASH]",
            )
        )
    groups = m.groups()
    commits = groups[5]
    return Ok(
        BuildCandidate(
            raw=s,
            version=_semver_from_groups(groups),
            commits=int(commits) if commits is not None else 0,
            sha=groups[6],
            overridden=overridden,
        )
    )
