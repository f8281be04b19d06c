from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from relcut.release.branch import ReleaseBranch
from relcut.release.semver import BuildCandidate, SemVer

ALPHA = "alpha"
BETA = "beta"
OFFICIAL = "official"

# Declared label order within a session.
LABEL_ORDER = (ALPHA, BETA, OFFICIAL)

_LABEL_RE = re.compile(r"^(alpha|beta|beta\.(0|[1-9]\d*)|official)$")


def is_valid_label(label: str) -> bool:
    return _LABEL_RE.match(label) is not None


def is_beta_label(label: str) -> bool:
    return label == BETA or label.startswith(f"{BETA}.")


def label_rank(label: str) -> int:
    if is_beta_label(label):
        return LABEL_ORDER.index(BETA)
    return LABEL_ORDER.index(label)


@dataclass(frozen=True, slots=True)
class ReleaseVersion:
    """One version produced by a session.

    Attributes:
        label: alpha, beta, beta.N or official.
        version: The version; its tag form names the git tag.
        frozen: False for versions still moving (betas); their stamped
            identifier carries a trailing "+".
    """

    label: str
    version: SemVer
    frozen: bool = True

    @property
    def tag(self) -> str:
        return self.version.to_tag()

    @property
    def stamp(self) -> str:
        return self.tag if self.frozen else f"{self.tag}+"

    @property
    def stamps_source(self) -> bool:
        """Only beta and official versions are written into the source tree."""
        return self.label != ALPHA


@dataclass(frozen=True, slots=True)
class ReleaseVersionSet:
    """Immutable, ordered label -> version mapping with exactly one primary."""

    entries: tuple[ReleaseVersion, ...]
    primary: str

    def __post_init__(self) -> None:
        labels = [e.label for e in self.entries]
        if not labels:
            raise ValueError("a release needs at least one version")
        if len(set(labels)) != len(labels):
            raise ValueError(f"duplicate labels: {labels}")
        for label in labels:
            if not is_valid_label(label):
                raise ValueError(f"invalid version label: {label}")
        if self.primary not in labels:
            raise ValueError(f"primary label {self.primary!r} not in {labels}")

    def __getitem__(self, label: str) -> ReleaseVersion:
        for e in self.entries:
            if e.label == label:
                return e
        raise KeyError(label)

    def __contains__(self, label: object) -> bool:
        return any(e.label == label for e in self.entries)

    def __iter__(self) -> Iterator[ReleaseVersion]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(e.label for e in self.entries)

    @property
    def primary_version(self) -> ReleaseVersion:
        return self[self.primary]

    def as_dict(self) -> dict[str, str]:
        return {e.label: e.tag for e in self.entries}


@dataclass(frozen=True, slots=True)
class ReleaseSession:
    """Everything a session decided up front.

    Created once, after resolution; every later stage reads it and none
    changes it.
    """

    branch: ReleaseBranch
    parent: ReleaseBranch | None
    candidate: BuildCandidate
    versions: ReleaseVersionSet
    workspace: Path
    tree_root: Path
    mock: bool
    official: bool

    @property
    def creates_branch(self) -> bool:
        return self.parent is not None

    @property
    def primary(self) -> ReleaseVersion:
        return self.versions.primary_version
