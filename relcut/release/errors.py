"""Error types for the release session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    # bad grammar or conflicting flags; nothing touched yet
    "validation",
    # missing tools, credentials or bucket access; nothing touched yet
    "prerequisite",
    # versions/branches cannot be computed; tree not mutated yet
    "resolution",
    # checkout/stamp/commit/tag failed; tree may be partially modified
    "prepare",
    # build toolchain failed; earlier label outputs remain on disk
    "build",
    # push/upload failed; some objects may already be public
    "publish",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical release error payload.

    Rendered by the CLI without knowing which component produced it.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
