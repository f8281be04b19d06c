"""Cross-layer contracts between the CLI and the session driver."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Raw operator input, before validation."""

    branch: str
    official: bool = False
    build_version: str | None = None
    mock: bool = True
    noclean: bool = False
    yes: bool = False


@dataclass(frozen=True, slots=True)
class ReleaseResult:
    """Session outcome rendered by the CLI."""

    success: bool
    summary: str
    completed: tuple[str, ...] = ()
    failed_step: str | None = None
