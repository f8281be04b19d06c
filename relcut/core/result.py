"""Result type for explicit error handling.

Every release step returns a Result instead of raising, so the session
driver can stop at the first failure and report what already happened.

Usage:
    def parse_branch(name: str) -> Result[ReleaseBranch, ReleaseError]:
        if not _BRANCH_RE.match(name):
            return Err(ReleaseError(kind="validation", message=f"bad branch: {name}"))
        return Ok(ReleaseBranch(name))

    match parse_branch("release-1.4"):
        case Ok(branch):
            print(branch.name)
        case Err(error):
            print(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result carrying a value."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed result carrying an error payload."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
