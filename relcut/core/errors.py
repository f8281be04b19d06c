"""Process exit codes.

A release session either completes or stops at the first fatal condition;
the exit status does not distinguish between failure classes. The failure
class is reported on the console and in the transcript instead.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    FATAL = 1

    def __str__(self) -> str:
        return self.name.lower()
