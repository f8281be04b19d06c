"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import typer

from relcut.core.errors import ErrorCode
from relcut.core.result import Err, Result
from relcut.output.console import Style

if TYPE_CHECKING:
    from relcut.cli.context import CLIContext
    from relcut.services.release.session import SessionFailure

T = TypeVar("T")


def exit_on_error(
    result: Result[T, SessionFailure],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.FATAL,
) -> None:
    """Exit with error if the session failed, otherwise return.

    Prints the step that was acting, the reason and hint, and every step
    that completed before it, so the operator knows where to resume.
    """
    if isinstance(result, Err):
        failure = result.error
        ctx.console.error(f"{failure.step}: {failure.error.message}")
        if failure.error.hint:
            ctx.console.print(f"hint: {failure.error.hint}", Style.DIM)
        if failure.completed:
            ctx.console.print("completed before the failure:", Style.DIM)
            for step in failure.completed:
                ctx.console.print(f"  - {step}", Style.DIM)
        entries = failure.published.entries() if failure.published is not None else []
        if entries:
            ctx.console.print("published before the failure (not rolled back):", Style.WARNING)
            for heading, items in entries:
                for item in items:
                    ctx.console.print(f"  - {heading}: {item}", Style.WARNING)
        if ctx.transcript is not None:
            ctx.console.print(f"transcript: {ctx.transcript}", Style.DIM)
        raise typer.Exit(code=int(error_code))
