from __future__ import annotations

from pathlib import Path

import typer

from relcut.cli.commands._helpers import exit_on_error
from relcut.cli.context import build_context
from relcut.core.result import Ok
from relcut.output.console import Style
from relcut.release.contracts import ReleaseRequest
from relcut.services.release.session import run_session


def _confirm(question: str) -> bool:
    return typer.confirm(question, default=False)


def release(
    branch: str = typer.Argument(..., help="master, release-X.Y or release-X.Y.Z"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    nomock: bool = typer.Option(
        False, "--nomock", help="Really push, upload and publish (default: mock run)."
    ),
    noclean: bool = typer.Option(
        False, "--noclean", help="Reuse the existing workspace and build outputs."
    ),
    official: bool = typer.Option(False, "--official", help="Cut an official release."),
    buildversion: str | None = typer.Option(
        None, "--buildversion", help="Build to release instead of the newest green CI build."
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Config file (default: ./relcut.toml)."
    ),
) -> None:
    """Cut a release from BRANCH."""
    ctx = build_context(config)

    request = ReleaseRequest(
        branch=branch,
        official=official,
        build_version=buildversion,
        mock=not nomock,
        noclean=noclean,
        yes=yes,
    )
    result = run_session(request=request, config=ctx.config, console=ctx.console, confirm=_confirm)
    exit_on_error(result, ctx)

    if isinstance(result, Ok):
        ctx.console.newline()
        ctx.console.success(result.value.summary)
        if request.mock:
            ctx.console.print("mock run: nothing was pushed or published. Re-run with --nomock.", Style.DIM)
