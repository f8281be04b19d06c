from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from relcut.core.config import Config
from relcut.core.result import Err, Ok, Result
from relcut.git.repository import Repository, clone
from relcut.output.console import ConsoleProtocol, Style
from relcut.platform.execution import CommandRunner
from relcut.release.branch import ReleaseBranch
from relcut.release.errors import ReleaseError

Confirm = Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class WorkspacePaths:
    workspace: Path
    tree_root: Path
    reused: bool


def workspace_for(config: Config, branch: ReleaseBranch) -> Path:
    return Path(config.workspace.base_dir).expanduser() / f"relcut-{branch.name}"


def prepare_workspace(
    *,
    config: Config,
    branch: ReleaseBranch,
    noclean: bool,
    confirm: Confirm,
    runner: CommandRunner,
    console: ConsoleProtocol,
) -> Result[WorkspacePaths, ReleaseError]:
    """Give the session a workspace it owns.

    A leftover workspace from an earlier session is removed (after
    confirmation) and re-cloned, or reused as-is with noclean, which is how
    an interrupted session is resumed.
    """
    workspace = workspace_for(config, branch)
    tree_root = workspace / config.workspace.tree_dir

    if workspace.exists():
        if noclean:
            if not Repository(tree_root, runner).exists():
                return Err(
                    ReleaseError(
                        kind="prerequisite",
                        message=f"--noclean given but no tree to reuse in {workspace}",
                        hint="Run once without --noclean.",
                    )
                )
            console.print(f"reusing workspace {workspace}", Style.DIM)
            return Ok(WorkspacePaths(workspace=workspace, tree_root=tree_root, reused=True))

        if not confirm(f"Remove leftover workspace {workspace}?"):
            return Err(
                ReleaseError(
                    kind="prerequisite",
                    message=f"leftover workspace not removed: {workspace}",
                    hint="Remove it, or pass --noclean to resume in it.",
                )
            )
        console.print(f"removing {workspace}", Style.DIM)
        try:
            shutil.rmtree(workspace)
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="prerequisite",
                    message=f"failed to remove workspace: {e}",
                    hint=str(workspace),
                )
            )

    workspace.mkdir(parents=True, exist_ok=True)
    cloned = clone(url=config.repo.url, dest=tree_root, runner=runner)
    if isinstance(cloned, Err):
        return Err(
            ReleaseError(
                kind="prerequisite",
                message=f"failed to clone {config.repo.url}",
                hint=cloned.error.message,
            )
        )
    return Ok(WorkspacePaths(workspace=workspace, tree_root=tree_root, reused=False))
