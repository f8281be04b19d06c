from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from relcut.core.config import BuildConfig
from relcut.core.result import Err, Ok, Result
from relcut.output.console import ConsoleProtocol, Style
from relcut.platform.execution import Command, CommandRunner
from relcut.release.errors import ReleaseError


@dataclass(frozen=True, slots=True)
class BuildOutput:
    tag: str
    artifact_dir: Path
    reused: bool

    def tarballs(self, glob: str) -> list[Path]:
        return sorted(p for p in self.artifact_dir.glob(glob) if p.is_file())


def artifact_dir_for(workspace: Path, config: BuildConfig, tag: str) -> Path:
    # Outside the tree so later commits never pick up build output.
    return workspace / f"{config.output_dir.strip('/').replace('/', '-')}-{tag}"


def build_version(
    *,
    tag: str,
    tree_root: Path,
    workspace: Path,
    config: BuildConfig,
    noclean: bool,
    runner: CommandRunner,
    console: ConsoleProtocol,
) -> Result[BuildOutput, ReleaseError]:
    """Build the currently checked-out tree for one version.

    The toolchain writes into the shared output dir; it is moved to a
    per-version dir so the next label's build cannot clobber it.
    """
    output = tree_root / config.output_dir
    target = artifact_dir_for(workspace, config, tag)

    if target.is_dir():
        if noclean:
            console.print(f"reusing build output {target.name}", Style.DIM)
            return Ok(BuildOutput(tag=tag, artifact_dir=target, reused=True))
        console.print(f"removing stale build output {target.name}", Style.DIM)
        removed = _remove(target)
        if isinstance(removed, Err):
            return removed

    if output.exists():
        removed = _remove(output)
        if isinstance(removed, Err):
            return removed

    result = runner.run(
        Command(
            config.command,
            cwd=tree_root,
            env={config.version_env: tag},
            stream=True,
        )
    )
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="build",
                message=f"build of {tag} failed",
                hint=str(result.error),
            )
        )

    if not output.is_dir():
        return Err(
            ReleaseError(
                kind="build",
                message=f"build of {tag} produced no {config.output_dir}/",
                hint=" ".join(config.command),
            )
        )

    try:
        output.rename(target)
    except OSError as e:
        return Err(ReleaseError(kind="build", message=f"cannot move build output: {e}"))

    console.success(f"built {tag} -> {target.name}")
    return Ok(BuildOutput(tag=tag, artifact_dir=target, reused=False))


def _remove(path: Path) -> Result[None, ReleaseError]:
    try:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        return Err(ReleaseError(kind="build", message=f"cannot remove {path}: {e}"))
    return Ok(None)
