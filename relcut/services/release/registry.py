"""Container registry adapter: load image tarballs from a build and push them."""

from __future__ import annotations

import shutil
from pathlib import Path

from relcut.core.config import RegistryConfig
from relcut.core.result import Err, Ok, Result
from relcut.platform.execution import Command, CommandRunner
from relcut.release.errors import ReleaseError

_LOADED_PREFIX = "Loaded image:"


def ensure_docker_available() -> Result[None, ReleaseError]:
    if shutil.which("docker") is None:
        return Err(
            ReleaseError(
                kind="prerequisite",
                message="docker: missing",
                hint="Install Docker to publish release images.",
            )
        )
    return Ok(None)


def loaded_image(output: str) -> str | None:
    """Parse the image reference out of `docker load` output."""
    for line in output.splitlines():
        line = line.strip()
        if line.startswith(_LOADED_PREFIX):
            return line.removeprefix(_LOADED_PREFIX).strip() or None
    return None


def image_name(ref: str) -> str:
    """Repository basename of an image reference: gcr.io/x/api:dev -> api."""
    last = ref.rsplit("/", 1)[-1]
    return last.split("@", 1)[0].split(":", 1)[0]


def publish_images(
    *,
    config: RegistryConfig,
    tag: str,
    artifact_dir: Path,
    runner: CommandRunner,
) -> Result[list[str], ReleaseError]:
    """Push every image tarball of a build as <registry>/<name>:<tag>."""
    pushed: list[str] = []
    for tarball in sorted(artifact_dir.glob(config.image_glob)):
        loaded = runner.run(Command(("docker", "load", "-i", str(tarball)), cwd=artifact_dir))
        if isinstance(loaded, Err):
            return Err(
                ReleaseError(
                    kind="publish",
                    message=f"docker load failed for {tarball.name}",
                    hint=loaded.error.detail(),
                )
            )
        source = loaded_image(loaded.value)
        if source is None:
            return Err(
                ReleaseError(
                    kind="publish",
                    message=f"no image reference in docker load output for {tarball.name}",
                )
            )

        target = f"{config.registry}/{image_name(source)}:{tag}"
        steps = (
            Command(("docker", "tag", source, target), cwd=artifact_dir),
            Command(("docker", "push", target), cwd=artifact_dir, remote=True),
        )
        for step in steps:
            result = runner.run(step)
            if isinstance(result, Err):
                return Err(
                    ReleaseError(
                        kind="publish",
                        message=f"failed to publish {target}",
                        hint=result.error.detail(),
                    )
                )
        pushed.append(target)
    return Ok(pushed)
