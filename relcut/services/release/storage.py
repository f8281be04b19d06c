"""Object storage (gsutil) adapter.

Release artifacts land under `gs://<bucket>/<prefix>/<tag>/`; official
releases additionally update the `stable*.txt` markers clients poll.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from relcut.core.config import StorageConfig
from relcut.core.result import Err, Ok, Result
from relcut.platform.execution import Command, CommandRunner
from relcut.release.errors import ReleaseError
from relcut.release.semver import SemVer


def bucket_url(config: StorageConfig) -> str:
    return f"gs://{config.bucket}"


def release_url(config: StorageConfig, tag: str) -> str:
    return f"{bucket_url(config)}/{config.prefix}/{tag}"


def ensure_bucket_access(
    *, config: StorageConfig, cwd: Path, runner: CommandRunner
) -> Result[None, ReleaseError]:
    if shutil.which("gsutil") is None:
        return Err(
            ReleaseError(
                kind="prerequisite",
                message="gsutil: missing",
                hint="Install the Google Cloud SDK.",
            )
        )
    result = runner.run(Command(("gsutil", "ls", "-b", bucket_url(config)), cwd=cwd))
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="prerequisite",
                message=f"no access to {bucket_url(config)}",
                hint=result.error.stderr.strip() or "Run: gcloud auth login",
            )
        )
    return Ok(None)


def copy_artifacts(
    *, config: StorageConfig, tag: str, artifact_dir: Path, runner: CommandRunner
) -> Result[str, ReleaseError]:
    dest = release_url(config, tag)
    result = runner.run(
        Command(
            ("gsutil", "-m", "cp", "-r", f"{artifact_dir}/*", f"{dest}/"),
            cwd=artifact_dir,
            remote=True,
        )
    )
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="publish",
                message=f"failed to upload {tag} artifacts to {dest}",
                hint=result.error.detail(),
            )
        )
    return Ok(dest)


def official_markers(config: StorageConfig, version: SemVer) -> tuple[str, ...]:
    base = f"{bucket_url(config)}/{config.prefix}"
    return (
        f"{base}/stable.txt",
        f"{base}/stable-{version.major}.{version.minor}.txt",
    )


def publish_official_markers(
    *, config: StorageConfig, version: SemVer, cwd: Path, runner: CommandRunner
) -> Result[tuple[str, ...], ReleaseError]:
    markers = official_markers(config, version)
    for url in markers:
        result = runner.run(
            Command(
                ("gsutil", "-h", "Content-Type:text/plain", "cp", "-", url),
                cwd=cwd,
                remote=True,
                input=f"{version.to_tag()}\n",
            )
        )
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="publish",
                    message=f"failed to write official marker {url}",
                    hint=result.error.detail(),
                )
            )
    return Ok(markers)
