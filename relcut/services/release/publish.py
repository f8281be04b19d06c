"""Publishing a sealed session.

Three phases, each gated by a confirmation unless the operator passed
--yes: push git objects, publish per-label artifacts, and create the
hosted release entry. Nothing here is transactional; a failure leaves
whatever was already published in place and the transcript says what
that was.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from relcut.core.config import Config
from relcut.core.result import Err, Ok, Result
from relcut.git.repository import GitError, Repository
from relcut.output.console import ConsoleProtocol, Style
from relcut.platform.execution import Command, CommandRunner
from relcut.release.branch import MASTER
from relcut.release.errors import ReleaseError
from relcut.release.model import OFFICIAL, ReleaseSession
from relcut.services.release import gh, registry, storage
from relcut.services.release.build import BuildOutput
from relcut.services.release.planner import SealedPlan
from relcut.services.release.workspace import Confirm


@dataclass
class PublishReport:
    pushed: list[str] = field(default_factory=list)
    uploads: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    markers: list[str] = field(default_factory=list)
    hosted_url: str | None = None

    def entries(self) -> list[tuple[str, list[str]]]:
        """Non-empty (heading, items) pairs, in publishing order."""
        sections = [
            ("pushed", self.pushed),
            ("uploaded", self.uploads),
            ("image", self.images),
            ("marker", self.markers),
            ("release entry", [self.hosted_url] if self.hosted_url else []),
        ]
        return [(heading, items) for heading, items in sections if items]


def _publish_error(message: str, hint: str | None = None) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="publish", message=message, hint=hint))


def _from_git(e: GitError, what: str) -> Err[ReleaseError]:
    return _publish_error(f"{what} failed", e.message)


def _declined(phase: str) -> Err[ReleaseError]:
    return _publish_error(
        f"{phase} declined by operator",
        "Re-run with --noclean to resume from the prepared tree.",
    )


def push_git_objects(
    *,
    sealed: SealedPlan,
    session: ReleaseSession,
    repo: Repository,
    config: Config,
    runner: CommandRunner,
    console: ConsoleProtocol,
    confirm: Confirm,
    report: PublishReport,
) -> Result[None, ReleaseError]:
    """Push tags, then the target branch, then the parent, then refresh docs on master."""
    tags = [p.release.tag for p in sealed.plan.labels]
    refs = [f"refs/tags/{t}" for t in tags]
    refs.append(sealed.plan.branch.name)
    # The parent only has a local branch when a label was tagged on it.
    refs.extend(sorted({p.checkout_branch for p in sealed.plan.labels if p.checkout == "parent"}))

    if not confirm(f"Push {', '.join(tags)} and branches to {repo.remote}?"):
        return _declined("git push")

    for ref in refs:
        pushed = repo.push(ref)
        if isinstance(pushed, Err):
            return _from_git(pushed.error, f"push of {ref}")
        report.pushed.append(ref)

    if config.docs.refresh_command is None:
        return Ok(None)
    return _refresh_master_docs(session=session, repo=repo, config=config, runner=runner, console=console, report=report)


def _refresh_master_docs(
    *,
    session: ReleaseSession,
    repo: Repository,
    config: Config,
    runner: CommandRunner,
    console: ConsoleProtocol,
    report: PublishReport,
) -> Result[None, ReleaseError]:
    cmd = config.docs.refresh_command or ()
    checked_out = repo.checkout(MASTER)
    if isinstance(checked_out, Err):
        return _from_git(checked_out.error, "checkout of master for doc refresh")

    result = runner.run(Command((*cmd, session.primary.tag), cwd=repo.path, stream=True))
    if isinstance(result, Err):
        return _publish_error("doc refresh on master failed", str(result.error))

    committed = repo.commit_all(f"Update docs for {session.primary.tag}")
    if isinstance(committed, Err):
        return _from_git(committed.error, "committing doc refresh")
    if not committed.value:
        console.print("docs on master already up to date", Style.DIM)
        return Ok(None)

    pushed = repo.push(MASTER)
    if isinstance(pushed, Err):
        return _from_git(pushed.error, "push of master doc refresh")
    report.pushed.append(MASTER)
    return Ok(None)


def publish_artifacts(
    *,
    sealed: SealedPlan,
    session: ReleaseSession,
    config: Config,
    runner: CommandRunner,
    console: ConsoleProtocol,
    confirm: Confirm,
    report: PublishReport,
) -> Result[None, ReleaseError]:
    if not confirm(f"Publish artifacts to {storage.bucket_url(config.storage)} and {config.registry.registry}?"):
        return _declined("artifact publish")

    for planned in sealed.plan.labels:
        tag = planned.release.tag
        build = sealed.build_for(planned.label)
        console.print(f"publishing {planned.label} {tag}", Style.BOLD)

        copied = storage.copy_artifacts(
            config=config.storage, tag=tag, artifact_dir=build.artifact_dir, runner=runner
        )
        if isinstance(copied, Err):
            return copied
        report.uploads.append(copied.value)

        images = registry.publish_images(
            config=config.registry, tag=tag, artifact_dir=build.artifact_dir, runner=runner
        )
        if isinstance(images, Err):
            return images
        report.images.extend(images.value)

        if planned.label == OFFICIAL:
            markers = storage.publish_official_markers(
                config=config.storage,
                version=planned.release.version,
                cwd=session.workspace,
                runner=runner,
            )
            if isinstance(markers, Err):
                return markers
            report.markers.extend(markers.value)

    return Ok(None)


def _release_title(session: ReleaseSession) -> str:
    return f"{session.primary.tag} ({session.primary.label})"


def _is_prerelease(session: ReleaseSession) -> bool:
    return session.primary.version.pre is not None


def publish_hosting_release(
    *,
    sealed: SealedPlan,
    session: ReleaseSession,
    repo: Repository,
    config: Config,
    notes_file: Path,
    runner: CommandRunner,
    console: ConsoleProtocol,
    confirm: Confirm,
    report: PublishReport,
) -> Result[None, ReleaseError]:
    """Create (or update) the hosted release entry for the primary tag."""
    if session.mock:
        console.print("[mock] skip: hosted release entry", Style.DIM)
        return Ok(None)

    tag = session.primary.tag
    slug = config.repo.slug
    cwd = repo.path

    on_remote = repo.remote_tag_exists(tag)
    if isinstance(on_remote, Err):
        return _from_git(on_remote.error, f"looking up {tag} on {repo.remote}")
    if not on_remote.value:
        return _publish_error(
            f"tag {tag} is not on {repo.remote}",
            "Push the tags before creating the release entry.",
        )

    existing = gh.view_release(slug=slug, tag=tag, cwd=cwd, runner=runner)
    if isinstance(existing, Err):
        return existing

    title = _release_title(session)
    prerelease = _is_prerelease(session)
    entry = existing.value

    if entry is not None and entry.draft:
        if not confirm(f"A draft release entry exists for {tag}. Delete it and recreate?"):
            return _declined("draft replacement")
        deleted = gh.delete_release(slug=slug, tag=tag, cwd=cwd, runner=runner)
        if isinstance(deleted, Err):
            return deleted
        gone = gh.view_release(slug=slug, tag=tag, cwd=cwd, runner=runner)
        if isinstance(gone, Err):
            return gone
        if gone.value is not None:
            return _publish_error(f"draft release entry {tag} still exists after deletion")
        entry = None

    if entry is not None:
        if not confirm(f"Release entry {tag} already exists. Update it?"):
            return _declined("release entry update")
        written = gh.edit_release(
            slug=slug, tag=tag, title=title, notes_file=notes_file, prerelease=prerelease, cwd=cwd, runner=runner
        )
    else:
        written = gh.create_release(
            slug=slug, tag=tag, title=title, notes_file=notes_file, prerelease=prerelease, cwd=cwd, runner=runner
        )
    if isinstance(written, Err):
        return written
    report.hosted_url = written.value or (entry.url if entry is not None else None)

    build = sealed.build_for(session.primary.label)
    output = BuildOutput(tag=tag, artifact_dir=build.artifact_dir, reused=False)
    tarballs = output.tarballs(config.build.tarball_glob)
    if not tarballs:
        console.warning(f"no release tarball matching {config.build.tarball_glob} for {tag}")
        return Ok(None)

    uploaded = gh.upload_asset(slug=slug, tag=tag, path=tarballs[0], cwd=cwd, runner=runner)
    if isinstance(uploaded, Err):
        return uploaded
    console.success(f"release entry {tag} published")
    return Ok(None)
