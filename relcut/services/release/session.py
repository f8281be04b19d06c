"""Release session driver.

Runs one session start to finish, stopping at the first failure:

    validate -> prerequisites -> workspace -> resolve -> plan
      -> (prepare, build) per label -> seal
      -> push -> artifacts -> hosting -> announce

Every step that completes is recorded; a failure reports the step that
was acting and everything that completed before it. There is no rollback:
the operator resumes from the transcript, usually with --noclean.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from relcut.core.config import Config
from relcut.core.result import Err, Ok, Result
from relcut.git.repository import Repository
from relcut.output.console import ConsoleProtocol, Style
from relcut.platform.execution import CommandRunner, ExecutionMode
from relcut.release.contracts import ReleaseRequest, ReleaseResult
from relcut.release.errors import ReleaseError
from relcut.release.model import ReleaseSession
from relcut.services.release import announce, notes, publish
from relcut.services.release.build import build_version
from relcut.services.release.ci import RemoteLookup
from relcut.services.release.planner import LabelBuild, plan_session, seal
from relcut.services.release.preflight import check_prerequisites, validate_request
from relcut.services.release.prepare import prepare_label
from relcut.services.release.resolver import resolve
from relcut.services.release.storage import release_url
from relcut.services.release.workspace import Confirm, prepare_workspace


@dataclass(frozen=True, slots=True)
class SessionFailure:
    step: str
    error: ReleaseError
    completed: tuple[str, ...]
    # what had already been published when the failure happened
    published: publish.PublishReport | None = None


@dataclass
class _Ledger:
    completed: list[str] = field(default_factory=list)
    report: publish.PublishReport | None = None

    def done(self, step: str) -> None:
        self.completed.append(step)

    def fail(self, step: str, error: ReleaseError) -> Err[SessionFailure]:
        return Err(
            SessionFailure(step=step, error=error, completed=tuple(self.completed), published=self.report)
        )


def _always(_: str) -> bool:
    return True


def run_session(
    *,
    request: ReleaseRequest,
    config: Config,
    console: ConsoleProtocol,
    confirm: Confirm,
    cwd: Path | None = None,
) -> Result[ReleaseResult, SessionFailure]:
    ledger = _Ledger()
    if request.yes:
        confirm = _always

    validated = validate_request(request)
    if isinstance(validated, Err):
        return ledger.fail("validate", validated.error)
    branch = validated.value.branch
    ledger.done("validate")

    mode = ExecutionMode(mock=request.mock)
    runner = CommandRunner(mode=mode, console=console)
    console.header(f"relcut {branch} ({mode.label})")

    here = cwd or Path.cwd()
    prereqs = check_prerequisites(config=config, mock=mode.mock, cwd=here, runner=runner, console=console)
    if isinstance(prereqs, Err):
        return ledger.fail("prerequisites", prereqs.error)
    ledger.done("prerequisites")

    console.header("workspace")
    paths = prepare_workspace(
        config=config,
        branch=branch,
        noclean=request.noclean,
        confirm=confirm,
        runner=runner,
        console=console,
    )
    if isinstance(paths, Err):
        return ledger.fail("workspace", paths.error)
    repo = Repository(paths.value.tree_root, runner, remote=config.repo.remote)
    if paths.value.reused:
        fetched = repo.fetch()
        if isinstance(fetched, Err):
            return ledger.fail(
                "workspace",
                ReleaseError(kind="prerequisite", message="fetch failed", hint=fetched.error.message),
            )
    ledger.done("workspace")

    console.header("resolve")
    resolution = resolve(
        branch=branch,
        official=request.official,
        build_override=request.build_version,
        lookup=RemoteLookup(config=config, repo=repo, runner=runner),
    )
    if isinstance(resolution, Err):
        return ledger.fail("resolve", resolution.error)

    session = ReleaseSession(
        branch=branch,
        parent=resolution.value.parent,
        candidate=resolution.value.candidate,
        versions=resolution.value.versions,
        workspace=paths.value.workspace,
        tree_root=paths.value.tree_root,
        mock=mode.mock,
        official=request.official,
    )
    _print_session(session, console)
    ledger.done("resolve")

    plan = plan_session(
        versions=session.versions,
        branch=session.branch,
        parent=session.parent,
        remote=config.repo.remote,
    )
    ledger.done("plan")

    builds: list[LabelBuild] = []
    for planned in plan.labels:
        console.header(f"{planned.label} {planned.release.tag}")
        prepared = prepare_label(
            planned=planned,
            session=session,
            repo=repo,
            config=config,
            runner=runner,
            console=console,
        )
        if isinstance(prepared, Err):
            return ledger.fail(f"prepare {planned.label}", prepared.error)
        ledger.done(f"prepare {planned.label} ({prepared.value.tag})")

        built = build_version(
            tag=planned.release.tag,
            tree_root=session.tree_root,
            workspace=session.workspace,
            config=config.build,
            noclean=request.noclean,
            runner=runner,
            console=console,
        )
        if isinstance(built, Err):
            return ledger.fail(f"build {planned.label}", built.error)
        builds.append(LabelBuild(label=planned.label, artifact_dir=built.value.artifact_dir))
        ledger.done(f"build {planned.label}")

    sealed = seal(plan, builds)
    if isinstance(sealed, Err):
        return ledger.fail("seal", sealed.error)
    ledger.done("seal")

    report = publish.PublishReport()
    ledger.report = report

    console.header("push")
    pushed = publish.push_git_objects(
        sealed=sealed.value,
        session=session,
        repo=repo,
        config=config,
        runner=runner,
        console=console,
        confirm=confirm,
        report=report,
    )
    if isinstance(pushed, Err):
        return ledger.fail("push", pushed.error)
    ledger.done("push")

    console.header("artifacts")
    published = publish.publish_artifacts(
        sealed=sealed.value,
        session=session,
        config=config,
        runner=runner,
        console=console,
        confirm=confirm,
        report=report,
    )
    if isinstance(published, Err):
        return ledger.fail("artifacts", published.error)
    ledger.done("artifacts")

    release_notes: str | None = None
    console.header("hosting")
    if session.mock:
        console.print("[mock] skip: release notes and hosted release entry", Style.DIM)
    else:
        generated = notes.generate_notes(session=session, repo=repo)
        if isinstance(generated, Err):
            return ledger.fail("hosting", generated.error)
        written = notes.write_notes(session=session, text=generated.value)
        if isinstance(written, Err):
            return ledger.fail("hosting", written.error)
        release_notes = written.value.text

        hosted = publish.publish_hosting_release(
            sealed=sealed.value,
            session=session,
            repo=repo,
            config=config,
            notes_file=written.value.path,
            runner=runner,
            console=console,
            confirm=confirm,
            report=report,
        )
        if isinstance(hosted, Err):
            return ledger.fail("hosting", hosted.error)
    ledger.done("hosting")

    console.header("announce")
    mail = announce.compose(
        session=session,
        config=config.mail,
        artifacts_url=release_url(config.storage, session.primary.tag),
        notes=release_notes,
    )
    sent = announce.send(
        announcement=mail,
        config=config.mail,
        mock=session.mock,
        cwd=session.workspace,
        runner=runner,
    )
    if isinstance(sent, Err):
        return ledger.fail("announce", sent.error)
    ledger.done("announce")

    tags = ", ".join(rv.tag for rv in session.versions)
    summary = f"{session.primary.tag} released from {branch} ({mode.label}): {tags}"
    return Ok(ReleaseResult(success=True, summary=summary, completed=tuple(ledger.completed)))


def _print_session(session: ReleaseSession, console: ConsoleProtocol) -> None:
    console.print(f"build: {session.candidate.raw}", Style.DIM)
    if session.creates_branch:
        console.print(f"creating {session.branch} from {session.parent}")
    for rv in session.versions:
        marker = " (primary)" if rv.label == session.versions.primary else ""
        console.print(f"{rv.label}: {rv.tag}{marker}")
