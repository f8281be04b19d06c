"""Post-run announcement mail."""

from __future__ import annotations

import getpass
import html
import shutil
from dataclasses import dataclass
from email.message import EmailMessage
from pathlib import Path

from relcut.core.config import MailConfig
from relcut.core.result import Err, Ok, Result
from relcut.platform.execution import Command, CommandRunner
from relcut.release.errors import ReleaseError
from relcut.release.model import ReleaseSession

_BRANCH_CREATED = """\
Branch {branch} has been created from {parent}.

{primary_label} {primary} is the first release on {branch}.
Build: {build}

Tags created in this release:
{versions}
"""

_RELEASE_PUBLISHED = """\
{primary_label} {primary} has been released from {branch}.

Build: {build}
Artifacts: {artifacts}

Tags created in this release:
{versions}
"""

_MOCK_NOTES = "(release notes are generated for real releases only)"


@dataclass(frozen=True, slots=True)
class Announcement:
    subject: str
    to: tuple[str, ...]
    cc: tuple[str, ...]
    text: str
    html: str


def ensure_sendmail_available() -> Result[None, ReleaseError]:
    if shutil.which("sendmail") is None:
        return Err(
            ReleaseError(
                kind="prerequisite",
                message="sendmail: missing",
                hint="Install a mail submission agent (sendmail/msmtp-mta).",
            )
        )
    return Ok(None)


def operator_address(config: MailConfig) -> str:
    return config.operator or getpass.getuser()


def compose(
    *,
    session: ReleaseSession,
    config: MailConfig,
    artifacts_url: str,
    notes: str | None,
) -> Announcement:
    primary = session.primary
    versions = "\n".join(f"  {rv.label}: {rv.tag}" for rv in session.versions)
    values = {
        "branch": session.branch.name,
        "parent": session.parent.name if session.parent is not None else "",
        "primary_label": primary.label,
        "primary": primary.tag,
        "build": session.candidate.raw,
        "artifacts": artifacts_url,
        "versions": versions,
    }

    if session.parent is not None:
        subject = f"{session.branch} branch has been created"
        body = _BRANCH_CREATED.format(**values)
    else:
        subject = f"{primary.tag} has been released"
        body = _RELEASE_PUBLISHED.format(**values)

    if session.mock:
        subject = f"[MOCK] {subject}"
        to: tuple[str, ...] = (operator_address(config),)
        cc: tuple[str, ...] = ()
        notes_text = _MOCK_NOTES
    else:
        to = config.to or (operator_address(config),)
        cc = config.cc
        notes_text = notes or ""

    text = f"{body}\n{notes_text}\n".rstrip() + "\n"
    rendered = (
        "<html><body>"
        f"<pre>{html.escape(body)}</pre>"
        f"<pre>{html.escape(notes_text)}</pre>"
        "</body></html>"
    )
    return Announcement(subject=subject, to=to, cc=cc, text=text, html=rendered)


def to_email(announcement: Announcement, *, sender: str) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = announcement.subject
    msg["From"] = sender
    msg["To"] = ", ".join(announcement.to)
    if announcement.cc:
        msg["Cc"] = ", ".join(announcement.cc)
    msg.set_content(announcement.text)
    msg.add_alternative(announcement.html, subtype="html")
    return msg


def send(
    *,
    announcement: Announcement,
    config: MailConfig,
    mock: bool,
    cwd: Path,
    runner: CommandRunner,
) -> Result[None, ReleaseError]:
    """Submit the announcement through sendmail.

    A mock announcement goes to the operator only, so it is sent in mock
    mode too; a real one goes to the distribution list.
    """
    msg = to_email(announcement, sender=config.sender or operator_address(config))
    result = runner.run(
        Command(
            ("sendmail", "-t", "-oi"),
            cwd=cwd,
            remote=not mock,
            input=msg.as_string(),
        )
    )
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="publish",
                message="failed to send announcement",
                hint=result.error.detail(),
            )
        )
    return Ok(None)
