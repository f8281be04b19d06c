from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relcut.core.result import Err, Ok, Result
from relcut.git.repository import Repository
from relcut.release.errors import ReleaseError
from relcut.release.model import ReleaseSession


@dataclass(frozen=True, slots=True)
class WrittenNotes:
    text: str
    path: Path


def render_notes(
    *,
    session: ReleaseSession,
    previous_tag: str | None,
    subjects: list[str],
) -> str:
    primary = session.primary
    lines: list[str] = []
    lines.append(f"# {primary.tag}")
    lines.append("")
    lines.append(f"Branch: {session.branch}")
    lines.append(f"Build: {session.candidate.raw}")
    lines.append("")

    lines.append("## Versions")
    for rv in session.versions:
        marker = " (primary)" if rv.label == primary.label else ""
        lines.append(f"- {rv.label}: {rv.tag}{marker}")

    lines.append("")
    if previous_tag is None:
        lines.append("## Changes")
    else:
        lines.append(f"## Changes since {previous_tag}")
    if subjects:
        for s in subjects:
            lines.append(f"- {s}")
    else:
        lines.append("- No changes.")

    return "\n".join(lines).rstrip() + "\n"


def generate_notes(
    *, session: ReleaseSession, repo: Repository
) -> Result[str, ReleaseError]:
    """Notes for the primary version: commit subjects since the previous tag."""
    tag = session.primary.tag
    previous = repo.previous_tag(tag)
    rev_range = f"{previous}..{tag}" if previous is not None else tag
    subjects = repo.log_subjects(rev_range)
    if isinstance(subjects, Err):
        return Err(
            ReleaseError(
                kind="publish",
                message=f"failed to collect changes for {tag}",
                hint=subjects.error.message,
            )
        )
    return Ok(render_notes(session=session, previous_tag=previous, subjects=subjects.value))


def write_notes(*, session: ReleaseSession, text: str) -> Result[WrittenNotes, ReleaseError]:
    path = session.workspace / f"release-notes-{session.primary.tag}.md"
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        return Err(
            ReleaseError(kind="publish", message=f"failed to write release notes: {e}", hint=str(path))
        )
    return Ok(WrittenNotes(text=text, path=path))
