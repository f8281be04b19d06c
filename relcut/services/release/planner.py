from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from relcut.core.result import Err, Ok, Result
from relcut.release.branch import ReleaseBranch
from relcut.release.errors import ReleaseError
from relcut.release.model import ALPHA, ReleaseVersion, ReleaseVersionSet, label_rank

# create: branch off the parent's head
# parent: tag on the parent branch itself (alpha of a branch-cutting session)
# branch: tag on the existing target branch
CheckoutMode = Literal["create", "parent", "branch"]


@dataclass(frozen=True, slots=True)
class PlannedLabel:
    release: ReleaseVersion
    checkout: CheckoutMode
    checkout_branch: str
    start_point: str | None
    versionize_docs: bool

    @property
    def label(self) -> str:
        return self.release.label

    @property
    def stamps_source(self) -> bool:
        return self.release.stamps_source


@dataclass(frozen=True, slots=True)
class SessionPlan:
    branch: ReleaseBranch
    parent: ReleaseBranch | None
    labels: tuple[PlannedLabel, ...]


@dataclass(frozen=True, slots=True)
class LabelBuild:
    label: str
    artifact_dir: Path


@dataclass(frozen=True, slots=True)
class SealedPlan:
    """A plan whose every label has been built; the only input publishing accepts."""

    plan: SessionPlan
    builds: tuple[LabelBuild, ...]

    def build_for(self, label: str) -> LabelBuild:
        for b in self.builds:
            if b.label == label:
                return b
        raise KeyError(label)


def plan_session(
    *,
    versions: ReleaseVersionSet,
    branch: ReleaseBranch,
    parent: ReleaseBranch | None,
    remote: str = "origin",
) -> SessionPlan:
    """Order labels: the one creating the new branch first, then declared order."""
    planned: list[PlannedLabel] = []
    for rv in sorted(versions, key=lambda v: label_rank(v.label)):
        if parent is None:
            planned.append(
                PlannedLabel(
                    release=rv,
                    checkout="branch",
                    checkout_branch=branch.name,
                    start_point=None,
                    versionize_docs=False,
                )
            )
        elif rv.label == ALPHA:
            planned.append(
                PlannedLabel(
                    release=rv,
                    checkout="parent",
                    checkout_branch=parent.name,
                    start_point=None,
                    versionize_docs=False,
                )
            )
        else:
            planned.append(
                PlannedLabel(
                    release=rv,
                    checkout="create",
                    checkout_branch=branch.name,
                    start_point=f"{remote}/{parent.name}",
                    versionize_docs=True,
                )
            )

    creators = [p for p in planned if p.checkout == "create"]
    if len(creators) > 1:
        raise ValueError("only one label may create the new branch")
    rest = [p for p in planned if p.checkout != "create"]
    return SessionPlan(branch=branch, parent=parent, labels=(*creators, *rest))


def seal(plan: SessionPlan, builds: list[LabelBuild]) -> Result[SealedPlan, ReleaseError]:
    built = {b.label: b for b in builds}
    missing = [p.label for p in plan.labels if p.label not in built]
    if missing:
        return Err(
            ReleaseError(
                kind="build",
                message=f"not every label was built: missing {', '.join(missing)}",
                hint="Nothing is published until the whole session has built.",
            )
        )
    ordered = tuple(built[p.label] for p in plan.labels)
    return Ok(SealedPlan(plan=plan, builds=ordered))
