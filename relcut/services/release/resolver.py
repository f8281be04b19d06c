"""Version resolution.

Given the target branch, the official flag and a build candidate, decide
which versions a session produces:

    branch            new?  official  versions                           primary
    master            no    no        alpha: next alpha                  alpha
    release-X.Y[.Z]   no    no        beta: next beta (unfrozen)         beta
    release-X.Y[.Z]   no    yes       beta: interim bump, official       official
    release-X.Y       yes   no        alpha: vX.Y.0-alpha.0 (on master),
                                      beta: vX.Y.0-beta.0                beta
    release-X.Y.Z     yes   no        beta: vX.Y.Z-beta.0                beta

`official` on master or on a branch that does not exist yet is refused.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from relcut.core.result import Err, Ok, Result
from relcut.release.branch import ReleaseBranch
from relcut.release.errors import ReleaseError
from relcut.release.model import ALPHA, BETA, OFFICIAL, ReleaseVersion, ReleaseVersionSet
from relcut.release.semver import BuildCandidate, SemVer, parse_build_candidate


class ResolverLookup(Protocol):
    """External facts the resolver needs, injected so resolution stays pure."""

    def branch_exists(self, branch: str) -> Result[bool, ReleaseError]: ...

    def find_green_build(self, branch: str) -> Result[str, ReleaseError]: ...


@dataclass(frozen=True, slots=True)
class Resolution:
    versions: ReleaseVersionSet
    parent: ReleaseBranch | None
    candidate: BuildCandidate


def _fail(message: str, hint: str | None = None) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="resolution", message=message, hint=hint))


def resolve(
    *,
    branch: ReleaseBranch,
    official: bool,
    build_override: str | None,
    lookup: ResolverLookup,
) -> Result[Resolution, ReleaseError]:
    if branch.is_master and official:
        return _fail("official releases cannot be cut from master", "Use a release-X.Y branch.")

    exists = lookup.branch_exists(branch.name)
    if isinstance(exists, Err):
        return exists

    parent: ReleaseBranch | None = None
    if not exists.value:
        if branch.is_master:
            return _fail("master does not exist on the remote")
        if official:
            return _fail(
                f"cannot cut an official release while creating {branch}",
                "Create the branch first (without --official).",
            )
        parent = branch.implied_parent()
        if not parent.is_master:
            parent_exists = lookup.branch_exists(parent.name)
            if isinstance(parent_exists, Err):
                return parent_exists
            if not parent_exists.value:
                return _fail(f"parent branch {parent} does not exist for new branch {branch}")

    candidate = _resolve_candidate(
        under_test=parent or branch,
        build_override=build_override,
        lookup=lookup,
    )
    if isinstance(candidate, Err):
        return candidate

    if not branch.is_master:
        matched = _check_candidate_branch(branch, candidate.value)
        if isinstance(matched, Err):
            return matched

    versions = compute_versions(
        branch=branch,
        creating=parent is not None,
        official=official,
        build=candidate.value.version,
    )
    if isinstance(versions, Err):
        return versions

    return Ok(Resolution(versions=versions.value, parent=parent, candidate=candidate.value))


def _resolve_candidate(
    *,
    under_test: ReleaseBranch,
    build_override: str | None,
    lookup: ResolverLookup,
) -> Result[BuildCandidate, ReleaseError]:
    if build_override is not None:
        return parse_build_candidate(build_override, overridden=True)

    found = lookup.find_green_build(under_test.name)
    if isinstance(found, Err):
        return found

    parsed = parse_build_candidate(found.value)
    if isinstance(parsed, Err):
        return _fail(
            f"build-status source returned an unusable build for {under_test}: {found.value!r}",
            parsed.error.hint,
        )
    return parsed


def _check_candidate_branch(
    branch: ReleaseBranch, candidate: BuildCandidate
) -> Result[None, ReleaseError]:
    v = candidate.version
    expected = f"{branch.major}.{branch.minor}"
    actual = f"{v.major}.{v.minor}"
    if branch.patch is not None:
        expected += f".{branch.patch}"
        actual += f".{v.patch}"
    if expected != actual:
        return _fail(
            f"build {candidate.raw} does not belong to {branch} (expected {expected}, got {actual})",
            "Builds are never promoted across release branches.",
        )
    return Ok(None)


def compute_versions(
    *,
    branch: ReleaseBranch,
    creating: bool,
    official: bool,
    build: SemVer,
) -> Result[ReleaseVersionSet, ReleaseError]:
    if branch.is_master:
        if build.pre is None or build.pre.kind != "alpha":
            return _fail(f"master build {build} is not an alpha build")
        alpha = build.with_pre("alpha", build.pre.n + 1)
        return Ok(ReleaseVersionSet((ReleaseVersion(ALPHA, alpha),), primary=ALPHA))

    if creating:
        base = SemVer(branch.major or 0, branch.minor or 0, branch.patch or 0)
        beta = ReleaseVersion(BETA, base.with_pre("beta", 0), frozen=False)
        if branch.is_patch_branch:
            return Ok(ReleaseVersionSet((beta,), primary=BETA))
        alpha = ReleaseVersion(ALPHA, base.with_pre("alpha", 0))
        return Ok(ReleaseVersionSet((alpha, beta), primary=BETA))

    next_beta = _next_beta(build)
    if isinstance(next_beta, Err):
        return next_beta
    beta = ReleaseVersion(BETA, next_beta.value, frozen=False)

    if not official:
        return Ok(ReleaseVersionSet((beta,), primary=BETA))

    final = ReleaseVersion(OFFICIAL, next_beta.value.base(), frozen=True)
    return Ok(ReleaseVersionSet((beta, final), primary=OFFICIAL))


def _next_beta(build: SemVer) -> Result[SemVer, ReleaseError]:
    pre = build.pre
    if pre is None:
        # The build sits past an official release: start the next patch series.
        return Ok(build.next_patch().with_pre("beta", 0))
    if pre.kind == "beta":
        return Ok(build.with_pre("beta", pre.n + 1))
    if pre.kind == "alpha":
        return Ok(build.with_pre("beta", 0))
    return _fail(f"unsupported pre-release on a release branch: {build}")
