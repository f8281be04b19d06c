"""Git repository abstraction for the release tree.

Every git invocation goes through the session's CommandRunner, so the
same call sites serve mock and real sessions: local operations (checkout,
commit, tag) always run, pushes run with `--dry-run` in mock mode.

Usage:
    repo = Repository(tree_root, runner)

    match repo.tag_exists("v1.4.2"):
        case Ok(True):
            print("already tagged")
        case Ok(False):
            repo.tag("v1.4.2", "official release v1.4.2 on branch release-1.4")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from relcut.core.result import Err, Ok, Result
from relcut.platform.execution import Command, CommandRunner
from relcut.platform.process import ProcessError

_GIT_TIMEOUT_SECONDS = 30.0

__all__ = [
    "GitError",
    "Repository",
    "clone",
    "remote_branch_exists",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def _git_error(command: str, e: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=e.stderr.strip() or e.stdout.strip() or fallback,
        returncode=e.returncode,
    )


def clone(*, url: str, dest: Path, runner: CommandRunner) -> Result[None, GitError]:
    """Clone url into dest (dest must not exist)."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    result = runner.run(Command(("git", "clone", url, str(dest)), cwd=dest.parent))
    if isinstance(result, Err):
        return Err(_git_error("clone", result.error, f"failed to clone {url}"))
    return Ok(None)


def remote_branch_exists(
    *, url: str, branch: str, cwd: Path, runner: CommandRunner
) -> Result[bool, GitError]:
    """Check the remote (not a local clone) for refs/heads/<branch>."""
    result = runner.run(
        Command(("git", "ls-remote", "--heads", url, f"refs/heads/{branch}"), cwd=cwd)
    )
    if isinstance(result, Err):
        return Err(_git_error("ls-remote", result.error, f"failed to query {url}"))
    return Ok(bool(result.value.strip()))


class Repository:
    """Release tree operations.

    Attributes:
        path: Path to the repository root
        remote: Name of the remote pushed to
    """

    def __init__(self, path: Path, runner: CommandRunner, *, remote: str = "origin") -> None:
        self.path = path
        self.remote = remote
        self._runner = runner

    def exists(self) -> bool:
        """Check if this is a valid git repository."""
        return (self.path / ".git").exists()

    def tag_exists(self, tag: str) -> Result[bool, GitError]:
        result = self._read(["rev-parse", "-q", "--verify", f"refs/tags/{tag}"])
        match result:
            case Ok(_):
                return Ok(True)
            case Err(e) if e.returncode == 1:
                # rev-parse --verify -q exits 1 with no output for a missing ref
                return Ok(False)
            case Err(e):
                return Err(_git_error("rev-parse", e, f"failed to look up tag {tag}"))

    def remote_tag_exists(self, tag: str) -> Result[bool, GitError]:
        result = self._read(["ls-remote", "--tags", self.remote, f"refs/tags/{tag}"], timeout=None)
        if isinstance(result, Err):
            return Err(_git_error("ls-remote", result.error, f"failed to query {self.remote}"))
        return Ok(bool(result.value.strip()))

    def rev_parse(self, ref: str) -> Result[str, GitError]:
        """Resolve ref to a full commit sha."""
        result = self._read(["rev-parse", f"{ref}^{{commit}}"])
        if isinstance(result, Err):
            return Err(_git_error("rev-parse", result.error, f"unknown ref: {ref}"))
        return Ok(result.value.strip())

    def fetch(self) -> Result[None, GitError]:
        return self._write(["fetch", "--tags", self.remote], "fetch")

    def checkout(self, branch: str) -> Result[None, GitError]:
        return self._write(["checkout", branch], "checkout")

    def checkout_detached(self, ref: str) -> Result[None, GitError]:
        return self._write(["checkout", "--detach", ref], "checkout --detach")

    def checkout_new(self, branch: str, start: str) -> Result[None, GitError]:
        """Create (or reset) branch at start and check it out."""
        return self._write(["checkout", "-B", branch, start], "checkout -B")

    def commit_all(self, message: str) -> Result[bool, GitError]:
        """Stage everything and commit. Ok(False) when there was nothing to commit."""
        added = self._write(["add", "--all"], "add")
        if isinstance(added, Err):
            return added
        clean = self._read(["diff", "--cached", "--quiet"])
        if isinstance(clean, Ok):
            return Ok(False)
        if clean.error.returncode != 1:
            return Err(_git_error("diff", clean.error, "git diff failed"))
        committed = self._write(["commit", "-m", message], "commit")
        if isinstance(committed, Err):
            return committed
        return Ok(True)

    def tag(self, tag: str, message: str) -> Result[None, GitError]:
        return self._write(["tag", "-a", tag, "-m", message], "tag")

    def push(self, refspec: str) -> Result[None, GitError]:
        """Push refspec to the remote (a dry run in mock mode)."""
        result = self._runner.run(
            Command(
                ("git", "push", self.remote, refspec),
                cwd=self.path,
                remote=True,
                dry_run_flag="--dry-run",
            )
        )
        if isinstance(result, Err):
            return Err(_git_error("push", result.error, f"failed to push {refspec}"))
        return Ok(None)

    def local_tags(self) -> Result[set[str], GitError]:
        result = self._read(["tag", "--list"])
        if isinstance(result, Err):
            return Err(_git_error("tag", result.error, "failed to list tags"))
        return Ok({ln.strip() for ln in result.value.splitlines() if ln.strip()})

    def remote_tags(self) -> Result[set[str], GitError]:
        result = self._read(["ls-remote", "--tags", self.remote], timeout=None)
        if isinstance(result, Err):
            return Err(_git_error("ls-remote", result.error, f"failed to query {self.remote}"))
        tags: set[str] = set()
        for line in result.value.splitlines():
            _, _, ref = line.partition("\t")
            if ref.startswith("refs/tags/"):
                tags.add(ref.removeprefix("refs/tags/").removesuffix("^{}"))
        return Ok(tags)

    def describe(self, ref: str, *, exclude: Iterable[str] = ()) -> Result[str, GitError]:
        """`git describe --tags`, ignoring tags named in exclude."""
        result = self._read(["describe", "--tags", *(f"--exclude={t}" for t in sorted(exclude)), ref])
        if isinstance(result, Err):
            return Err(_git_error("describe", result.error, f"cannot describe {ref}"))
        return Ok(result.value.strip())

    def previous_tag(self, tag: str) -> str | None:
        """Nearest tag reachable from tag's parent, None if there is none."""
        result = self._read(["describe", "--tags", "--abbrev=0", f"{tag}^"])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def log_subjects(self, rev_range: str) -> Result[list[str], GitError]:
        result = self._read(["log", "--no-merges", "--format=%s", rev_range])
        if isinstance(result, Err):
            return Err(_git_error("log", result.error, f"git log {rev_range} failed"))
        return Ok([ln.strip() for ln in result.value.splitlines() if ln.strip()])

    def _read(self, args: list[str], *, timeout: float | None = _GIT_TIMEOUT_SECONDS):
        return self._runner.run(Command(("git", *args), cwd=self.path, timeout=timeout))

    def _write(self, args: list[str], name: str) -> Result[None, GitError]:
        result = self._runner.run(Command(("git", *args), cwd=self.path))
        if isinstance(result, Err):
            return Err(_git_error(name, result.error, f"git {name} failed"))
        return Ok(None)
