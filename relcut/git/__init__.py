"""Git operations for the release tree.

Usage:
    from relcut.git import Repository

    repo = Repository(tree_root, runner)
    if repo.tag_exists("v1.5.0-alpha.3") == Ok(True):
        print("tagged")
"""

from relcut.git.repository import (
    GitError,
    Repository,
    clone,
    remote_branch_exists,
)

__all__ = [
    "GitError",
    "Repository",
    "clone",
    "remote_branch_exists",
]
