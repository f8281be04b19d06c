from __future__ import annotations

import pytest

from relcut.core.result import Err, Ok
from relcut.release.branch import ReleaseBranch, parse_branch


def test_master() -> None:
    result = parse_branch("master")
    assert result == Ok(ReleaseBranch("master"))
    assert result.value.is_master


def test_minor_branch() -> None:
    result = parse_branch("release-1.6")
    assert isinstance(result, Ok)
    b = result.value
    assert (b.major, b.minor, b.patch) == (1, 6, None)
    assert not b.is_patch_branch
    assert b.implied_parent() == ReleaseBranch("master")


def test_patch_branch() -> None:
    result = parse_branch("release-1.4.3")
    assert isinstance(result, Ok)
    b = result.value
    assert b.is_patch_branch
    assert b.implied_parent() == ReleaseBranch("release-1.4", 1, 4)
    assert str(b) == "release-1.4.3"


def test_master_has_no_parent() -> None:
    with pytest.raises(ValueError):
        ReleaseBranch("master").implied_parent()


@pytest.mark.parametrize("name", ["main", "release-1", "release-1.x", "release-01.2", "release-1.2.3.4", "feature/x"])
def test_invalid(name: str) -> None:
    result = parse_branch(name)
    assert isinstance(result, Err)
    assert result.error.kind == "validation"
    assert result.error.hint is not None
