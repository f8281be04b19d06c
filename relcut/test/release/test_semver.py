from __future__ import annotations

import pytest

from relcut.core.result import Err, Ok
from relcut.release.semver import PreRelease, SemVer, parse_build_candidate


class TestSemVer:
    def test_to_tag(self) -> None:
        assert SemVer(1, 4, 2).to_tag() == "v1.4.2"
        assert SemVer(1, 5, 0, PreRelease("alpha", 3)).to_tag() == "v1.5.0-alpha.3"

    def test_base_drops_pre_release(self) -> None:
        assert SemVer(1, 4, 2, PreRelease("beta", 1)).base() == SemVer(1, 4, 2)

    def test_with_pre_and_next_patch(self) -> None:
        v = SemVer(1, 4, 2)
        assert v.with_pre("beta", 0).to_tag() == "v1.4.2-beta.0"
        assert v.next_patch() == SemVer(1, 4, 3)


class TestParseBuildCandidate:
    def test_describe_output(self) -> None:
        result = parse_build_candidate("v1.5.0-alpha.2-3-gdeadbee")
        assert isinstance(result, Ok)
        c = result.value
        assert c.version == SemVer(1, 5, 0, PreRelease("alpha", 2))
        assert c.commits == 3
        assert c.sha == "deadbee"
        assert not c.overridden

    def test_exact_tag(self) -> None:
        result = parse_build_candidate("v1.4.2", overridden=True)
        assert isinstance(result, Ok)
        assert result.value.commits == 0
        assert result.value.sha is None
        assert result.value.overridden

    def test_strips_whitespace(self) -> None:
        result = parse_build_candidate("  v1.4.2-beta.0-5-gfeedface\n")
        assert isinstance(result, Ok)
        assert result.value.raw == "v1.4.2-beta.0-5-gfeedface"

    @pytest.mark.parametrize("raw", ["", "latest", "v1.4.2-5", "v1.4.2-5-gXYZ1234", "v1.4.2-5-gabc"])
    def test_invalid(self, raw: str) -> None:
        result = parse_build_candidate(raw)
        assert isinstance(result, Err)
        assert result.error.kind == "validation"
