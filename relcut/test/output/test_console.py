"""Tests for relcut.output.console module."""

from __future__ import annotations

import pytest

from relcut.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestMockConsole:
    def test_records_styles(self) -> None:
        console = MockConsole()
        console.print("$ git fetch --tags origin", Style.DIM)
        console.success("tagged v1.4.2")
        console.warning("no tarball")
        console.header("push")

        assert console.messages == [
            "$ git fetch --tags origin",
            "OK tagged v1.4.2",
            "warning: no tarball",
            "push",
        ]
        assert [o.style for o in console.outputs] == [
            Style.DIM,
            Style.SUCCESS,
            Style.WARNING,
            Style.HEADER,
        ]

    def test_has_error(self) -> None:
        console = MockConsole()
        assert not console.has_error()
        console.error("build of v1.4.2 failed")
        assert console.has_error()
        assert console.find("v1.4.2")

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.newline()


class TestRichConsole:
    def test_brackets_are_not_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("[mock] skip: docker push gcr.io/x/api:v1", Style.DIM)
        out = capsys.readouterr().out
        assert "[mock] skip" in out

    def test_success_prefix(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().success("prerequisites: OK")
        assert "OK prerequisites: OK" in capsys.readouterr().out


def test_style_str() -> None:
    assert str(Style.HEADER) == "header"
