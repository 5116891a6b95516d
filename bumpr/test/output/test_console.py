"""Tests for bumpr.output.console module."""

from __future__ import annotations

import pytest

from bumpr.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DIM) == "dim"


class TestMockConsole:
    """MockConsole records what services report."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs[0].message == "hello"
        assert console.outputs[0].style == Style.DEFAULT

    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("broken")
        console.warning("careful")
        console.info("fyi")
        assert console.messages == ["OK done", "error: broken", "warning: careful", "info: fyi"]

    def test_has_error_and_warning(self) -> None:
        console = MockConsole()
        assert not console.has_error()
        console.warning("w")
        assert console.has_warning() and not console.has_error()
        console.error("e")
        assert console.has_error()

    def test_find_and_text(self) -> None:
        console = MockConsole()
        console.header("Release acme/widgets")
        console.newline()
        console.print("Tag: v1.2.4")
        assert [o.style for o in console.find("Tag")] == [Style.DEFAULT]
        assert console.text == "Release acme/widgets\n\nTag: v1.2.4"

    def test_clear(self) -> None:
        console = MockConsole()
        console.print("x")
        console.clear()
        assert console.outputs == []


class TestRichConsole:
    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = RichConsole()
        assert console is not None

    def test_errors_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("progress")
        console.error("failed")
        captured = capsys.readouterr()
        assert "progress" in captured.out
        assert "failed" in captured.err
        assert "failed" not in captured.out

    def test_text_is_not_parsed_as_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().print("[bold]Release: v1.0.0[/bold]")
        assert "[bold]Release: v1.0.0[/bold]" in capsys.readouterr().out
