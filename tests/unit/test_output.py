"""Tests for output.py - styled terminal output helpers."""

from __future__ import annotations

from collections.abc import Callable
from io import StringIO

import click
import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from ne_cli.output import detail, error, heading, info, mark, success, warn


class TestOutputFunctions:
    """Tests for output helper functions."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("func", "symbol"),
        [(success, "✓"), (info, "→"), (warn, "⚠"), (error, "✗")],
    )
    def test_prefix_symbol(self, func: Callable[..., None], symbol: str) -> None:
        """Each message kind carries its own prefix symbol."""
        output = StringIO()
        func("test message", file=output)

        assert output.getvalue() == f"{symbol} test message\n"

    @pytest.mark.unit
    def test_heading_has_no_prefix(self) -> None:
        output = StringIO()
        heading("Extracting to: /data", file=output)

        assert output.getvalue() == "Extracting to: /data\n"

    @pytest.mark.unit
    def test_detail_is_indented(self) -> None:
        output = StringIO()
        detail("land", file=output)

        assert output.getvalue() == "  land\n"

    @pytest.mark.unit
    def test_no_newline_when_nl_false(self) -> None:
        output = StringIO()
        info("working", file=output, nl=False)

        assert not output.getvalue().endswith("\n")

    @pytest.mark.unit
    def test_dry_run_prefix(self) -> None:
        """dry_run=True prefixes the message with [DRY RUN]."""
        output = StringIO()
        info("Would create: ne-10m-0-0-1-1", file=output, dry_run=True)

        assert output.getvalue() == "→ [DRY RUN] Would create: ne-10m-0-0-1-1\n"

    @pytest.mark.unit
    def test_warn_defaults_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        warn("careful")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "careful" in captured.err

    @pytest.mark.unit
    def test_error_defaults_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        error("broken")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "broken" in captured.err

    @pytest.mark.unit
    def test_success_defaults_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        success("done")

        captured = capsys.readouterr()
        assert "done" in captured.out
        assert captured.err == ""

    @pytest.mark.unit
    def test_mark(self) -> None:
        assert click.unstyle(mark(True)) == "✓"
        assert click.unstyle(mark(False)) == "✗"


class TestOutputProperties:
    """Property-based tests for output helpers."""

    @pytest.mark.unit
    @given(message=st.text(alphabet=st.characters(blacklist_categories=("Cs", "Cc"))))
    @settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_message_always_included(self, message: str) -> None:
        """Whatever the message, it appears verbatim in the output."""
        output = StringIO()
        success(message, file=output)

        assert message in output.getvalue()
