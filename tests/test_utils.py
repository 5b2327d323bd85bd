"""Unit tests for console and logging helpers (solution_forge.utils).

Tests cover:
- configure_logging (handler installation and replacement, level names)
- relative_to
- Rich output helpers (print_header, print_summary_table, print_rows, etc.)
"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from rich.logging import RichHandler

from solution_forge.utils import (
    configure_logging,
    print_error,
    print_header,
    print_rows,
    print_success,
    print_summary_table,
    print_warning,
    relative_to,
)


# ---------------------------------------------------------------------------
# configure_logging
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def _restore_logger(self):
        logger = logging.getLogger("solution_forge")
        handlers, level = list(logger.handlers), logger.level
        yield
        logger.handlers[:] = handlers
        logger.setLevel(level)

    @pytest.mark.unit
    def test_installs_rich_handler(self):
        configure_logging("DEBUG")
        logger = logging.getLogger("solution_forge")
        assert any(isinstance(h, RichHandler) for h in logger.handlers)
        assert logger.level == logging.DEBUG

    @pytest.mark.unit
    def test_repeated_calls_replace_handler(self):
        configure_logging("INFO")
        configure_logging("WARNING")
        logger = logging.getLogger("solution_forge")
        rich_handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert logger.level == logging.WARNING

    @pytest.mark.unit
    def test_numeric_level(self):
        configure_logging(logging.ERROR)
        assert logging.getLogger("solution_forge").level == logging.ERROR

    @pytest.mark.unit
    def test_unknown_level_falls_back_to_info(self):
        configure_logging("chatty")
        assert logging.getLogger("solution_forge").level == logging.INFO


# ---------------------------------------------------------------------------
# relative_to
# ---------------------------------------------------------------------------


class TestRelativeTo:
    @pytest.mark.unit
    def test_inside_root(self, tmp_path: Path):
        assert relative_to(tmp_path / "src" / "a.cs", tmp_path) == "src/a.cs"

    @pytest.mark.unit
    def test_outside_root(self, tmp_path: Path):
        other = Path("/somewhere/else.txt")
        assert relative_to(other, tmp_path) == str(other)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestRichHelpers:
    @pytest.mark.unit
    def test_print_header(self):
        with patch("solution_forge.utils.console") as mock_console:
            print_header("Creating solution Acme")
            assert mock_console.print.call_count == 3

    @pytest.mark.unit
    def test_print_summary_table(self):
        with patch("solution_forge.utils.console") as mock_console:
            print_summary_table({"Location": "/tmp/Acme"}, title="Next steps")
            table = mock_console.print.call_args_list[0].args[0]
            assert table.title == "Next steps"
            assert table.row_count == 1

    @pytest.mark.unit
    def test_print_rows_renders_none_as_dash(self):
        with patch("solution_forge.utils.console") as mock_console:
            print_rows(("Unit", "HTTPS"), [("Web", None)], title="Units")
            table = mock_console.print.call_args_list[0].args[0]
            assert table.row_count == 1
            assert list(table.columns[1].cells) == ["-"]

    @pytest.mark.unit
    def test_print_success(self):
        with patch("solution_forge.utils.console") as mock_console:
            print_success("Done")
            call_str = str(mock_console.print.call_args)
            assert "Done" in call_str
            assert "green" in call_str

    @pytest.mark.unit
    def test_print_error_prefix(self):
        with patch("solution_forge.utils.console") as mock_console:
            print_error("Something broke")
            call_str = str(mock_console.print.call_args)
            assert "Error:" in call_str
            assert "red" in call_str

    @pytest.mark.unit
    def test_print_warning_escapes_markup(self):
        with patch("solution_forge.utils.console") as mock_console:
            print_warning("add .WithReference(orders) to [web]")
            call_str = str(mock_console.print.call_args)
            assert "yellow" in call_str
            assert "\\[web]" in call_str
