"""Tests for the shared console and output helpers."""

from unittest.mock import patch

from music_shelf.core.console import build_table
from music_shelf.core.output import log


class TestBuildTable:
    """Tests for build_table."""

    def test_columns_and_rows(self):
        table = build_table(
            ["#", "Title"], [["01", "Alpha"], ["02", "Beta"]], title="Songs",
            justify={"#": "right"},
        )
        assert [column.header for column in table.columns] == ["#", "Title"]
        assert table.columns[0].justify == "right"
        assert table.row_count == 2
        assert table.title == "Songs"


class TestLog:
    """Tests for the log() helper."""

    def test_user_facing_levels_print(self):
        with patch("music_shelf.core.output.safe_print") as mock_print:
            log("Saved", level="info")
            log("Careful", level="warning")
        assert mock_print.call_count == 2
        mock_print.assert_called_with("Careful", style="yellow")

    def test_debug_only_logs(self):
        with patch("music_shelf.core.output.safe_print") as mock_print:
            log("details", level="debug")
        mock_print.assert_not_called()
