"""
Unit tests for indicator labels and menu text
"""

import sys
from pathlib import Path

# Add parent directory to path to import trellocards module
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from trellocards import (
    ConfigurationError,
    ListTarget,
    NoMatchError,
    Settings,
    SyncResult,
    SyncState,
    SyncStatus,
    TransportError,
)
from trellocards.display import format_indicator_label, format_status_lines, summarize_refresh


class TestIndicatorLabel:
    """Test format_indicator_label()"""

    def test_all_parts(self):
        target = ListTarget("b", "Today", "📅")
        assert format_indicator_label(target, Settings(), 3) == "📅 Today (3)"

    def test_long_name_is_truncated(self):
        target = ListTarget("b", "*Progress Report*", "📈")
        assert format_indicator_label(target, Settings(), 0) == "📈 *Progres… (0)"

    def test_eight_character_name_is_kept(self):
        target = ListTarget("b", "Tomorrow", "📅")
        assert format_indicator_label(target, Settings()) == "📅 Tomorrow"

    def test_count_hidden_until_loaded(self):
        assert format_indicator_label(ListTarget("b", "Today", "📅"), Settings()) == "📅 Today"

    def test_count_disabled(self):
        settings = Settings(show_card_count=False)
        assert format_indicator_label(ListTarget("b", "Today", "📅"), settings, 4) == "📅 Today"

    def test_emoji_disabled(self):
        settings = Settings(show_emojis=False)
        assert format_indicator_label(ListTarget("b", "Today", "📅"), settings, 1) == "Today (1)"

    def test_names_disabled(self):
        settings = Settings(show_list_names=False)
        assert format_indicator_label(ListTarget("b", "Today", "📅"), settings, 2) == "📅 (2)"

    def test_emoji_and_names_disabled_falls_back_to_emoji(self):
        settings = Settings(show_emojis=False, show_list_names=False)
        assert format_indicator_label(ListTarget("b", "Today", "📅"), settings, 2) == "📅"

    def test_missing_emoji_uses_default(self):
        assert format_indicator_label(ListTarget("b", "Today", ""), Settings()) == "📋 Today"


class TestStatusLines:
    """Test format_status_lines()"""

    def test_loading(self):
        assert format_status_lines(SyncStatus(SyncState.LOADING), "Today") == ["Loading cards..."]

    def test_ready_lists_cards_under_each_list(self, board_lists):
        status = SyncStatus(SyncState.READY, result=SyncResult.from_lists(board_lists[:1]))

        lines = format_status_lines(status, "Today")

        assert lines == ["Today:", "  Write weekly report", "  Call dentist"]

    def test_no_match_shows_examples_and_available_lists(self):
        error = NoMatchError("Someday", ["Today", "Backlog"])
        status = SyncStatus(SyncState.ERROR, error=error)

        lines = format_status_lines(status, "Someday")

        assert lines == [
            'No lists match pattern "Someday"',
            "Pattern examples: *Today*, 📅*, *Progress*",
            "Available lists:",
            "  • Today",
            "  • Backlog",
        ]

    def test_no_match_on_empty_board(self):
        status = SyncStatus(SyncState.ERROR, error=NoMatchError("*", []))
        assert format_status_lines(status, "*")[-1] == "  (no lists found on board)"

    def test_configuration_error(self):
        status = SyncStatus(SyncState.ERROR, error=ConfigurationError("Missing API credentials"))
        assert format_status_lines(status, "Today") == ["Config Error: Missing API credentials"]

    def test_transport_error(self):
        status = SyncStatus(SyncState.ERROR, error=TransportError("HTTP 500", status_code=500))
        assert format_status_lines(status, "Today") == ["Error: HTTP 500"]

    def test_idle(self):
        assert format_status_lines(SyncStatus(), "Today") == []


class TestSummarizeRefresh:
    """Test summarize_refresh()"""

    @pytest.mark.parametrize(
        "refreshed,failed,expected",
        [
            (0, 0, "No lists configured"),
            (3, 0, "3 lists refreshed"),
            (0, 2, "All 2 lists failed"),
            (2, 1, "2 refreshed, 1 failed"),
        ],
    )
    def test_messages(self, refreshed, failed, expected):
        assert summarize_refresh(refreshed, failed) == expected
