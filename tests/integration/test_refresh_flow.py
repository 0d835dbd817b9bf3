"""
Integration tests for the full settings → Trello API → indicator flow

Uses the `responses` library to avoid real API calls.
"""

import sys
from pathlib import Path

import pytest
import responses

# Add parent directory to path to import trellocards module
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import json
import logging

from trellocards import ListTarget, SettingsStore, SyncManager, SyncState, add_target
from trellocards.display import format_indicator_label, format_status_lines

API = "https://api.trello.com/1"
API_KEY = "0123456789abcdef0123456789abcdef"
TOKEN = "ATTAfeedfacecafebeef0123456789"


@pytest.fixture
def store():
    store = SettingsStore({"api-key": API_KEY, "token": TOKEN})
    add_target(store, ListTarget("board123", "*Today*", "📅"))
    return store


class TestRefreshFlow:
    """Refresh targets against a mocked Trello API"""

    @responses.activate
    def test_refresh_shows_matching_cards(self, store, board_lists_fixture):
        responses.add(responses.GET, f"{API}/boards/board123/lists", json=board_lists_fixture)
        responses.add(
            responses.GET, f"{API}/boards/board123", json={"id": "board123", "name": "Personal"}
        )
        manager = SyncManager(store)

        manager.load_board_names()
        summary = manager.refresh_all()

        assert summary.message == "1 lists refreshed"
        controller = manager.controllers[0]
        assert controller.title == "Personal - *Today*"
        assert format_indicator_label(controller.target, manager.settings, 2) == "📅 *Today* (2)"
        assert format_status_lines(controller.status, controller.pattern)[0] == "Today:"

        list_calls = [c for c in responses.calls if "/lists" in c.request.url]
        assert len(list_calls) == 1
        assert "cards=open" in list_calls[0].request.url

    @responses.activate
    def test_no_match_fetches_diagnostics(self, store, board_lists_fixture):
        store.update(
            {
                "target-lists-config": json.dumps(
                    [{"listName": "Someday", "boardId": "board123", "emoji": "📅"}]
                )
            }
        )
        responses.add(responses.GET, f"{API}/boards/board123/lists", json=board_lists_fixture)
        manager = SyncManager(store)

        summary = manager.refresh_all()

        assert summary.message == "All 1 lists failed"
        lines = format_status_lines(manager.controllers[0].status, "Someday")
        assert "  • Backlog" in lines
        # One fetch with open cards, one diagnostic fetch of every list
        urls = [c.request.url for c in responses.calls]
        assert len(urls) == 2
        assert "cards=open" in urls[0]
        assert "cards=open" not in urls[1]

    @responses.activate
    def test_missing_board(self, store, caplog):
        responses.add(
            responses.GET,
            f"{API}/boards/board123/lists",
            body="The requested resource was not found.",
            status=404,
        )
        manager = SyncManager(store)

        with caplog.at_level(logging.DEBUG, logger="trellocards"):
            summary = manager.refresh_all()

        status = summary.statuses[0]
        assert status.state is SyncState.ERROR
        assert status.error.status_code == 404
        assert str(status.error) == (
            "Failed to fetch lists from board board123: "
            "HTTP 404: The requested resource was not found."
        )
        assert API_KEY not in caplog.text
        assert TOKEN not in caplog.text

    @responses.activate
    def test_recovers_after_server_error(self, store, board_lists_fixture):
        responses.add(responses.GET, f"{API}/boards/board123/lists", status=500, body="")
        responses.add(responses.GET, f"{API}/boards/board123/lists", json=board_lists_fixture)
        manager = SyncManager(store)

        first = manager.refresh_all()
        second = manager.refresh_all()

        assert first.message == "All 1 lists failed"
        assert second.message == "1 lists refreshed"
        assert manager.controllers[0].result.card_count == 2

    @responses.activate
    def test_close_card_twice(self, store):
        responses.add(
            responses.PUT, f"{API}/cards/card-report/closed", json={"id": "card-report", "closed": True}
        )
        responses.add(
            responses.PUT,
            f"{API}/cards/card-report/closed",
            json={"message": "invalid value for closed"},
            status=400,
        )
        controller = SyncManager(store).controllers[0]

        assert controller.close_card("card-report") is True
        assert controller.close_card("card-report") is False
        assert json.loads(responses.calls[0].request.body) == {"value": True}
