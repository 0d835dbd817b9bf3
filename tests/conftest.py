"""
Shared pytest fixtures for trellocards tests
"""
import json
import logging
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

# Add parent directory to path to import trellocards package
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so caplog sees trellocards records in every test"""
    yield
    logger = logging.getLogger("trellocards")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def fixtures_dir():
    """Return path to test fixtures directory"""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def board_lists_fixture(fixtures_dir):
    """Raw API payload: "Today" (2 open cards) and "Backlog" (5 open cards)"""
    with open(fixtures_dir / "board_lists.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def board_lists(board_lists_fixture):
    """Parsed TrelloList objects for the board_lists fixture"""
    from trellocards.models import TrelloList

    return [TrelloList.from_api(item) for item in board_lists_fixture]


@pytest.fixture
def make_response():
    """Factory for mocked requests.Response objects"""

    def _make(status_code=200, json_body=None, text=None, content=None):
        response = MagicMock()
        response.status_code = status_code
        if content is None:
            body = text if text is not None else json.dumps(json_body)
            content = body.encode("utf-8")
        response.content = content
        if status_code >= 400:
            response.raise_for_status.side_effect = requests.HTTPError(response=response)
        else:
            response.raise_for_status.return_value = None
        return response

    return _make
