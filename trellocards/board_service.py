"""Board, list and card operations built on the Trello client."""

from __future__ import annotations

import logging
import re
from typing import Any, TypeVar

from trellocards.exceptions import (
    BoardAccessError,
    ResponseFormatError,
    TransportError,
    TrelloAuthenticationError,
    TrelloNotFoundError,
)
from trellocards.models import BoardInfo, Credentials, TrelloList
from trellocards.trello_client import TrelloClient

logger = logging.getLogger(__name__)

BOARD_URL_RE = re.compile(r"https://trello\.com/b/([a-zA-Z0-9]+)(?:/|\b)")

E = TypeVar("E", TransportError, ResponseFormatError)


def parse_board_id(value: str) -> str:
    """Extract the board ID from a Trello board URL

    Supports formats:
    - https://trello.com/b/Bm0nnz1R/board-name
    - https://trello.com/b/Bm0nnz1R

    Anything else (including a bare board ID) is returned verbatim.

    Args:
        value: Board URL or ID as entered by the user

    Returns:
        Board ID
    """
    match = BOARD_URL_RE.search(value)
    if match:
        return match.group(1)
    return value


class BoardService:
    """Read and mutate Trello boards on behalf of the sync controllers.

    Every method performs blocking network I/O through the client and has no
    timeout of its own; the client's transport timeout applies. Failures are
    never swallowed here: they propagate with the board (or card) added to the
    message.
    """

    def __init__(self, client: TrelloClient):
        self.client = client

    @property
    def credentials(self) -> Credentials:
        return self.client.credentials

    def fetch_open_lists(self, board_id: str) -> list[TrelloList]:
        """Get the lists on a board with their open cards populated"""
        board_id = parse_board_id(board_id)
        logger.debug(f"Fetching board lists for board: {board_id}")
        try:
            data = self.client.request("GET", f"boards/{board_id}/lists", {"cards": "open"})
            lists = _parse_lists(data)
        except (TransportError, ResponseFormatError) as e:
            logger.error(f"Failed to fetch lists from board {board_id}: {e}")
            raise _with_context(e, f"Failed to fetch lists from board {board_id}: {e}") from e

        logger.debug(f"Successfully fetched {len(lists)} lists from board {board_id}")
        return lists

    def fetch_all_lists(self, board_id: str) -> list[TrelloList]:
        """Get every list on a board without cards (diagnostics only)"""
        board_id = parse_board_id(board_id)
        logger.debug(f"Fetching all available lists for board: {board_id}")
        try:
            data = self.client.request("GET", f"boards/{board_id}/lists")
            lists = _parse_lists(data)
        except (TransportError, ResponseFormatError) as e:
            message = f"Failed to fetch available lists from board {board_id}: {e}"
            logger.error(message)
            raise _with_context(e, message) from e

        logger.info(
            f"Available lists in board {board_id}: "
            + ", ".join(f'"{lst.name}"' for lst in lists)
        )
        return lists

    def validate_board_access(self, board_id: str) -> BoardInfo:
        """Confirm the credentials can read a board and get its display name.

        Raises:
            BoardAccessError: Board is missing, private, or the credentials are rejected
            TransportError: The API could not be reached or failed (5xx, timeout)
            ResponseFormatError: Board endpoint returned malformed JSON
        """
        board_id = parse_board_id(board_id)
        logger.debug(f"Validating access to board: {board_id}")
        try:
            data = self.client.request("GET", f"boards/{board_id}", {"fields": "name,id"})
        except (TrelloAuthenticationError, TrelloNotFoundError) as e:
            logger.error(f"Cannot access board {board_id}: {e}")
            raise BoardAccessError(
                f"Cannot access board {board_id}: {e}",
                status_code=e.status_code,
                response_text=e.response_text,
            ) from e
        except (TransportError, ResponseFormatError) as e:
            logger.error(f"Failed to validate board {board_id}: {e}")
            raise _with_context(e, f"Failed to validate board {board_id}: {e}") from e

        board = BoardInfo.from_api(data if isinstance(data, dict) else {})
        logger.info(f"Successfully validated board: {board.name} ({board.id})")
        return board

    def close_card(self, card_id: str) -> Any:
        """Archive a card. Closing an already closed card surfaces the API's own error."""
        logger.info(f"Closing card {card_id}")
        return self.client.request("PUT", f"cards/{card_id}/closed", body={"value": True})


def _parse_lists(data: Any) -> list[TrelloList]:
    if not isinstance(data, list):
        raise ResponseFormatError(
            f"Invalid response: expected a list of lists, got {type(data).__name__}"
        )
    return [TrelloList.from_api(item) for item in data if isinstance(item, dict)]


def _with_context(error: E, message: str) -> E:
    """Re-create ``error`` (same class and payload) with a more specific message"""
    if isinstance(error, ResponseFormatError):
        return type(error)(message, body=error.body)
    return type(error)(message, status_code=error.status_code, response_text=error.response_text)
