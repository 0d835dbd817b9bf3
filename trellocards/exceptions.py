"""Custom exception classes for trellocards.

This module defines the exception hierarchy shared by the Trello client,
the board service and the list sync controllers.
"""

from __future__ import annotations


class TrelloCardsError(Exception):
    """Base exception for all trellocards errors"""

    pass


class ConfigurationError(TrelloCardsError):
    """Raised when credentials or a board ID are missing or a target is invalid.

    Detected before any network call is attempted and never retried.
    """

    pass


class TransportError(TrelloCardsError):
    """Raised for non-2xx responses and connection failures.

    Attributes:
        status_code: HTTP status code, or None when the server was never reached
        response_text: Raw response body (credentials already redacted)
    """

    def __init__(
        self, message: str, status_code: int | None = None, response_text: str | None = None
    ):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(message)


class TrelloAuthenticationError(TransportError):
    """Raised when API credentials are invalid or lack access (401/403)"""

    pass


class TrelloNotFoundError(TransportError):
    """Raised when a board, list or card is not found (404)"""

    pass


class BoardAccessError(TransportError):
    """Raised when a board cannot be read with the configured credentials.

    Distinct from a generic transport failure so the settings layer can tell
    the user that the board ID is wrong or private rather than that the network
    is down.
    """

    pass


class ResponseFormatError(TrelloCardsError):
    """Raised when a 2xx response body is not valid JSON"""

    def __init__(self, message: str, body: str | None = None):
        self.body = body
        super().__init__(message)


class NoMatchError(TrelloCardsError):
    """Raised (softly) when no list on the board matches a target pattern.

    Not a failure of the network layer. Carries the names of every list on
    the board so they can be shown as diagnostics.

    Example:
        >>> err = NoMatchError("Someday", ["Today", "Backlog"])
        >>> err.available_lists
        ['Today', 'Backlog']
    """

    def __init__(self, pattern: str, available_lists: list[str]):
        self.pattern = pattern
        self.available_lists = list(available_lists)
        super().__init__(f'No lists match pattern "{pattern}"')
