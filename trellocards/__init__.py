"""Trello cards for the desktop panel: board/list sync and glob filtering."""

from __future__ import annotations

from trellocards.board_service import BoardService, parse_board_id

from trellocards.cli import main
from trellocards.config import Settings, SettingsStore, add_target, remove_target, update_target
from trellocards.exceptions import (
    BoardAccessError,
    ConfigurationError,
    NoMatchError,
    ResponseFormatError,
    TransportError,
    TrelloAuthenticationError,
    TrelloCardsError,
    TrelloNotFoundError,
)
from trellocards.glob_matcher import matches
from trellocards.logging_config import setup_logging
from trellocards.manager import RefreshSummary, SyncManager
from trellocards.models import (
    BoardInfo,
    Credentials,
    ListTarget,
    SyncResult,
    SyncState,
    SyncStatus,
    TrelloCard,
    TrelloList,
)
from trellocards.scheduler import RefreshScheduler
from trellocards.sync import ListSyncController, validate_target
from trellocards.trello_client import TrelloClient, redact_credentials

__version__ = "0.1.0"

__all__ = [
    # Core classes
    "TrelloClient",
    "BoardService",
    "ListSyncController",
    "SyncManager",
    "RefreshScheduler",
    "SettingsStore",
    "Settings",
    # Models
    "Credentials",
    "ListTarget",
    "BoardInfo",
    "TrelloList",
    "TrelloCard",
    "SyncResult",
    "SyncState",
    "SyncStatus",
    "RefreshSummary",
    # Functions
    "matches",
    "parse_board_id",
    "redact_credentials",
    "validate_target",
    "add_target",
    "update_target",
    "remove_target",
    "setup_logging",
    # Exceptions
    "TrelloCardsError",
    "ConfigurationError",
    "TransportError",
    "TrelloAuthenticationError",
    "TrelloNotFoundError",
    "BoardAccessError",
    "ResponseFormatError",
    "NoMatchError",
    # CLI
    "main",
]
