"""Per-target list synchronization and filtering."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from trellocards.board_service import BoardService, parse_board_id
from trellocards.exceptions import (
    ConfigurationError,
    NoMatchError,
    TransportError,
    TrelloCardsError,
)
from trellocards.glob_matcher import filter_by_name
from trellocards.models import BoardInfo, ListTarget, SyncResult, SyncState, SyncStatus, TrelloList

logger = logging.getLogger(__name__)

Listener = Callable[[SyncStatus], None]


class ListSyncController:
    """Keep one configured list target in sync with its Trello board.

    State machine: IDLE -> LOADING -> READY | ERROR, re-entering LOADING on
    every refresh. A failed refresh discards the previous result; the last
    good cards are not kept around for display.

    Overlapping refreshes are fenced by a sequence number: when a response
    arrives after a newer refresh has started, it is returned to its caller
    but never applied to the controller's state.

    Example:
        >>> controller = ListSyncController(ListTarget("Bm0nnz1R", "*Today*"), service)
        >>> controller.subscribe(lambda status: print(status.message))
        >>> status = controller.refresh()
        >>> status.result.card_count
        2
    """

    def __init__(self, target: ListTarget, board_service: BoardService):
        self.target = target
        self.board_service = board_service
        self.board_name: str | None = None

        self._status = SyncStatus()
        self._sequence = 0
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []

    @property
    def pattern(self) -> str:
        return self.target.list_name_pattern

    @property
    def status(self) -> SyncStatus:
        with self._lock:
            return self._status

    @property
    def state(self) -> SyncState:
        return self.status.state

    @property
    def result(self) -> SyncResult | None:
        return self.status.result

    @property
    def title(self) -> str:
        """Menu header: "<board name> - <pattern>", or just the pattern"""
        if self.board_name:
            return f"{self.board_name} - {self.pattern}"
        return self.pattern

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, status: SyncStatus) -> None:
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                logger.exception(f'Listener failed for list "{self.pattern}"')

    def resolve_board_id(self) -> str:
        """Return the board ID to query, checking the configuration first.

        Raises:
            ConfigurationError: Credentials or board ID are missing
        """
        if not self.board_service.credentials.is_complete:
            raise ConfigurationError("Missing API credentials")
        board_id = self.target.board_id.strip()
        if not board_id:
            raise ConfigurationError(f"Missing board ID for list: {self.pattern}")
        return parse_board_id(board_id)

    def _begin(self, status: SyncStatus) -> int:
        with self._lock:
            self._sequence += 1
            self._status = status
            sequence = self._sequence
        self._notify(status)
        return sequence

    def _apply(self, sequence: int, status: SyncStatus) -> bool:
        with self._lock:
            if sequence != self._sequence:
                logger.debug(
                    f'Discarding stale response for list "{self.pattern}" '
                    f"(request {sequence}, latest {self._sequence})"
                )
                return False
            self._status = status
        self._notify(status)
        return True

    def refresh(self) -> SyncStatus:
        """Fetch the board's open lists and filter them by the target pattern.

        Never raises for configuration, transport or response errors; they are
        logged and returned as an ERROR status.

        Returns:
            The status computed by this refresh (READY or ERROR)
        """
        try:
            board_id = self.resolve_board_id()
        except ConfigurationError as e:
            logger.error(f'Configuration error for list "{self.pattern}": {e}')
            status = SyncStatus(SyncState.ERROR, error=e)
            self._begin(status)
            return status

        sequence = self._begin(SyncStatus(SyncState.LOADING))
        logger.info(f'Refreshing cards for list "{self.pattern}" on board {board_id}')

        needs_diagnostics = False
        try:
            lists = self.board_service.fetch_open_lists(board_id)
        except TrelloCardsError as e:
            logger.error(f'Failed to refresh cards for list "{self.pattern}": {e}')
            status = SyncStatus(SyncState.ERROR, error=e)
            needs_diagnostics = isinstance(e, TransportError) and (
                e.status_code == 404 or "invalid" in str(e).lower()
            )
        else:
            status = self._evaluate(board_id, lists)
            needs_diagnostics = status.state is SyncState.ERROR

        self._apply(sequence, status)

        if needs_diagnostics:
            self._log_available_lists(board_id)
        return status

    def _evaluate(self, board_id: str, lists: list[TrelloList]) -> SyncStatus:
        matched = filter_by_name(lists, self.pattern)
        for lst in matched:
            logger.debug(
                f'Found matching list "{lst.name}" (pattern: "{self.pattern}") '
                f"with {len(lst.cards)} cards"
            )

        if not matched:
            available = [lst.name for lst in lists]
            logger.error(f'No lists match pattern "{self.pattern}" on board {board_id}')
            logger.info(
                f"Available lists on board {board_id}: "
                + ", ".join(f'"{name}"' for name in available)
            )
            return SyncStatus(SyncState.ERROR, error=NoMatchError(self.pattern, available))

        return SyncStatus(SyncState.READY, result=SyncResult.from_lists(matched))

    def _log_available_lists(self, board_id: str) -> None:
        """Best-effort diagnostic fetch; its failure is only logged"""
        logger.info("Attempting to fetch available lists for debugging...")
        try:
            self.board_service.fetch_all_lists(board_id)
        except TrelloCardsError as e:
            logger.warning(f"Could not fetch available lists for debugging: {e}")

    def close_card(self, card_id: str) -> bool:
        """Archive a card, logging (not raising) any failure.

        Returns:
            True if the API accepted the request, False otherwise
        """
        if not self.board_service.credentials.is_complete:
            logger.error(f"Cannot close card {card_id}: missing API credentials")
            return False
        try:
            self.board_service.close_card(card_id)
        except TrelloCardsError as e:
            logger.error(f"Failed to close card {card_id}: {e}")
            return False
        return True

    def load_board_name(self) -> str | None:
        """Fetch the board's display name for the menu header; failures are logged"""
        try:
            board = self.board_service.validate_board_access(self.resolve_board_id())
        except TrelloCardsError as e:
            logger.warning(f"Failed to fetch board name for list \"{self.pattern}\": {e}")
            return None
        self.board_name = board.name
        return board.name


@dataclass(frozen=True)
class TargetValidation:
    """Outcome of checking a pattern against a board before saving a target."""

    pattern: str
    board: BoardInfo
    matched_lists: tuple[str, ...]
    available_lists: tuple[str, ...]

    @property
    def ok(self) -> bool:
        return bool(self.matched_lists)

    @property
    def message(self) -> str:
        if self.ok:
            matched = ", ".join(f'"{name}"' for name in self.matched_lists)
            return (
                f'✅ Pattern "{self.pattern}" matches {len(self.matched_lists)} list(s) '
                f'on board "{self.board.name}"\nMatched: {matched}'
            )
        available = ", ".join(f'"{name}"' for name in self.available_lists)
        return (
            f'❌ Pattern "{self.pattern}" matches no lists on board "{self.board.name}"\n'
            f"Available lists: {available}\n"
            "Try patterns like: *Today*, 📅*, *Progress*"
        )


def validate_target(board_service: BoardService, pattern: str, board_id: str) -> TargetValidation:
    """Check board access and preview which lists a new pattern would match.

    Raises:
        ConfigurationError: Pattern, board ID or credentials are missing
        BoardAccessError: The board cannot be read
        TransportError: Fetching the lists failed
    """
    pattern = pattern.strip()
    board_id = board_id.strip()
    if not pattern or not board_id:
        raise ConfigurationError("Please enter both list name and board ID")
    if not board_service.credentials.is_complete:
        raise ConfigurationError("Please set API key and token first")

    board_id = parse_board_id(board_id)
    board = board_service.validate_board_access(board_id)
    lists = board_service.fetch_all_lists(board_id)
    matched = filter_by_name(lists, pattern)
    return TargetValidation(
        pattern=pattern,
        board=board,
        matched_lists=tuple(lst.name for lst in matched),
        available_lists=tuple(lst.name for lst in lists),
    )
