"""Data model for boards, lists, cards and configured list targets."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_EMOJI = "📋"


@dataclass(frozen=True)
class Credentials:
    """Trello API key and token.

    Both values are opaque and never validated for format.
    """

    api_key: str = field(default="", repr=False)
    token: str = field(default="", repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key) and bool(self.token)


@dataclass(frozen=True)
class ListTarget:
    """A configured (board, list name pattern) pair shown as one indicator.

    Serialized inside the ``target-lists-config`` setting using the keys
    ``listName``, ``boardId`` and ``emoji``.
    """

    board_id: str
    list_name_pattern: str
    emoji: str = DEFAULT_EMOJI

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ListTarget:
        return cls(
            board_id=str(data.get("boardId") or ""),
            list_name_pattern=str(data.get("listName") or ""),
            emoji=str(data.get("emoji") or DEFAULT_EMOJI),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "listName": self.list_name_pattern,
            "boardId": self.board_id,
            "emoji": self.emoji,
        }

    def same_target(self, other: ListTarget) -> bool:
        """True when both targets point at the same pattern on the same board"""
        return (
            self.list_name_pattern == other.list_name_pattern and self.board_id == other.board_id
        )


@dataclass(frozen=True)
class BoardInfo:
    id: str
    name: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> BoardInfo:
        return cls(id=data.get("id") or "", name=data.get("name") or "")


@dataclass(frozen=True)
class TrelloLabel:
    color: str | None = None
    name: str = ""
    id: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> TrelloLabel:
        return cls(color=data.get("color"), name=data.get("name") or "", id=data.get("id") or "")


@dataclass(frozen=True)
class TrelloCard:
    id: str
    name: str
    url: str = ""
    labels: tuple[TrelloLabel, ...] = ()

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> TrelloCard:
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            url=data.get("url") or data.get("shortUrl") or "",
            labels=tuple(TrelloLabel.from_api(label) for label in data.get("labels") or []),
        )


@dataclass(frozen=True)
class TrelloList:
    """A list on a board. ``cards`` is empty when the lists were fetched without cards."""

    id: str
    name: str
    cards: tuple[TrelloCard, ...] = ()

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> TrelloList:
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            cards=tuple(TrelloCard.from_api(card) for card in data.get("cards") or []),
        )


@dataclass(frozen=True)
class SyncResult:
    """Lists matched by one refresh of a target, ready for rendering."""

    matched_lists: tuple[TrelloList, ...] = ()
    card_count: int = 0
    target_found: bool = False

    @classmethod
    def from_lists(cls, matched_lists: list[TrelloList]) -> SyncResult:
        return cls(
            matched_lists=tuple(matched_lists),
            card_count=sum(len(lst.cards) for lst in matched_lists),
            target_found=bool(matched_lists),
        )


class SyncState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class SyncStatus:
    """Snapshot of a controller after a state change.

    Exactly one of ``result`` (READY) or ``error`` (ERROR) is set once a
    refresh has completed; both are None while IDLE or LOADING.
    """

    state: SyncState = SyncState.IDLE
    result: SyncResult | None = None
    error: Exception | None = field(default=None, compare=False)

    @property
    def message(self) -> str:
        """Short human-readable description for the rendering layer"""
        if self.state is SyncState.READY and self.result is not None:
            count = self.result.card_count
            return f"{count} card{'s' if count != 1 else ''}"
        if self.state is SyncState.ERROR and self.error is not None:
            return str(self.error)
        if self.state is SyncState.LOADING:
            return "Loading cards..."
        return "Idle"
