"""Settings store and typed configuration for trellocards.

The settings store is a flat key-value mapping (mirroring the desktop
extension's schema keys) with change notifications. ``Settings`` is the typed
view of it, rebuilt from scratch on every change notification.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from trellocards.exceptions import ConfigurationError
from trellocards.models import DEFAULT_EMOJI, Credentials, ListTarget

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 5

DEFAULTS: dict[str, Any] = {
    "api-key": "",
    "token": "",
    "refresh-interval": DEFAULT_REFRESH_INTERVAL,
    "show-card-count": True,
    "show-list-names": True,
    "show-emojis": True,
    "target-lists-config": "[]",
    "board-id": "",
    "panel-position": "right",
}

ChangeCallback = Callable[["SettingsStore", list[str]], None]


class SettingsStore:
    """In-memory key-value settings store with change notifications.

    Unknown keys are allowed; missing keys fall back to ``DEFAULTS``.
    Callbacks registered with ``connect()`` receive the store and the list of
    keys that changed.

    Example:
        >>> store = SettingsStore({"api-key": "abc"})
        >>> handler_id = store.connect(lambda store, keys: print(keys))
        >>> store.set("token", "def")
        ['token']
    """

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._values: dict[str, Any] = dict(values or {})
        self._callbacks: dict[int, ChangeCallback] = {}
        self._next_handler_id = 1

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._values:
            return self._values[key]
        if default is not None:
            return default
        return DEFAULTS.get(key)

    def set(self, key: str, value: Any) -> None:
        self.update({key: value})

    def update(self, values: Mapping[str, Any]) -> None:
        """Set several keys at once and emit a single change notification"""
        changed = [key for key, value in values.items() if self._values.get(key) != value]
        self._values.update(values)
        if changed:
            self._emit(changed)

    def as_dict(self) -> dict[str, Any]:
        merged = dict(DEFAULTS)
        merged.update(self._values)
        return merged

    def connect(self, callback: ChangeCallback) -> int:
        handler_id = self._next_handler_id
        self._next_handler_id += 1
        self._callbacks[handler_id] = callback
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        self._callbacks.pop(handler_id, None)

    def _emit(self, changed: list[str]) -> None:
        for callback in list(self._callbacks.values()):
            try:
                callback(self, changed)
            except Exception:
                logger.exception(f"Settings change handler failed for keys {changed}")

    @classmethod
    def load(cls, path: str | Path) -> SettingsStore:
        """Load settings from a JSON file; a missing file gives an empty store.

        Raises:
            ConfigurationError: If the file is not a JSON object
        """
        settings_path = Path(path)
        if not settings_path.exists():
            logger.debug(f"Settings file not found, using defaults: {settings_path}")
            return cls()

        try:
            with open(settings_path, encoding="utf-8") as f:
                values = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in settings file {settings_path}: {e}") from e

        if not isinstance(values, dict):
            raise ConfigurationError(f"Settings file must contain a JSON object: {settings_path}")
        return cls(values)

    def save(self, path: str | Path) -> None:
        settings_path = Path(path)
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with open(settings_path, "w", encoding="utf-8") as f:
            json.dump(self._values, f, indent=2, ensure_ascii=False)
            f.write("\n")


def parse_target_lists(raw: Any) -> list[ListTarget]:
    """Decode the ``target-lists-config`` value.

    Malformed JSON or a non-array value yields an empty list (logged, never
    fatal). Entries without a list name pattern are skipped.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw.strip() else []
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing target lists config: {e}")
            return []

    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.error(f"Target lists config must be a JSON array, got {type(raw).__name__}")
        return []

    targets = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            logger.warning(f"Skipping target list #{index}: not an object")
            continue
        target = ListTarget.from_dict(entry)
        if not target.list_name_pattern:
            logger.warning(f"Skipping target list #{index}: missing list name")
            continue
        targets.append(target)
    return targets


def serialize_target_lists(targets: list[ListTarget]) -> str:
    return json.dumps([target.to_dict() for target in targets], ensure_ascii=False)


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes", "on"}:
            return True
        if lowered in {"false", "0", "no", "off"}:
            return False
    if isinstance(value, int):
        return bool(value)
    return default


def _as_interval(value: Any) -> int:
    try:
        interval = int(value)
    except (TypeError, ValueError):
        logger.warning(
            f"Invalid refresh-interval {value!r}, using default of {DEFAULT_REFRESH_INTERVAL}"
        )
        return DEFAULT_REFRESH_INTERVAL
    if interval < 1:
        logger.warning(f"refresh-interval must be at least 1 minute, got {interval}; using 1")
        return 1
    return interval


@dataclass(frozen=True)
class Settings:
    """Typed, validated snapshot of the settings store"""

    credentials: Credentials = field(default_factory=Credentials)
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    show_card_count: bool = True
    show_list_names: bool = True
    show_emojis: bool = True
    targets: tuple[ListTarget, ...] = ()
    legacy_board_id: str = ""
    panel_position: str = "right"

    @classmethod
    def from_store(cls, store: SettingsStore) -> Settings:
        legacy_board_id = str(store.get("board-id") or "").strip()

        targets = []
        for target in parse_target_lists(store.get("target-lists-config")):
            if not target.board_id and legacy_board_id:
                target = ListTarget(legacy_board_id, target.list_name_pattern, target.emoji)
            targets.append(target)

        return cls(
            credentials=Credentials(
                api_key=str(store.get("api-key") or "").strip(),
                token=str(store.get("token") or "").strip(),
            ),
            refresh_interval=_as_interval(store.get("refresh-interval")),
            show_card_count=_as_bool(store.get("show-card-count"), True),
            show_list_names=_as_bool(store.get("show-list-names"), True),
            show_emojis=_as_bool(store.get("show-emojis"), True),
            targets=tuple(targets),
            legacy_board_id=legacy_board_id,
            panel_position=str(store.get("panel-position") or "right"),
        )


def get_target_lists(store: SettingsStore) -> list[ListTarget]:
    return parse_target_lists(store.get("target-lists-config"))


def set_target_lists(store: SettingsStore, targets: list[ListTarget]) -> None:
    store.set("target-lists-config", serialize_target_lists(targets))


def _clean_target(target: ListTarget) -> ListTarget:
    pattern = target.list_name_pattern.strip()
    board_id = target.board_id.strip()
    if not pattern or not board_id:
        raise ConfigurationError("Please enter both list name and board ID")
    return ListTarget(board_id, pattern, target.emoji or DEFAULT_EMOJI)


def add_target(store: SettingsStore, target: ListTarget) -> ListTarget:
    """Append a target, rejecting empty fields and duplicate (pattern, board) pairs.

    Raises:
        ConfigurationError: Empty pattern/board ID, or the target already exists
    """
    target = _clean_target(target)
    targets = get_target_lists(store)
    if any(existing.same_target(target) for existing in targets):
        raise ConfigurationError("This list configuration already exists")

    targets.append(target)
    set_target_lists(store, targets)
    logger.info(
        f'Added new list configuration: "{target.list_name_pattern}" on board {target.board_id}'
    )
    return target


def update_target(store: SettingsStore, index: int, target: ListTarget) -> ListTarget:
    """Replace the target at ``index``.

    Raises:
        ConfigurationError: Empty fields, or the edit duplicates another target
        IndexError: No target at ``index``
    """
    target = _clean_target(target)
    targets = get_target_lists(store)
    if not 0 <= index < len(targets):
        raise IndexError(f"No target list at index {index}")
    if any(i != index and existing.same_target(target) for i, existing in enumerate(targets)):
        raise ConfigurationError("This list configuration already exists")

    targets[index] = target
    set_target_lists(store, targets)
    return target


def remove_target(store: SettingsStore, index: int) -> ListTarget:
    """Remove and return the target at ``index``.

    Raises:
        IndexError: No target at ``index``
    """
    targets = get_target_lists(store)
    if not 0 <= index < len(targets):
        raise IndexError(f"No target list at index {index}")
    removed = targets.pop(index)
    set_target_lists(store, targets)
    return removed


def load_env_file(env_file: str | Path) -> None:
    """Load KEY=VALUE lines into os.environ without overriding existing variables"""
    env_path = Path(env_file)
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                if key not in os.environ:
                    os.environ[key] = value


def apply_env_overrides(store: SettingsStore) -> None:
    """Let TRELLO_API_KEY / TRELLO_TOKEN / TRELLO_BOARD_ID override stored values"""
    overrides = {}
    for env_name, key in (
        ("TRELLO_API_KEY", "api-key"),
        ("TRELLO_TOKEN", "token"),
        ("TRELLO_BOARD_ID", "board-id"),
    ):
        value = os.getenv(env_name)
        if value:
            overrides[key] = value
    if overrides:
        store.update(overrides)
