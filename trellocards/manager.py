"""Coordinate every configured list target against the settings store."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from trellocards.board_service import BoardService
from trellocards.config import Settings, SettingsStore
from trellocards.display import summarize_refresh
from trellocards.models import SyncState, SyncStatus
from trellocards.scheduler import RefreshScheduler
from trellocards.sync import ListSyncController
from trellocards.trello_client import TrelloClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshSummary:
    refreshed: int
    failed: int
    statuses: tuple[SyncStatus, ...] = ()

    @property
    def message(self) -> str:
        return summarize_refresh(self.refreshed, self.failed)


class SyncManager:
    """Own the shared credentials, one controller per target, and the timer.

    Settings are read once into a typed ``Settings`` snapshot. When the store
    reports a change (after ``start()``), the snapshot is rebuilt, every
    controller is recreated from the new targets and the timer is reset to
    the new refresh interval.

    Example:
        >>> manager = SyncManager(SettingsStore.load("settings.json"))
        >>> summary = manager.refresh_all()
        >>> print(summary.message)
        2 lists refreshed
    """

    def __init__(
        self,
        store: SettingsStore,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        max_workers: int = 4,
        on_refresh: Callable[[RefreshSummary], None] | None = None,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.store = store
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.max_workers = max_workers
        self.on_refresh = on_refresh

        self.settings = Settings()
        self.board_service: BoardService | None = None
        self.status_message = "Ready"

        self._controllers: list[ListSyncController] = []
        self._lock = threading.Lock()
        self._handler_id: int | None = None
        self.scheduler = RefreshScheduler(self.refresh_all, self.settings.refresh_interval)

        self.reload()

    @property
    def controllers(self) -> list[ListSyncController]:
        with self._lock:
            return list(self._controllers)

    def reload(self) -> None:
        """Rebuild settings, credentials and controllers from the store"""
        settings = Settings.from_store(self.store)
        client = TrelloClient(settings.credentials, timeout=self.timeout, verify_ssl=self.verify_ssl)
        board_service = BoardService(client)
        controllers = [ListSyncController(target, board_service) for target in settings.targets]

        with self._lock:
            self.settings = settings
            self.board_service = board_service
            self._controllers = controllers

        if controllers:
            self.status_message = f"{len(controllers)} lists configured"
        else:
            logger.info("No target lists configured")
            self.status_message = "No lists configured"

        # Takes effect on the next start()/reset()
        self.scheduler.interval_minutes = settings.refresh_interval

    def _on_settings_changed(self, store: SettingsStore, keys: list[str]) -> None:
        logger.info(f"Settings changed ({', '.join(keys)}), reloading list targets")
        self.reload()
        if self.scheduler.is_running:
            self.scheduler.reset()

    def start(self) -> None:
        """Listen for settings changes and arm the periodic refresh timer"""
        if self._handler_id is None:
            self._handler_id = self.store.connect(self._on_settings_changed)
        self.scheduler.reset(self.settings.refresh_interval)

    def stop(self) -> None:
        self.scheduler.stop()
        if self._handler_id is not None:
            self.store.disconnect(self._handler_id)
            self._handler_id = None

    def load_board_names(self) -> None:
        """Fetch board display names for every controller (best effort)"""
        for controller in self.controllers:
            controller.load_board_name()

    def refresh_all(self) -> RefreshSummary:
        """Refresh every controller concurrently and summarize the outcome.

        Safe to call from the timer thread and from user actions at the same
        time; each controller fences its own overlapping refreshes.
        """
        controllers = self.controllers
        if not controllers:
            self.status_message = "No lists configured"
            return RefreshSummary(refreshed=0, failed=0)

        self.status_message = "Refreshing..."
        workers = min(self.max_workers, len(controllers))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(controller.refresh) for controller in controllers]

        statuses = []
        refreshed = failed = 0
        for controller, future in zip(controllers, futures):
            try:
                status = future.result()
            except Exception as e:
                logger.exception(f'Failed to refresh "{controller.pattern}"')
                status = SyncStatus(SyncState.ERROR, error=e)
            statuses.append(status)
            if status.state is SyncState.READY:
                refreshed += 1
                logger.debug(f"Successfully refreshed: {controller.pattern}")
            else:
                failed += 1

        summary = RefreshSummary(refreshed=refreshed, failed=failed, statuses=tuple(statuses))
        self.status_message = summary.message
        logger.info(summary.message)
        if self.on_refresh is not None:
            self.on_refresh(summary)
        return summary
