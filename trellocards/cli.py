"""CLI entry point for trellocards.

Usage:
    export TRELLO_API_KEY="your-key"
    export TRELLO_TOKEN="your-token"

    # Configure which lists to show (pattern + board ID or board URL)
    trellocards targets add "*Today*" https://trello.com/b/Bm0nnz1R/my-board --emoji 📅
    trellocards targets list

    # Check a pattern against a board before adding it
    trellocards validate "*Progress*" Bm0nnz1R

    # Print matching cards once, or keep refreshing on the configured interval
    trellocards show
    trellocards watch

    # Archive a card
    trellocards close 5f1c2a...
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path

from trellocards.board_service import BoardService
from trellocards.config import (
    Settings,
    SettingsStore,
    add_target,
    apply_env_overrides,
    get_target_lists,
    load_env_file,
    remove_target,
)
from trellocards.display import format_indicator_label, format_status_lines
from trellocards.exceptions import ConfigurationError, TrelloCardsError
from trellocards.logging_config import setup_logging
from trellocards.manager import RefreshSummary, SyncManager
from trellocards.models import DEFAULT_EMOJI, ListTarget
from trellocards.sync import validate_target
from trellocards.trello_client import TrelloClient

logger = logging.getLogger("trellocards.cli")

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "trellocards" / "settings.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trellocards",
        description="Show Trello cards from lists matching glob patterns",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=Path(os.getenv("TRELLO_CARDS_SETTINGS", str(DEFAULT_SETTINGS_PATH))),
        help="Path to the JSON settings file",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    verbosity.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("--timeout", type=float, default=30.0, help="Request timeout (seconds)")
    parser.add_argument(
        "--no-verify-ssl", action="store_true", help="Disable SSL certificate verification"
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("show", help="Refresh every target once and print the cards")
    commands.add_parser("watch", help="Refresh on the configured interval until interrupted")

    validate = commands.add_parser("validate", help="Preview which lists a pattern matches")
    validate.add_argument("pattern")
    validate.add_argument("board", help="Board ID or board URL")

    close = commands.add_parser("close", help="Archive a card")
    close.add_argument("card_id")

    targets = commands.add_parser("targets", help="Manage configured list targets")
    target_commands = targets.add_subparsers(dest="targets_command", required=True)
    target_commands.add_parser("list", help="List configured targets")
    add = target_commands.add_parser("add", help="Add a target")
    add.add_argument("pattern")
    add.add_argument("board", help="Board ID or board URL")
    add.add_argument("--emoji", default=DEFAULT_EMOJI)
    remove = target_commands.add_parser("remove", help="Remove a target by index")
    remove.add_argument("index", type=int)

    return parser


def _log_level(args: argparse.Namespace) -> str:
    if args.verbose:
        return "DEBUG"
    if args.quiet:
        return "ERROR"
    return args.log_level.upper()


def print_summary(manager: SyncManager, summary: RefreshSummary) -> None:
    settings = manager.settings
    for controller, status in zip(manager.controllers, summary.statuses):
        count = status.result.card_count if status.result is not None else None
        print(f"{format_indicator_label(controller.target, settings, count)}  [{controller.title}]")
        for line in format_status_lines(status, controller.pattern):
            print(f"  {line}")
        print()
    print(f"Status: {summary.message}")


def run_show(manager: SyncManager) -> int:
    if not manager.controllers:
        logger.error("❌ No target lists configured. Add one with: trellocards targets add")
        return 1
    manager.load_board_names()
    summary = manager.refresh_all()
    print_summary(manager, summary)
    return 1 if summary.refreshed == 0 else 0


def run_watch(manager: SyncManager) -> int:
    manager.on_refresh = lambda summary: print_summary(manager, summary)
    manager.load_board_names()
    manager.start()
    logger.info(f"🔄 Refreshing every {manager.settings.refresh_interval} min (Ctrl+C to stop)")
    try:
        manager.scheduler.trigger()
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Stopping")
    finally:
        manager.stop()
    return 0


def run_validate(client: TrelloClient, pattern: str, board: str) -> int:
    try:
        validation = validate_target(BoardService(client), pattern, board)
    except TrelloCardsError as e:
        logger.error(f"❌ Validation failed: {e}")
        return 1
    print(validation.message)
    return 0 if validation.ok else 1


def run_close(client: TrelloClient, card_id: str) -> int:
    if not client.credentials.is_complete:
        logger.error("❌ Missing API credentials (set TRELLO_API_KEY and TRELLO_TOKEN)")
        return 1
    try:
        BoardService(client).close_card(card_id)
    except TrelloCardsError as e:
        logger.error(f"❌ Failed to close card {card_id}: {e}")
        return 1
    logger.info(f"✅ Closed card {card_id}")
    return 0


def run_targets(store: SettingsStore, args: argparse.Namespace) -> int:
    if args.targets_command == "list":
        targets = get_target_lists(store)
        if not targets:
            print("No target lists configured")
        for index, target in enumerate(targets):
            board = target.board_id or "⚠️ Missing board ID"
            print(f"{index}: {target.emoji} {target.list_name_pattern}  ({board})")
        return 0

    try:
        if args.targets_command == "add":
            target = add_target(store, ListTarget(args.board, args.pattern, args.emoji))
            logger.info(f"✅ Added {target.emoji} {target.list_name_pattern}")
        else:
            target = remove_target(store, args.index)
            logger.info(f"🗑️  Removed {target.emoji} {target.list_name_pattern}")
    except (ConfigurationError, IndexError) as e:
        logger.error(f"❌ {e}")
        return 1

    store.save(args.settings)
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(_log_level(args), args.log_file)

    if args.no_verify_ssl:
        import urllib3

        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        logger.info("🔓 SSL verification disabled")

    try:
        store = SettingsStore.load(args.settings)
    except ConfigurationError as e:
        logger.error(f"❌ Error loading settings: {e}")
        sys.exit(1)

    if args.command == "targets":
        # Only the file contents are persisted; no env overrides here
        sys.exit(run_targets(store, args))

    load_env_file(os.getenv("TRELLO_ENV_FILE", ".env"))
    apply_env_overrides(store)
    settings = Settings.from_store(store)
    client = TrelloClient(
        settings.credentials, timeout=args.timeout, verify_ssl=not args.no_verify_ssl
    )

    if args.command == "validate":
        sys.exit(run_validate(client, args.pattern, args.board))
    if args.command == "close":
        sys.exit(run_close(client, args.card_id))

    if not settings.credentials.is_complete:
        logger.error("❌ Error: Missing required Trello credentials")
        logger.error("\nSet api-key/token in the settings file, or the environment variables:")
        logger.error("  TRELLO_API_KEY     - Your Trello API key")
        logger.error("  TRELLO_TOKEN       - Your Trello API token")
        sys.exit(1)

    manager = SyncManager(store, timeout=args.timeout, verify_ssl=not args.no_verify_ssl)
    if args.command == "show":
        sys.exit(run_show(manager))
    sys.exit(run_watch(manager))


if __name__ == "__main__":
    main()
