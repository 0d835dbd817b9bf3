"""Text formatting for the panel indicator and its menu entries."""

from __future__ import annotations

from trellocards.config import Settings
from trellocards.exceptions import ConfigurationError, NoMatchError
from trellocards.models import DEFAULT_EMOJI, ListTarget, SyncState, SyncStatus

PATTERN_EXAMPLES = "*Today*, 📅*, *Progress*"
MAX_LABEL_NAME = 8


def format_indicator_label(
    target: ListTarget, settings: Settings, card_count: int | None = None
) -> str:
    """Build the panel button text for a target.

    Example:
        >>> format_indicator_label(ListTarget("b", "Today", "📅"), Settings(), 3)
        '📅 Today (3)'
    """
    parts = []
    if settings.show_emojis:
        parts.append(target.emoji or DEFAULT_EMOJI)
    if settings.show_list_names:
        name = target.list_name_pattern
        parts.append(name[:MAX_LABEL_NAME] + "…" if len(name) > MAX_LABEL_NAME else name)

    text = " ".join(parts)
    if settings.show_card_count and card_count is not None:
        text += f" ({card_count})"

    # Nothing enabled: fall back to the bare emoji
    if not settings.show_emojis and not settings.show_list_names:
        text = target.emoji or DEFAULT_EMOJI
    return text


def format_status_lines(status: SyncStatus, pattern: str) -> list[str]:
    """Menu lines for a controller status (one line per menu entry)"""
    if status.state is SyncState.LOADING:
        return ["Loading cards..."]

    if status.state is SyncState.READY and status.result is not None:
        lines = []
        for lst in status.result.matched_lists:
            lines.append(f"{lst.name}:")
            lines.extend(f"  {card.name}" for card in lst.cards)
        return lines

    error = status.error
    if isinstance(error, NoMatchError):
        lines = [
            f'No lists match pattern "{pattern}"',
            f"Pattern examples: {PATTERN_EXAMPLES}",
            "Available lists:",
        ]
        if error.available_lists:
            lines.extend(f"  • {name}" for name in error.available_lists)
        else:
            lines.append("  (no lists found on board)")
        return lines
    if isinstance(error, ConfigurationError):
        return [f"Config Error: {error}"]
    if error is not None:
        return [f"Error: {error}"]
    return []


def summarize_refresh(refreshed: int, failed: int) -> str:
    """Status line for the main indicator after refreshing every target"""
    if refreshed == 0 and failed == 0:
        return "No lists configured"
    if failed == 0:
        return f"{refreshed} lists refreshed"
    if refreshed == 0:
        return f"All {failed} lists failed"
    return f"{refreshed} refreshed, {failed} failed"
