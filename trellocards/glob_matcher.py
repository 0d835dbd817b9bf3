"""Glob-style matching of list names against target patterns."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a glob pattern into a case-insensitive regex.

    ``*`` matches any run of characters (including none) and ``?`` exactly one
    character. Every other character is matched literally.

    Args:
        pattern: Glob pattern such as ``*Today*`` or ``📅*``

    Returns:
        Compiled expression, to be applied with ``fullmatch``
    """
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def matches(text: str, pattern: str) -> bool:
    """Check whether ``text`` fully matches the glob ``pattern``.

    Example:
        >>> matches("Today's Tasks", "*Today*")
        True
        >>> matches("Done", "*Today*")
        False
    """
    # The whole name must match, including any trailing newline
    result = glob_to_regex(pattern).fullmatch(text) is not None
    logger.debug(
        'Pattern match: "%s" %s pattern "%s"',
        text,
        "matches" if result else "does not match",
        pattern,
    )
    return result


def filter_by_name(items: Iterable[T], pattern: str, name_of=lambda item: item.name) -> list[T]:
    """Keep the items whose name matches ``pattern``, preserving order."""
    return [item for item in items if matches(name_of(item), pattern)]
