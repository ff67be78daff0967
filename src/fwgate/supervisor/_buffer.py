"""Bounded per-daemon output buffer.

Daemon output is kept in memory only as a rolling window of the most recent
lines. Lines are redacted before they are stored so that credentials printed
by a daemon never reach the log API.
"""

from __future__ import annotations

import re
from collections import deque
from typing import TYPE_CHECKING, final

if TYPE_CHECKING:
    from ._models import LogLine

DEFAULT_CAPACITY = 1000

_SECRET_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(
            r"(?:api[_-]?key|token|password|secret|auth)[=:]\s*[\"']?[^\s\"']+[\"']?",
            re.IGNORECASE,
        ),
        "[REDACTED]",
    ),
    (re.compile(r"sk-[a-zA-Z0-9]{20,}"), "sk-[REDACTED]"),
    (re.compile(r"Bearer\s+[a-zA-Z0-9._-]+", re.IGNORECASE), "Bearer [REDACTED]"),
)


def redact_secrets(text: str) -> str:
    """Replace common credential patterns in a line of output.

    Args:
        text: A line of daemon output.

    Returns:
        The line with key=value secrets, sk- keys and bearer tokens masked.
    """
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


@final
class LogBuffer:
    """Fixed-capacity ring buffer of LogLines.

    Appending beyond capacity evicts the oldest line.
    """

    __slots__ = ("_lines",)

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            msg = f"LogBuffer capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._lines: deque[LogLine] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        """Return the maximum number of retained lines."""
        return self._lines.maxlen or 0

    def append(self, line: LogLine) -> None:
        """Store a line, evicting the oldest one when full."""
        self._lines.append(line)

    def tail(self, limit: int | None = None) -> list[LogLine]:
        """Return up to `limit` of the most recent lines, oldest first.

        Args:
            limit: Maximum number of lines. None returns everything buffered.

        Returns:
            Lines in chronological order.
        """
        if limit is None:
            return list(self._lines)
        if limit <= 0:
            return []
        skip = max(0, len(self._lines) - limit)
        return [line for index, line in enumerate(self._lines) if index >= skip]

    def clear(self) -> None:
        """Drop every buffered line."""
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)
