"""Bounded in-memory log buffer exposed through the ``get_logs`` tool."""

from __future__ import annotations

from collections import deque
from datetime import datetime, timezone

DEFAULT_CAPACITY = 10_000


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with second precision, e.g. ``2026-01-02T03:04:05Z``."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class LogBuffer:
    """FIFO ring of timestamped lines; the oldest line is evicted when full.

    Not thread-safe: every mutation must happen on the server's event loop.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._lines: deque[str] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._lines.maxlen or 0

    def append(self, message: str) -> str:
        line = f"[{utc_timestamp()}] {message}"
        self._lines.append(line)
        return line

    def lines(self) -> list[str]:
        """Snapshot copy, oldest first."""
        return list(self._lines)

    def clear(self) -> None:
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)
