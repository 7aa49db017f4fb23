"""Bookkeeping of memory use against a limit, with peak tracking."""

from __future__ import annotations

import sys
import threading


class MemoryTracker:
    """Counts bytes in use, refuses requests past the limit and records the peak."""

    def __init__(self, limit: int = sys.maxsize) -> None:
        self._lock = threading.Lock()
        self._used = 0
        self._max = 0
        self._limit = limit

    def allocate(self, size: int) -> None:
        """Account for *size* more bytes; raise MemoryError past the limit."""
        with self._lock:
            new_used = self._used + size
            if new_used > self._limit:
                raise MemoryError(f"allocation of {size} bytes exceeds the limit")
            self._used = new_used
            self._max = max(self._max, new_used)

    def release(self, size: int) -> None:
        """Give back *size* bytes."""
        with self._lock:
            self._used -= size

    def reallocate(self, old_size: int, new_size: int) -> None:
        """Resize a block; the new size must fit on top of what is in use."""
        with self._lock:
            if self._used + new_size > self._limit:
                raise MemoryError(f"reallocation to {new_size} bytes exceeds the limit")
            self._used = self._used + new_size - old_size

    def reset_max(self) -> None:
        """Start peak tracking afresh from the current use."""
        with self._lock:
            self._max = self._used

    def get_max(self) -> int:
        """Peak use since creation or the last reset_max()."""
        with self._lock:
            return self._max

    def set_limit(self, limit: int) -> None:
        """Change the maximum number of bytes that may be in use."""
        with self._lock:
            self._limit = limit