"""Progress reporting interfaces.

This module provides:
- Progress / ProgressFactory: What the engines need from a progress sink
- NullProgress: Sink that discards every update
- ProgressTracker: Percentage reporter with 10% granularity
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Protocol


class Progress(Protocol):
    """A single progress entry (one line of status output)."""

    def update(self, message: str) -> None: ...

    def remove(self) -> None: ...


class ProgressFactory(Protocol):
    """Creates progress entries."""

    def create(self, message: str) -> Progress: ...


class NullProgress:
    """Progress sink that ignores updates."""

    def update(self, message: str) -> None:
        pass

    def remove(self) -> None:
        pass


class NullProgressFactory:
    """Factory for NullProgress entries."""

    def create(self, message: str) -> Progress:
        return NullProgress()


class ProgressTracker:
    """Report completion percentage in 10% steps.

    Updates are only forwarded when the rounded percentage increases, so
    the sink sees a monotonic sequence even when completions arrive from
    several worker threads.

    Usage:
        tracker = ProgressTracker(progress, lambda p: f"uploading ({p}%)")
        tracker.update(completed, total)
    """

    def __init__(self, progress: Progress, build_message: Callable[[int], str]) -> None:
        self._progress = progress
        self._build_message = build_message
        self._percent = 0
        self._lock = threading.Lock()

    @property
    def percent(self) -> int:
        """Last reported percentage."""
        return self._percent

    def update(self, amount: int, total: int) -> None:
        """Record that ``amount`` of ``total`` operations are done."""
        if total == 0:
            return
        # Nearest 10% step, halves rounded up
        current = (20 * amount + total) // (2 * total) * 10
        with self._lock:
            if current > self._percent:
                self._percent = current
                self._progress.update(self._build_message(current))

    def remove(self) -> None:
        """Remove the underlying progress entry."""
        self._progress.remove()
