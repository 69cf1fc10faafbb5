"""Console progress output for the CLI."""

from __future__ import annotations

import threading

import click


class ConsoleProgress:
    """One progress entry printed as lines on stdout.

    Repeated identical messages are printed once. Entries of different
    targets share the factory's lock so lines never interleave.
    """

    def __init__(self, message: str, lock: threading.Lock) -> None:
        self._lock = lock
        self._last_message: str | None = None
        self._removed = False
        self.update(message)

    def update(self, message: str) -> None:
        with self._lock:
            if self._removed or message == self._last_message:
                return
            self._last_message = message
            click.echo(f"  {message}")

    def remove(self) -> None:
        with self._lock:
            self._removed = True


class ConsoleProgressFactory:
    """Creates ConsoleProgress entries sharing one output lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def create(self, message: str) -> ConsoleProgress:
        return ConsoleProgress(message, self._lock)
