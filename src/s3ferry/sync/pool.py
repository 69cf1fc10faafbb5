"""Bounded worker pool for concurrent object operations.

This module provides:
- WorkerPool: Runs submitted callables on a fixed number of threads
- WorkerTask: Represents a queued unit of work
- PoolResult: Outcome of every task run by a pool
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from s3ferry.core.config import DEFAULT_MAX_CONCURRENCY

logger = logging.getLogger(__name__)


class PoolState(Enum):
    """State of the worker pool."""

    STOPPED = auto()
    RUNNING = auto()
    STOPPING = auto()


@dataclass
class WorkerTask:
    """A task to be executed by the worker pool.

    Attributes:
        name: Identifies the task in results and failures (usually an object key).
        func: Callable run on a worker thread; its return value is kept.
    """

    name: str
    func: Callable[[], Any]


@dataclass
class PoolResult:
    """Outcome of a pool run.

    Attributes:
        completed: Number of tasks that returned normally.
        results: Return value of each successful task, by task name.
        failures: Exception raised by each failed task, by task name.
    """

    completed: int = 0
    results: dict[str, Any] = field(default_factory=dict)
    failures: dict[str, BaseException] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True if no task failed."""
        return not self.failures


class WorkerPool:
    """Pool of worker threads bounded to ``max_workers`` in-flight tasks.

    Tasks are fed through a bounded queue, so ``submit`` blocks while the
    workers are busy and a lazy producer never runs far ahead. A failing
    task does not stop its siblings; failures are collected and returned
    by ``join``.

    Usage:
        with WorkerPool(max_workers=5, on_complete=report) as pool:
            for item in items:
                pool.submit(item.key, lambda item=item: process(item))
        result = pool.result
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_CONCURRENCY,
        name: str = "WorkerPool",
        on_complete: Callable[[int], None] | None = None,
    ) -> None:
        """Initialize the worker pool.

        Args:
            max_workers: Maximum concurrent tasks.
            name: Prefix of the worker thread names.
            on_complete: Called with the completed count after each
                successful task, while the counter lock is held.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self._max_workers = max_workers
        self._name = name
        self._on_complete = on_complete

        self._pool_state = PoolState.STOPPED
        self._lock = threading.Lock()
        self._task_queue: queue.Queue[WorkerTask | None] = queue.Queue(maxsize=max_workers * 2)
        self._workers: list[threading.Thread] = []
        self._result = PoolResult()

    @property
    def state(self) -> PoolState:
        """Get current pool state."""
        return self._pool_state

    @property
    def completed_count(self) -> int:
        """Get number of completed tasks."""
        with self._lock:
            return self._result.completed

    @property
    def result(self) -> PoolResult:
        """Results collected so far (final once the pool is joined)."""
        return self._result

    def start(self) -> None:
        """Start the worker threads."""
        with self._lock:
            if self._pool_state != PoolState.STOPPED:
                logger.warning(f"{self._name} already running")
                return

            self._pool_state = PoolState.RUNNING
            for i in range(self._max_workers):
                thread = threading.Thread(
                    target=self._worker_loop,
                    name=f"{self._name}-{i}",
                    daemon=True,
                )
                thread.start()
                self._workers.append(thread)

        logger.debug(f"{self._name} started with {self._max_workers} workers")

    def submit(self, name: str, func: Callable[[], Any]) -> None:
        """Queue a task, blocking while the queue is full.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if self._pool_state != PoolState.RUNNING:
            raise RuntimeError(f"Cannot submit task {name}: {self._name} not running")
        self._task_queue.put(WorkerTask(name=name, func=func))

    def join(self) -> PoolResult:
        """Wait for every queued task to finish and stop the workers."""
        with self._lock:
            if self._pool_state != PoolState.RUNNING:
                return self._result
            self._pool_state = PoolState.STOPPING

        # Poison pills queue behind the remaining tasks, so the queue drains first
        for _ in self._workers:
            self._task_queue.put(None)
        for worker in self._workers:
            worker.join()

        with self._lock:
            self._pool_state = PoolState.STOPPED
            self._workers.clear()

        logger.debug(
            f"{self._name} finished: {self._result.completed} completed, "
            f"{len(self._result.failures)} failed"
        )
        return self._result

    def run(self, tasks: Iterable[WorkerTask]) -> PoolResult:
        """Start the pool, run every task and wait for all of them."""
        with self:
            for task in tasks:
                self.submit(task.name, task.func)
        return self._result

    def __enter__(self) -> WorkerPool:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.join()

    def _worker_loop(self) -> None:
        """Main loop for worker threads."""
        while True:
            task = self._task_queue.get()
            if task is None:
                # Poison pill - stop worker
                break
            self._process_task(task)

    def _process_task(self, task: WorkerTask) -> None:
        """Run one task and record its outcome."""
        try:
            value = task.func()
        except Exception as e:
            logger.debug(f"Task failed: {task.name}: {e}")
            with self._lock:
                self._result.failures[task.name] = e
            return

        with self._lock:
            self._result.completed += 1
            self._result.results[task.name] = value
            if self._on_complete:
                try:
                    self._on_complete(self._result.completed)
                except Exception:
                    logger.exception(f"Completion callback failed for {task.name}")
