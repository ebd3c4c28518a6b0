# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Bounded fan-out execution of independent probes.

A fixed pool of long-lived worker threads pulls work items from a queue, so at most
``concurrency`` probes are ever in flight. Results land in a run-scoped, lock-protected
aggregator. A Deadline or CancelToken stops dispatch of queued items; probes that already
started are left to finish (or time out at the HTTP layer) on their own.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..errors import ProbeError, categorize_exception

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

_STOP = object()


class CancelToken:
    """Cooperative cancellation flag shared by every worker of a run."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class Deadline:
    """Monotonic batch deadline; ``Deadline(None)`` never expires."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout
        self._expires_at = time.monotonic() + timeout if timeout and timeout > 0 else None

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())


class ResultAggregator(Generic[R]):
    """Append-only result list guarded by a single lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[R] = []

    def append(self, item: R) -> None:
        with self._lock:
            self._items.append(item)

    def extend(self, items: Iterable[R]) -> None:
        with self._lock:
            self._items.extend(items)

    def snapshot(self) -> list[R]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


@dataclass
class BatchStats:
    dispatched: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "dispatched": self.dispatched,
            "completed": self.completed,
            "failed": self.failed,
            "skipped": self.skipped,
        }


class BoundedExecutor(Generic[T, R]):
    """
    Run ``probe(item)`` over many items with a fixed concurrency ceiling.

    - ``probe`` returning None means "no result".
    - ``probe`` raising is recorded as a failure and logged at DEBUG; the batch continues.
    - ``submit()`` may be called from inside a probe to enqueue follow-up work into the running
      batch (recursive discovery uses this); ``run()`` returns only once follow-ups drain too.
    """

    def __init__(
        self,
        concurrency: int = 5,
        *,
        deadline: Deadline | None = None,
        cancel_token: CancelToken | None = None,
        name: str = "probe",
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.concurrency = concurrency
        self.deadline = deadline or Deadline(None)
        self.cancel_token = cancel_token or CancelToken()
        self.name = name
        self.stats = BatchStats()
        self._stats_lock = threading.Lock()
        self._queue: queue.Queue[Any] | None = None

    @property
    def stopped(self) -> bool:
        return self.cancel_token.cancelled or self.deadline.expired

    def submit(self, item: T) -> bool:
        """Enqueue a follow-up item; returns False once the batch has been stopped."""
        if self._queue is None:
            raise RuntimeError("submit() is only valid while run() is in progress")
        if self.stopped:
            return False
        self._queue.put(item)
        return True

    def run(self, items: Iterable[T], probe: Callable[[T], R | None]) -> list[R]:
        work: queue.Queue[Any] = queue.Queue()
        results: ResultAggregator[R] = ResultAggregator()
        self.stats = BatchStats()
        self._queue = work

        workers = [
            threading.Thread(
                target=self._worker,
                args=(work, probe, results),
                name=f"{self.name}-{index}",
                daemon=True,
            )
            for index in range(self.concurrency)
        ]
        for worker in workers:
            worker.start()

        try:
            for item in items:
                if self.stopped:
                    break
                work.put(item)
            # Follow-up items are queued before their parent's task_done(), so join() covers them.
            work.join()
        except BaseException:
            # Interrupted (Ctrl-C): whatever is still queued is skipped, not probed.
            self.cancel_token.cancel()
            raise
        finally:
            for _ in workers:
                work.put(_STOP)
            for worker in workers:
                worker.join()
            self._queue = None

        if self.deadline.expired:
            logger.info("%s batch deadline exceeded; %d queued items skipped", self.name, self.stats.skipped)
        return results.snapshot()

    def _record(self, field_name: str) -> None:
        with self._stats_lock:
            setattr(self.stats, field_name, getattr(self.stats, field_name) + 1)

    def _worker(self, work: queue.Queue[Any], probe: Callable[[T], R | None], results: ResultAggregator[R]) -> None:
        while True:
            item = work.get()
            if item is _STOP:
                work.task_done()
                return
            try:
                if self.stopped:
                    self._record("skipped")
                    continue
                self._record("dispatched")
                try:
                    result = probe(item)
                except ProbeError as exc:
                    self._record("failed")
                    logger.debug("%s probe failed for %r [%s]: %s", self.name, item, exc.category.value, exc)
                    continue
                except Exception as exc:  # noqa: BLE001
                    self._record("failed")
                    logger.debug(
                        "%s probe failed for %r [%s]: %s",
                        self.name,
                        item,
                        categorize_exception(exc).value,
                        exc,
                    )
                    continue
                self._record("completed")
                if result is not None:
                    results.append(result)
            finally:
                work.task_done()


def run_bounded(
    items: Iterable[T],
    probe: Callable[[T], R | None],
    *,
    concurrency: int = 5,
    deadline: Deadline | None = None,
    cancel_token: CancelToken | None = None,
) -> list[R]:
    """One-shot helper around BoundedExecutor."""
    executor: BoundedExecutor[T, R] = BoundedExecutor(concurrency, deadline=deadline, cancel_token=cancel_token)
    return executor.run(items, probe)


__all__ = [
    "BatchStats",
    "BoundedExecutor",
    "CancelToken",
    "Deadline",
    "ResultAggregator",
    "run_bounded",
]
