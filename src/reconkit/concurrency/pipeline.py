# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Staged worker pools connected by bounded queues.

Each stage owns a fixed number of workers consuming the queue filled by the stage before it.
A worker receives an item and an ``emit`` callable that publishes to the next stage. When a
stage's input is exhausted and all of its workers have returned, the stage closes its output
queue, which in turn lets the next stage drain and close (cascading shutdown).
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from ..errors import ProbeError
from .executor import CancelToken, Deadline, ResultAggregator

logger = logging.getLogger(__name__)

Emit = Callable[[Any], None]
StageWorker = Callable[[Any, Emit], None]

_CLOSED = object()


@dataclass
class Stage:
    name: str
    worker: StageWorker
    workers: int = 40

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ValueError(f"stage {self.name!r} needs at least one worker")


class Pipeline:
    """Run items through ``stages`` in order; returns everything the last stage emits."""

    def __init__(
        self,
        stages: list[Stage],
        *,
        queue_size: int = 40,
        deadline: Deadline | None = None,
        cancel_token: CancelToken | None = None,
    ):
        if not stages:
            raise ValueError("a pipeline needs at least one stage")
        self.stages = stages
        self.queue_size = max(1, queue_size)
        self.deadline = deadline or Deadline(None)
        self.cancel_token = cancel_token or CancelToken()
        self.processed: dict[str, int] = {stage.name: 0 for stage in stages}
        self._counter_lock = threading.Lock()

    @property
    def stopped(self) -> bool:
        return self.cancel_token.cancelled or self.deadline.expired

    def run(self, items: Iterable[Any]) -> list[Any]:
        results: ResultAggregator[Any] = ResultAggregator()
        inputs: list[queue.Queue[Any]] = [queue.Queue(maxsize=self.queue_size) for _ in self.stages]
        closers: list[threading.Thread] = []

        for index, stage in enumerate(self.stages):
            source = inputs[index]
            if index + 1 < len(self.stages):
                target = inputs[index + 1]
                downstream = self.stages[index + 1].workers
                emit: Emit = target.put
            else:
                target = None
                downstream = 0
                emit = results.append

            workers = [
                threading.Thread(
                    target=self._worker,
                    args=(stage, source, emit),
                    name=f"{stage.name}-{n}",
                    daemon=True,
                )
                for n in range(stage.workers)
            ]
            for worker in workers:
                worker.start()

            closer = threading.Thread(
                target=self._close_when_drained,
                args=(workers, target, downstream),
                name=f"{stage.name}-closer",
                daemon=True,
            )
            closer.start()
            closers.append(closer)

        head = inputs[0]
        try:
            for item in items:
                if self.stopped:
                    break
                head.put(item)
        except BaseException:
            self.cancel_token.cancel()
            raise
        finally:
            for _ in range(self.stages[0].workers):
                head.put(_CLOSED)
            for closer in closers:
                closer.join()

        return results.snapshot()

    @staticmethod
    def _close_when_drained(workers: list[threading.Thread], target: queue.Queue[Any] | None, downstream: int) -> None:
        for worker in workers:
            worker.join()
        if target is not None:
            for _ in range(downstream):
                target.put(_CLOSED)

    def _worker(self, stage: Stage, source: queue.Queue[Any], emit: Emit) -> None:
        while True:
            item = source.get()
            if item is _CLOSED:
                return
            if self.stopped:
                continue
            try:
                stage.worker(item, emit)
            except ProbeError as exc:
                logger.debug("%s stage failed for %r [%s]: %s", stage.name, item, exc.category.value, exc)
            except Exception as exc:  # noqa: BLE001
                logger.debug("%s stage failed for %r: %s", stage.name, item, exc)
            finally:
                with self._counter_lock:
                    self.processed[stage.name] += 1


__all__ = ["Emit", "Pipeline", "Stage", "StageWorker"]
