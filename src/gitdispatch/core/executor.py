"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Bounded-concurrency executor for direct task groups.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Sequence
from typing import Any

from ..metrics import (
    EXECUTOR_GROUPS_TOTAL,
    EXECUTOR_TASKS_COMPLETED_TOTAL,
    EXECUTOR_TASKS_FAILED_TOTAL,
    ExecutorMetrics,
    NoOpExecutorMetrics,
)
from ..runner import Runner
from ..tasks.types import Task

logger = logging.getLogger("gitdispatch.core.executor")


class RunningQueue:
    """
    Worker pool for one submitted task group.

    Up to ``concurrency`` tasks call the runner at once. Results are stored at
    each task's submission index. After the first failure no further task is
    started; tasks already running finish in the background.
    """

    def __init__(
        self,
        tasks: Sequence[Task],
        *,
        runner: Runner,
        concurrency: int,
        metrics: ExecutorMetrics,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.id = uuid.uuid4().hex
        self.tasks = tuple(tasks)
        self.results: list[Any] = [None] * len(self.tasks)
        self._runner = runner
        self._metrics = metrics
        self._semaphore = asyncio.Semaphore(concurrency)
        self._failed = False

    @property
    def failed(self) -> bool:
        return self._failed

    async def drain(self) -> list[Any]:
        """Run every task and return the ordered results, or raise the first failure."""
        workers = [
            asyncio.ensure_future(self._work(index, task))
            for index, task in enumerate(self.tasks)
        ]
        done, pending = await asyncio.wait(workers, return_when=asyncio.FIRST_EXCEPTION)

        # Pick the failure with the lowest submission index among finished workers.
        for worker in workers:
            if worker not in done or worker.cancelled():
                continue
            error = worker.exception()
            if error is None:
                continue
            for straggler in pending:
                straggler.add_done_callback(_consume_result)
            for finished in done:
                if finished is not worker:
                    _consume_result(finished)
            raise error
        return self.results

    async def _work(self, index: int, task: Task) -> None:
        async with self._semaphore:
            if self._failed:
                return
            try:
                result = await self._execute(task)
            except Exception:
                self.results[index] = None
                self._failed = True
                self._metrics.incr(EXECUTOR_TASKS_FAILED_TOTAL, tags={"task": task.name})
                logger.debug("Task completed as error (queue=%s, task=%s)", self.id[:8], task.name)
                raise
            self.results[index] = result
            self._metrics.incr(EXECUTOR_TASKS_COMPLETED_TOTAL, tags={"task": task.name})
            logger.debug("Task completed as success (queue=%s, task=%s)", self.id[:8], task.name)

    async def _execute(self, task: Task) -> Any:
        if task.error is not None:
            raise task.error
        raw = await self._runner.run(task.command)
        logger.debug("Task has %sparser", "" if task.parser else "no ")
        if task.parser is None:
            return raw
        return task.parser(raw)


class TaskQueueExecutor:
    """
    Run single tasks or task groups through per-submission worker pools.

    Every submission gets its own ``RunningQueue`` bound to ``concurrency``.
    Active queues are tracked until their group settles.
    """

    def __init__(
        self,
        runner: Runner,
        *,
        concurrency: int = 1,
        metrics: ExecutorMetrics | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self._runner = runner
        self._concurrency = concurrency
        self._metrics: ExecutorMetrics = metrics or NoOpExecutorMetrics()
        self._active: set[RunningQueue] = set()

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def active_queue_count(self) -> int:
        """Number of submissions currently in flight."""
        return len(self._active)

    async def run(self, tasks: Task | Sequence[Task]) -> Any:
        """
        Execute one task or a group of tasks.

        Args:
            tasks: A single task, or an ordered sequence of tasks.

        Returns:
            The bare result for a single task, otherwise the list of results
            in submission order.

        Raises:
            Exception: The first failure raised by any task in the group.
        """
        resolve_first = isinstance(tasks, Task)
        group: list[Task] = [tasks] if resolve_first else list(tasks)  # type: ignore[list-item]
        logger.debug("Processing %s", "single task" if resolve_first else "task group")
        if not group:
            return []

        queue = RunningQueue(
            group,
            runner=self._runner,
            concurrency=self._concurrency,
            metrics=self._metrics,
        )
        self._active.add(queue)
        self._metrics.incr(EXECUTOR_GROUPS_TOTAL)
        try:
            results = await queue.drain()
        finally:
            self._active.discard(queue)
        return results[0] if resolve_first else results


def _consume_result(future: asyncio.Future[Any]) -> None:
    """Mark a discarded worker's exception as retrieved."""
    if not future.cancelled():
        future.exception()
