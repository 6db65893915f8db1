"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Strictly ordered execution of chained tasks.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Literal

from ..errors import ChainAbortedError
from ..tasks.types import Task
from .executor import TaskQueueExecutor

logger = logging.getLogger("gitdispatch.core.sequencer")

ChainFailurePolicy = Literal["continue", "abort"]
CHAIN_FAILURE_POLICIES: tuple[ChainFailurePolicy, ...] = ("continue", "abort")


class ChainSequencer:
    """
    Run chained tasks one at a time in the order they were appended.

    A single worker drains the pending queue. Each step is submitted to the
    executor as a single task and its handler is invoked before the next step
    starts. The worker exits when the queue is empty and is restarted by the
    next ``enqueue``.

    Failure policies:
    - ``continue``: every step runs and receives its own outcome.
    - ``abort``: after a failure, steps pending in the same chain are skipped
      and their handlers receive ``ChainAbortedError``. The chain resets once
      the pending queue drains.
    """

    def __init__(
        self,
        executor: TaskQueueExecutor,
        *,
        failure_policy: ChainFailurePolicy = "continue",
    ) -> None:
        if failure_policy not in CHAIN_FAILURE_POLICIES:
            raise ValueError(f"Unknown chain failure policy: {failure_policy}")
        self._executor = executor
        self._failure_policy: ChainFailurePolicy = failure_policy
        self._pending: asyncio.Queue[Task] | None = None
        self._worker: asyncio.Task[None] | None = None
        self._aborted_by: BaseException | None = None

    @property
    def failure_policy(self) -> ChainFailurePolicy:
        return self._failure_policy

    @property
    def pending_count(self) -> int:
        """Steps appended but not yet started."""
        return self._pending.qsize() if self._pending is not None else 0

    @property
    def is_idle(self) -> bool:
        return self._worker is None or self._worker.done()

    def enqueue(self, task: Task) -> ChainSequencer:
        """
        Append a chained task and make sure the worker is draining.

        Must be called with a running event loop.
        """
        if not task.is_chained:
            raise ValueError(f"Task '{task.name}' has no handler and cannot be chained")
        loop = asyncio.get_running_loop()
        idle = self.is_idle
        if self._pending is None or (idle and self._pending.empty()):
            # A settled chain starts a fresh queue bound to the current loop.
            self._pending = asyncio.Queue()
        pending = self._pending
        pending.put_nowait(task)
        if idle:
            self._worker = loop.create_task(self._drain(pending))
        return self

    async def join(self) -> None:
        """Wait until every step appended so far has settled."""
        if self._pending is not None:
            await self._pending.join()

    async def _drain(self, pending: asyncio.Queue[Task]) -> None:
        while not pending.empty():
            task = pending.get_nowait()
            try:
                await self._run_step(task)
            finally:
                pending.task_done()
        # No await between the emptiness check and here, so nothing can be
        # appended without seeing the worker as finished.
        self._aborted_by = None
        self._worker = None

    async def _run_step(self, task: Task) -> None:
        if self._aborted_by is not None:
            logger.info("Skipping chained task %s after earlier failure", task.name)
            error = ChainAbortedError(
                f"Chained task '{task.name}' skipped after an earlier step failed"
            )
            error.__cause__ = self._aborted_by
            await self._notify(task, error)
            return

        try:
            result = await self._executor.run(task)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Chained task %s failed: %s", task.name, exc)
            if self._failure_policy == "abort":
                self._aborted_by = exc
            await self._notify(task, exc)
            return
        await self._notify(task, None, result)

    async def _notify(
        self,
        task: Task,
        error: BaseException | None,
        result: Any = None,
    ) -> None:
        """Invoke the task handler; handler errors are logged and swallowed."""
        handler = task.handler
        if handler is None:
            raise RuntimeError(f"Chained task '{task.name}' has no handler")
        try:
            outcome = handler(error) if error is not None else handler(None, result)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:  # noqa: BLE001
            logger.exception("Handler for chained task %s failed", task.name)
