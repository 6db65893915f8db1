"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Public facade routing git operations to the executor or the chain sequencer.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Union

from .core.executor import TaskQueueExecutor
from .core.sequencer import ChainSequencer
from .errors import TaskConfigurationError
from .metrics import ExecutorMetrics
from .runner import GitRunner, Runner
from .settings import DispatcherSettings
from .tasks.builders import (
    CommandOptions,
    clone_task,
    stash_list_task,
    stash_task,
    status_task,
)
from .tasks.types import CallStyle, Task, TaskHandler

logger = logging.getLogger("gitdispatch.dispatcher")

DispatchResult = Union["GitDispatcher", "asyncio.Future[Any]"]


class GitDispatcher:
    """
    Entry point for running git operations.

    Every operation accepts an optional ``handler``. Without one, the call
    returns an awaitable resolving to the result and tasks run concurrently up
    to the configured limit. With one, the call returns the dispatcher and the
    task joins a strictly ordered chain; the handler later receives
    ``handler(None, result)`` or ``handler(error)``.

    Operations must be called with a running event loop.
    """

    def __init__(
        self,
        runner: Runner | None = None,
        *,
        settings: DispatcherSettings | None = None,
        concurrency: int | None = None,
        metrics: ExecutorMetrics | None = None,
    ) -> None:
        self._settings = settings or DispatcherSettings()
        if runner is None:
            runner = GitRunner(
                binary=self._settings.binary,
                base_dir=self._settings.base_dir,
                timeout_s=self._settings.timeout_s,
            )
        self._runner = runner
        self._executor = TaskQueueExecutor(
            runner,
            concurrency=concurrency if concurrency is not None else self._settings.concurrency,
            metrics=metrics,
        )
        self._sequencer = ChainSequencer(
            self._executor,
            failure_policy=self._settings.chain_failure_policy,
        )
        self._cwd: str | None = None

    @property
    def executor(self) -> TaskQueueExecutor:
        return self._executor

    @property
    def sequencer(self) -> ChainSequencer:
        return self._sequencer

    def cwd(self, path: str | Path) -> GitDispatcher:
        """Set the working directory for operations built after this call."""
        self._cwd = str(path)
        return self

    def clone(
        self,
        repo_path: str | None = None,
        local_path: str | None = None,
        options: CommandOptions | None = None,
        *,
        handler: TaskHandler | None = None,
    ) -> DispatchResult:
        """Clone a repository."""
        return self._dispatch(
            clone_task(repo_path, local_path, options, handler=handler, cwd=self._cwd)
        )

    def mirror(
        self,
        repo_path: str,
        local_path: str,
        options: CommandOptions | None = None,
        *,
        handler: TaskHandler | None = None,
    ) -> DispatchResult:
        """Mirror a repository: ``clone`` with ``--mirror``."""
        mirror_options: Any
        if options is None:
            mirror_options = ["--mirror"]
        elif isinstance(options, Mapping):
            mirror_options = {"--mirror": None, **options}
        elif isinstance(options, Sequence) and not isinstance(options, (str, bytes)):
            mirror_options = ["--mirror", *options]
        else:
            # Rejected by the clone builder.
            mirror_options = options
        return self.clone(repo_path, local_path, mirror_options, handler=handler)

    def status(
        self,
        options: CommandOptions | None = None,
        *,
        handler: TaskHandler | None = None,
    ) -> DispatchResult:
        """Check the status of the local repository."""
        return self._dispatch(status_task(options, handler=handler, cwd=self._cwd))

    def stash(
        self,
        options: CommandOptions | None = None,
        *,
        handler: TaskHandler | None = None,
    ) -> DispatchResult:
        """Stash the local working tree."""
        return self._dispatch(stash_task(options, handler=handler, cwd=self._cwd))

    def stash_list(
        self,
        options: CommandOptions | None = None,
        *,
        handler: TaskHandler | None = None,
    ) -> DispatchResult:
        """List the stashes of the local repository."""
        return self._dispatch(stash_list_task(options, handler=handler, cwd=self._cwd))

    def submit(self, tasks: Task | Sequence[Task]) -> asyncio.Future[Any]:
        """Run a direct task or task group through the executor."""
        return asyncio.ensure_future(self._run_direct(tasks))

    async def join(self) -> None:
        """Wait for every chained step appended so far to settle."""
        await self._sequencer.join()

    def _dispatch(self, task: Task) -> DispatchResult:
        logger.debug("Dispatching %s as %s task", task.name, task.style.value)
        if task.style is CallStyle.CHAINED:
            self._sequencer.enqueue(task)
            return self
        return asyncio.ensure_future(self._executor.run(task))

    async def _run_direct(self, tasks: Task | Sequence[Task]) -> Any:
        group = [tasks] if isinstance(tasks, Task) else list(tasks)
        chained = [task.name for task in group if task.is_chained]
        if chained:
            raise TaskConfigurationError(
                f"Chained tasks cannot be submitted as a group: {', '.join(chained)}"
            )
        return await self._executor.run(tasks)
