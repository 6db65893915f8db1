"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Asynchronous git task dispatcher.

Runs git commands with bounded concurrency and supports a strictly ordered
callback-style chain for legacy callers.

Quick start::

    from gitdispatch import GitDispatcher

    git = GitDispatcher(concurrency=2)
    summary = await git.status()

    git.clone(repo, path, handler=on_clone).status(handler=on_status)
    await git.join()
"""

from .core import (
    CHAIN_FAILURE_POLICIES,
    ChainFailurePolicy,
    ChainSequencer,
    RunningQueue,
    TaskQueueExecutor,
)
from .dispatcher import GitDispatcher
from .errors import (
    ChainAbortedError,
    GitDispatchError,
    GitProcessError,
    GitSpawnError,
    GitTimeoutError,
    TaskConfigurationError,
)
from .factory import create_dispatcher_from_env
from .metrics import ExecutorMetrics, NoOpExecutorMetrics, PrometheusExecutorMetrics
from .runner import GitRunner, Runner
from .settings import DispatcherSettings
from .tasks import (
    CallStyle,
    GitCommand,
    StashListSummary,
    StatusSummary,
    Task,
    TaskHandler,
)

__all__ = [
    "GitDispatcher",
    "DispatcherSettings",
    "create_dispatcher_from_env",
    "TaskQueueExecutor",
    "RunningQueue",
    "ChainSequencer",
    "ChainFailurePolicy",
    "CHAIN_FAILURE_POLICIES",
    "Runner",
    "GitRunner",
    "Task",
    "TaskHandler",
    "GitCommand",
    "CallStyle",
    "StatusSummary",
    "StashListSummary",
    "ExecutorMetrics",
    "NoOpExecutorMetrics",
    "PrometheusExecutorMetrics",
    "GitDispatchError",
    "GitProcessError",
    "GitSpawnError",
    "GitTimeoutError",
    "TaskConfigurationError",
    "ChainAbortedError",
]
