"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for building dispatchers from environment variables.
"""

from __future__ import annotations

from .dispatcher import GitDispatcher
from .metrics import ExecutorMetrics
from .runner import GitRunner, Runner
from .settings import DispatcherSettings


def create_dispatcher_from_env(
    *,
    runner: Runner | None = None,
    metrics: ExecutorMetrics | None = None,
) -> GitDispatcher:
    """
    Create a dispatcher from `GITDISPATCH_*` environment variables.

    Uses the provided `runner` when supplied; otherwise builds a ``GitRunner``
    from the binary, base directory, and timeout settings.
    """
    settings = DispatcherSettings.from_env()
    if runner is None:
        runner = GitRunner(
            binary=settings.binary,
            base_dir=settings.base_dir,
            timeout_s=settings.timeout_s,
        )
    return GitDispatcher(runner, settings=settings, metrics=metrics)
