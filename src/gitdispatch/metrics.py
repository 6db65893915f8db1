"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Counter metrics emitted by the task queue executor.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

EXECUTOR_GROUPS_TOTAL = "executor_groups_total"
EXECUTOR_TASKS_COMPLETED_TOTAL = "executor_tasks_completed_total"
EXECUTOR_TASKS_FAILED_TOTAL = "executor_tasks_failed_total"

# name -> (help text, label names)
EXECUTOR_COUNTERS: dict[str, tuple[str, tuple[str, ...]]] = {
    EXECUTOR_GROUPS_TOTAL: (
        "Task groups submitted to the executor, single tasks included.",
        (),
    ),
    EXECUTOR_TASKS_COMPLETED_TOTAL: (
        "Git tasks whose runner call and parser both succeeded.",
        ("task",),
    ),
    EXECUTOR_TASKS_FAILED_TOTAL: (
        "Git tasks that failed in the runner, in the parser, or on invalid arguments.",
        ("task",),
    ),
}


class ExecutorMetrics(Protocol):
    """Counter sink used by the executor."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        """Increment one of the ``EXECUTOR_COUNTERS``."""


class NoOpExecutorMetrics:
    """Used when the dispatcher is built without a metrics backend."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        _ = name
        _ = value
        _ = tags


class PrometheusExecutorMetrics(ExecutorMetrics):
    """
    Prometheus counters for the executor.

    All counters are declared up front, so they are exported at zero before
    the first git task runs. Tasks are labelled by operation name
    (``clone``, ``status``...); a missing ``task`` tag is recorded as
    ``unknown``.

    Requires `prometheus_client` package.
    """

    def __init__(self, *, namespace: str = "gitdispatch", registry: Any | None = None) -> None:
        try:
            from prometheus_client import REGISTRY, Counter
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError(
                "PrometheusExecutorMetrics requires `prometheus_client` to be installed."
            ) from exc

        target = registry if registry is not None else REGISTRY
        self._counters: dict[str, Any] = {
            name: Counter(
                name=name,
                documentation=documentation,
                namespace=namespace,
                labelnames=label_names,
                registry=target,
            )
            for name, (documentation, label_names) in EXECUTOR_COUNTERS.items()
        }

    def incr(self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None) -> None:
        counter = self._counters.get(name)
        if counter is None:
            raise ValueError(f"Unknown executor metric: {name}")
        _, label_names = EXECUTOR_COUNTERS[name]
        if label_names:
            tags = tags or {}
            counter.labels(*(str(tags.get(label, "unknown")) for label in label_names)).inc(value)
        else:
            counter.inc(value)
