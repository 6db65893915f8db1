"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Task descriptors consumed by the executor and the chain sequencer.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from ..errors import TaskConfigurationError

TaskParser = Callable[[str], Any]


class TaskHandler(Protocol):
    """
    Completion callback for chained tasks.

    Invoked as ``handler(None, result)`` on success and ``handler(error)`` on
    failure. May return an awaitable.
    """

    def __call__(
        self, error: BaseException | None, result: Any = None
    ) -> Awaitable[None] | None: ...


class CallStyle(str, Enum):
    """Calling convention selected when a task is built."""

    DIRECT = "direct"
    CHAINED = "chained"


@dataclass(frozen=True, slots=True)
class GitCommand:
    """
    Arguments for one git invocation.

    Attributes:
        args: Arguments passed after the git binary.
        cwd: Working directory, or ``None`` for the runner default.
        env: Extra environment variables merged over the runner environment.
    """

    args: tuple[str, ...]
    cwd: str | None = None
    env: Mapping[str, str] | None = None


@dataclass(frozen=True, slots=True)
class Task:
    """
    One unit of work.

    A task carrying a ``handler`` is chained; one without is direct. The
    ``style`` tag must agree with the presence of ``handler``.
    """

    name: str
    command: GitCommand
    parser: TaskParser | None = None
    handler: TaskHandler | None = None
    style: CallStyle = CallStyle.DIRECT
    error: TaskConfigurationError | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if (self.style is CallStyle.CHAINED) != (self.handler is not None):
            raise ValueError(
                f"Task '{self.name}' style {self.style.value!r} does not match handler presence"
            )

    @property
    def is_chained(self) -> bool:
        return self.style is CallStyle.CHAINED
