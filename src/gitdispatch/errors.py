"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Exception types raised by the dispatcher, its executor, and the git runner.
"""

from __future__ import annotations

from collections.abc import Sequence


class GitDispatchError(RuntimeError):
    """Base class for dispatcher errors."""


class GitProcessError(GitDispatchError):
    """Raised when a git process exits with a non-zero status."""

    def __init__(
        self,
        message: str,
        *,
        command_args: Sequence[str] = (),
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command_args = tuple(command_args)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class GitSpawnError(GitProcessError):
    """Raised when the git binary cannot be started."""


class GitTimeoutError(GitProcessError):
    """Raised when a git process exceeds the runner timeout."""


class TaskConfigurationError(GitDispatchError, ValueError):
    """Raised for tasks built from invalid call arguments."""


class ChainAbortedError(GitDispatchError):
    """Delivered to chained steps skipped after an earlier step failed."""
