"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Subprocess runner executing one git command per task.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

from .errors import GitProcessError, GitSpawnError, GitTimeoutError
from .tasks.types import GitCommand

logger = logging.getLogger("gitdispatch.runner")


@runtime_checkable
class Runner(Protocol):
    """Executes one command and returns its standard output."""

    async def run(self, command: GitCommand) -> str:
        """Run `command`, raising ``GitProcessError`` on failure."""
        ...


class GitRunner:
    """
    Run git through ``asyncio.create_subprocess_exec``.

    Args:
        binary: Executable invoked for every command.
        base_dir: Working directory used when a command has no ``cwd``.
        env: Extra environment variables applied to every command.
        timeout_s: Optional per-process timeout; ``None`` waits indefinitely.
    """

    def __init__(
        self,
        *,
        binary: str = "git",
        base_dir: str | Path | None = None,
        env: Mapping[str, str] | None = None,
        timeout_s: float | None = None,
    ) -> None:
        if not binary.strip():
            raise ValueError("binary must be non-empty")
        if timeout_s is not None and timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        self._binary = binary
        self._base_dir = str(base_dir) if base_dir is not None else None
        self._env = dict(env or {})
        self._timeout_s = timeout_s

    @property
    def binary(self) -> str:
        return self._binary

    @property
    def base_dir(self) -> str | None:
        return self._base_dir

    async def run(self, command: GitCommand) -> str:
        cwd = command.cwd or self._base_dir
        env = None
        if self._env or command.env:
            env = {**os.environ, **self._env, **dict(command.env or {})}

        logger.debug("Running %s %s (cwd=%s)", self._binary, " ".join(command.args), cwd)
        try:
            proc = await asyncio.create_subprocess_exec(
                self._binary,
                *command.args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=env,
            )
        except OSError as exc:
            raise GitSpawnError(
                f"Failed to start {self._binary}: {exc}",
                command_args=command.args,
            ) from exc

        try:
            stdout_b, stderr_b = await asyncio.wait_for(
                proc.communicate(), self._timeout_s
            )
        except asyncio.TimeoutError:
            proc.kill()
            stdout_b, stderr_b = await proc.communicate()
            raise GitTimeoutError(
                f"{self._binary} {_head(command)} timed out after {self._timeout_s} seconds",
                command_args=command.args,
                stdout=stdout_b.decode("utf-8", errors="replace"),
                stderr=stderr_b.decode("utf-8", errors="replace"),
            )

        stdout = stdout_b.decode("utf-8", errors="replace")
        stderr = stderr_b.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            raise GitProcessError(
                stderr.strip()
                or f"{self._binary} {_head(command)} exited with status {proc.returncode}",
                command_args=command.args,
                exit_code=proc.returncode,
                stdout=stdout,
                stderr=stderr,
            )
        return stdout


def _head(command: GitCommand) -> str:
    return command.args[0] if command.args else ""
