"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Dispatcher settings and environment loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .core.sequencer import CHAIN_FAILURE_POLICIES, ChainFailurePolicy


def _env_first(*names: str, default: str | None = None) -> str | None:
    """
    Return the first non-empty environment variable in `names`.

    Args:
        *names: Environment variable names to check in order.
        default: Value returned if no non-empty variable is found.
    """
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


@dataclass(frozen=True, slots=True)
class DispatcherSettings:
    """Explicit settings used to build a dispatcher and its runner."""

    concurrency: int = 1
    binary: str = "git"
    base_dir: str | None = None
    timeout_s: float | None = None
    chain_failure_policy: ChainFailurePolicy = "continue"

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if not self.binary.strip():
            raise ValueError("binary must be non-empty")
        if self.timeout_s is not None and self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        if self.chain_failure_policy not in CHAIN_FAILURE_POLICIES:
            raise ValueError(
                f"Unknown chain failure policy: {self.chain_failure_policy}"
            )

    @staticmethod
    def from_env() -> "DispatcherSettings":
        """Load settings from `GITDISPATCH_*` environment variables."""
        timeout = _env_first("GITDISPATCH_TIMEOUT_S")
        policy = (_env_first("GITDISPATCH_CHAIN_FAILURE_POLICY", default="continue") or "continue").lower()
        return DispatcherSettings(
            concurrency=int(_env_first("GITDISPATCH_CONCURRENCY", default="1") or "1"),
            binary=_env_first("GITDISPATCH_BINARY", default="git") or "git",
            base_dir=_env_first("GITDISPATCH_BASE_DIR"),
            timeout_s=float(timeout) if timeout is not None else None,
            chain_failure_policy=policy,  # type: ignore[arg-type]
        )
