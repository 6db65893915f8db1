"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Scheduling primitives: the bounded executor and the chain sequencer.
"""

from .executor import RunningQueue, TaskQueueExecutor
from .sequencer import CHAIN_FAILURE_POLICIES, ChainFailurePolicy, ChainSequencer

__all__ = [
    "RunningQueue",
    "TaskQueueExecutor",
    "ChainSequencer",
    "ChainFailurePolicy",
    "CHAIN_FAILURE_POLICIES",
]
