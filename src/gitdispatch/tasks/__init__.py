"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Task descriptors, builders, and output parsers.
"""

from .builders import (
    CommandOptions,
    clone_task,
    option_args,
    stash_list_task,
    stash_task,
    status_task,
)
from .parsers import (
    FileStatus,
    StashEntry,
    StashListSummary,
    StatusSummary,
    parse_stash_list,
    parse_status,
)
from .types import CallStyle, GitCommand, Task, TaskHandler, TaskParser

__all__ = [
    "CallStyle",
    "GitCommand",
    "Task",
    "TaskHandler",
    "TaskParser",
    "CommandOptions",
    "option_args",
    "clone_task",
    "status_task",
    "stash_task",
    "stash_list_task",
    "FileStatus",
    "StatusSummary",
    "StashEntry",
    "StashListSummary",
    "parse_status",
    "parse_stash_list",
]
