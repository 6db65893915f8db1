"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Task builders for the supported git operations.

Builders never raise: invalid call arguments produce a task carrying a
``TaskConfigurationError`` that the executor reports when the task runs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Annotated, Union

from pydantic import BaseModel, Field, StrictStr, StringConstraints, ValidationError

from ..errors import TaskConfigurationError
from .parsers import STASH_LIST_FORMAT, parse_stash_list, parse_status
from .types import CallStyle, GitCommand, Task, TaskHandler, TaskParser

OptionValue = Union[str, int, float, bool, None]
CommandOptions = Union[Mapping[str, OptionValue], Sequence[str]]


class _OptionsArgs(BaseModel):
    options: list[StrictStr] = Field(default_factory=list)


_NonEmptyStr = Annotated[str, StringConstraints(strict=True, min_length=1)]


class _CloneArgs(_OptionsArgs):
    repo_path: _NonEmptyStr | None = None
    local_path: _NonEmptyStr | None = None


def option_args(options: CommandOptions | None) -> list[str]:
    """
    Flatten call options into command-line arguments.

    Mappings become ``key=value`` pairs; a ``None`` or ``True`` value emits the
    bare key and ``False`` omits it. Sequences are used verbatim.
    """
    if options is None:
        return []
    if isinstance(options, Mapping):
        flattened: list[str] = []
        for key, value in options.items():
            if not isinstance(key, str) or not key.strip():
                raise TaskConfigurationError(f"Invalid option name: {key!r}")
            if value is None or value is True:
                flattened.append(key)
            elif value is False:
                continue
            else:
                flattened.append(f"{key}={value}")
        return flattened
    if isinstance(options, (str, bytes)):
        raise TaskConfigurationError(
            "Options must be a mapping or a sequence of strings, not a single string"
        )
    try:
        return list(options)
    except TypeError as exc:
        raise TaskConfigurationError(
            f"Options must be a mapping or a sequence of strings, not {type(options).__name__}"
        ) from exc


def clone_task(
    repo_path: str | None = None,
    local_path: str | None = None,
    options: CommandOptions | None = None,
    *,
    handler: TaskHandler | None = None,
    cwd: str | None = None,
) -> Task:
    """Build `git clone [options] [repo_path [local_path]]`."""
    try:
        args = _CloneArgs(
            repo_path=repo_path,
            local_path=local_path,
            options=option_args(options),
        )
    except (TaskConfigurationError, ValidationError) as exc:
        return _configuration_error_task("clone", exc, handler=handler, cwd=cwd)

    command = ["clone", *args.options]
    if args.repo_path is not None:
        command.append(args.repo_path)
    if args.local_path is not None:
        if args.repo_path is None:
            return _configuration_error_task(
                "clone",
                TaskConfigurationError("clone requires repo_path when local_path is set"),
                handler=handler,
                cwd=cwd,
            )
        command.append(args.local_path)
    return _build("clone", command, handler=handler, cwd=cwd)


def status_task(
    options: CommandOptions | None = None,
    *,
    handler: TaskHandler | None = None,
    cwd: str | None = None,
) -> Task:
    """Build `git status --porcelain -b -u` parsed into a ``StatusSummary``."""
    return _options_task(
        "status",
        ["status", "--porcelain", "-b", "-u"],
        options,
        parser=parse_status,
        handler=handler,
        cwd=cwd,
    )


def stash_task(
    options: CommandOptions | None = None,
    *,
    handler: TaskHandler | None = None,
    cwd: str | None = None,
) -> Task:
    """Build `git stash [options]`; resolves to raw output."""
    return _options_task("stash", ["stash"], options, handler=handler, cwd=cwd)


def stash_list_task(
    options: CommandOptions | None = None,
    *,
    handler: TaskHandler | None = None,
    cwd: str | None = None,
) -> Task:
    """Build `git stash list` parsed into a ``StashListSummary``."""
    return _options_task(
        "stash_list",
        ["stash", "list", f"--format={STASH_LIST_FORMAT}"],
        options,
        parser=parse_stash_list,
        handler=handler,
        cwd=cwd,
    )


def _options_task(
    name: str,
    head: list[str],
    options: CommandOptions | None,
    *,
    parser: TaskParser | None = None,
    handler: TaskHandler | None,
    cwd: str | None,
) -> Task:
    try:
        args = _OptionsArgs(options=option_args(options))
    except (TaskConfigurationError, ValidationError) as exc:
        return _configuration_error_task(name, exc, handler=handler, cwd=cwd)
    return _build(name, [*head, *args.options], parser=parser, handler=handler, cwd=cwd)


def _build(
    name: str,
    args: list[str],
    *,
    parser: TaskParser | None = None,
    handler: TaskHandler | None,
    cwd: str | None,
) -> Task:
    if handler is not None and not callable(handler):
        return _configuration_error_task(
            name,
            TaskConfigurationError(f"{name} handler must be callable"),
            handler=None,
            cwd=cwd,
        )
    return Task(
        name=name,
        command=GitCommand(args=tuple(args), cwd=cwd),
        parser=parser,
        handler=handler,
        style=CallStyle.CHAINED if handler is not None else CallStyle.DIRECT,
    )


def _configuration_error_task(
    name: str,
    exc: Exception,
    *,
    handler: TaskHandler | None,
    cwd: str | None,
) -> Task:
    error = (
        exc
        if isinstance(exc, TaskConfigurationError)
        else TaskConfigurationError(f"Invalid arguments for {name}: {exc}")
    )
    if error is not exc:
        error.__cause__ = exc
    if handler is not None and not callable(handler):
        handler = None
    return Task(
        name=name,
        command=GitCommand(args=(), cwd=cwd),
        handler=handler,
        style=CallStyle.CHAINED if handler is not None else CallStyle.DIRECT,
        error=error,
    )
