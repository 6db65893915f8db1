"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Parsers turning raw git output into typed summaries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

FIELD_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e"

# Placeholders emitted by `git stash list --format=STASH_LIST_FORMAT`.
STASH_LIST_FORMAT = "%gd%x1f%H%x1f%aI%x1f%gs%x1f%aN%x1f%aE%x1e"

_CONFLICT_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})
_BRANCH_RE = re.compile(
    r"^(?P<current>.+?)(?:\.\.\.(?P<tracking>\S+))?(?: \[(?P<counts>[^\]]+)\])?$"
)


@dataclass(frozen=True, slots=True)
class FileStatus:
    """One path reported by `git status --porcelain`."""

    path: str
    index: str
    working_dir: str
    from_path: str | None = None


@dataclass(slots=True)
class StatusSummary:
    """Parsed working tree status."""

    current: str | None = None
    tracking: str | None = None
    detached: bool = False
    ahead: int = 0
    behind: int = 0
    files: list[FileStatus] = field(default_factory=list)
    not_added: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    renamed: list[tuple[str, str]] = field(default_factory=list)
    conflicted: list[str] = field(default_factory=list)
    staged: list[str] = field(default_factory=list)

    def is_clean(self) -> bool:
        return not self.files


@dataclass(frozen=True, slots=True)
class StashEntry:
    """One entry from `git stash list`."""

    ref: str
    hash: str
    date: str
    message: str
    author_name: str
    author_email: str


@dataclass(frozen=True, slots=True)
class StashListSummary:
    """Parsed stash list, newest entry first."""

    all: tuple[StashEntry, ...] = ()

    @property
    def latest(self) -> StashEntry | None:
        return self.all[0] if self.all else None

    @property
    def total(self) -> int:
        return len(self.all)


def parse_status(text: str) -> StatusSummary:
    """Parse `git status --porcelain -b` output."""
    summary = StatusSummary()
    for line in text.splitlines():
        if not line.strip():
            continue
        if line.startswith("## "):
            _parse_branch_line(line[3:], summary)
            continue
        if len(line) < 4:
            continue
        index, working_dir, rest = line[0], line[1], line[3:]
        from_path: str | None = None
        if " -> " in rest and index in ("R", "C"):
            from_path, rest = rest.split(" -> ", 1)
            from_path = _unquote(from_path)
        path = _unquote(rest)
        summary.files.append(
            FileStatus(path=path, index=index, working_dir=working_dir, from_path=from_path)
        )
        _classify(summary, index + working_dir, path, from_path)
    return summary


def parse_stash_list(text: str) -> StashListSummary:
    """Parse `git stash list` output produced with ``STASH_LIST_FORMAT``."""
    entries: list[StashEntry] = []
    for record in text.split(RECORD_SEPARATOR):
        record = record.strip("\r\n")
        if not record.strip():
            continue
        parts = record.split(FIELD_SEPARATOR)
        if len(parts) < 6:
            continue
        ref, commit, date, message, author_name, author_email = parts[:6]
        entries.append(
            StashEntry(
                ref=ref.strip(),
                hash=commit.strip(),
                date=date.strip(),
                message=message.strip(),
                author_name=author_name.strip(),
                author_email=author_email.strip(),
            )
        )
    return StashListSummary(all=tuple(entries))


def _parse_branch_line(text: str, summary: StatusSummary) -> None:
    for prefix in ("No commits yet on ", "Initial commit on "):
        if text.startswith(prefix):
            summary.current = text[len(prefix) :].strip()
            return
    if text.startswith("HEAD (no branch)"):
        summary.current = "HEAD"
        summary.detached = True
        return

    match = _BRANCH_RE.match(text.strip())
    if match is None:
        return
    summary.current = match.group("current")
    summary.tracking = match.group("tracking")
    counts = match.group("counts") or ""
    for part in counts.split(","):
        label, _, value = part.strip().partition(" ")
        if label == "ahead" and value.isdigit():
            summary.ahead = int(value)
        elif label == "behind" and value.isdigit():
            summary.behind = int(value)


def _classify(
    summary: StatusSummary, code: str, path: str, from_path: str | None
) -> None:
    if code == "??":
        summary.not_added.append(path)
        return
    if code in _CONFLICT_CODES:
        summary.conflicted.append(path)
        return

    index = code[0]
    if index == "R" and from_path is not None:
        summary.renamed.append((from_path, path))
    if index == "A":
        summary.created.append(path)
    if "D" in code:
        summary.deleted.append(path)
    if "M" in code:
        summary.modified.append(path)
    if index not in (" ", "?"):
        summary.staged.append(path)


def _unquote(path: str) -> str:
    if len(path) >= 2 and path[0] == '"' and path[-1] == '"':
        return path[1:-1]
    return path
