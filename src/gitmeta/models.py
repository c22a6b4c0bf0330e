"""Shared models and enums for gitmeta."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

from .codec import MalformedKeyError

_RECORD_PATTERN = re.compile(r"^(?P<mode>[0-7]{3,4}) (?P<owner>[^\s:]+):(?P<group>[^\s:]+)$")


class MalformedRecordError(MalformedKeyError):
    """Raised when a stored record line cannot be parsed."""


@dataclass(frozen=True, slots=True)
class MetadataRecord:
    """Mode and ownership recorded for a single repository path."""

    mode: str
    owner: str
    group: str

    @classmethod
    def parse(cls, line: str) -> "MetadataRecord":
        """Parse a ``"<mode> <owner>:<group>"`` line."""

        match = _RECORD_PATTERN.match(line.strip())
        if match is None:
            raise MalformedRecordError(f"Invalid metadata record '{line.strip()}'")
        return cls(
            mode=match["mode"].zfill(4),
            owner=match["owner"],
            group=match["group"],
        )

    @property
    def mode_bits(self) -> int:
        return int(self.mode, 8)

    def format(self) -> str:
        return f"{self.mode} {self.owner}:{self.group}"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True, slots=True)
class StatInfo:
    """Raw mode and ownership of a filesystem object."""

    mode: int
    uid: int
    gid: int
    owner_name: str | None
    group_name: str | None
    is_symlink: bool = False


class Snapshot:
    """Deduplicated, deterministically ordered set of repository paths."""

    __slots__ = ("_paths", "_members")

    def __init__(self, paths: Iterable[str] = ()) -> None:
        self._members = frozenset(paths)
        self._paths = tuple(sorted(self._members))

    @property
    def paths(self) -> tuple[str, ...]:
        return self._paths

    def __contains__(self, path: object) -> bool:
        return path in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Snapshot):
            return self._members == other._members
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._members)

    def __repr__(self) -> str:
        return f"Snapshot({list(self._paths)!r})"


class ReconcileAction(str, Enum):
    """Kinds of store mutations made during reconciliation."""

    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


@dataclass(frozen=True, slots=True)
class ReconcileChange:
    """A single store mutation discovered during reconciliation."""

    path: str
    action: ReconcileAction
    old: MetadataRecord | None = None
    new: MetadataRecord | None = None

    def describe(self) -> str:
        if self.old is not None:
            old = self.old.format()
        else:
            old = "unreadable" if self.action is ReconcileAction.REMOVED else "new file"
        new = self.new.format() if self.new is not None else "deleted"
        return f"{self.path}: {old} -> {new}"


@dataclass(frozen=True, slots=True)
class ReconcileReport:
    """Collection of changes made by a reconciliation run."""

    changes: tuple[ReconcileChange, ...] = ()

    def _count(self, action: ReconcileAction) -> int:
        return sum(1 for change in self.changes if change.action is action)

    @property
    def added(self) -> int:
        return self._count(ReconcileAction.ADDED)

    @property
    def removed(self) -> int:
        return self._count(ReconcileAction.REMOVED)

    @property
    def changed(self) -> int:
        return self._count(ReconcileAction.CHANGED)

    def summary(self) -> str:
        return f"added:{self.added}, removed:{self.removed}, changed:{self.changed}"


class ReapplyAction(str, Enum):
    """Outcome of reapplying a stored record."""

    APPLIED = "applied"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class ReapplyResult:
    """Result emitted for each stored entry during reapply."""

    path: str
    action: ReapplyAction
    record: MetadataRecord | None = None
    details: str | None = None
