"""Build snapshots of the paths tracked by the repository."""

from __future__ import annotations

from posixpath import dirname
from typing import Iterable

from .models import Snapshot
from .vcs import GitRepository


def parent_directories(path: str) -> list[str]:
    """Return every ancestor directory of ``path``, nearest first."""

    parents: list[str] = []
    parent = dirname(path)
    while parent:
        parents.append(parent)
        parent = dirname(parent)
    return parents


def build_snapshot(files: Iterable[str], exclude: str | None = None) -> Snapshot:
    """Return a snapshot of ``files`` plus their synthesized directory entries."""

    prefix = f"{exclude}/" if exclude else None
    paths: set[str] = set()
    for path in files:
        if exclude and (path == exclude or path.startswith(prefix)):
            continue
        paths.add(path)
        paths.update(parent_directories(path))
    return Snapshot(paths)


class TreeLister:
    """Lists files and directories tracked by git, minus the store directory."""

    def __init__(self, vcs: GitRepository, store_dir: str) -> None:
        self.vcs = vcs
        self.store_dir = store_dir

    def current_snapshot(self) -> Snapshot:
        files = self.vcs.list_tracked_paths(exclude=self.store_dir)
        return build_snapshot(files, exclude=self.store_dir)
