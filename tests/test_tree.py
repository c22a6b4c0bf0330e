from __future__ import annotations

from gitmeta.models import Snapshot
from gitmeta.tree import TreeLister, build_snapshot, parent_directories


class FakeVcs:
    def __init__(self, paths: list[str]) -> None:
        self.paths = paths
        self.excluded: list[str | None] = []

    def list_tracked_paths(self, exclude: str | None = None) -> list[str]:
        self.excluded.append(exclude)
        return list(self.paths)


def test_parent_directories_nearest_first() -> None:
    assert parent_directories("a/b/c.txt") == ["a/b", "a"]
    assert parent_directories("top.txt") == []


def test_build_snapshot_adds_each_directory_once() -> None:
    snapshot = build_snapshot(["a.txt", "dir/b.txt", "dir/c.txt", "dir/sub/d.txt"])

    assert snapshot.paths == ("a.txt", "dir", "dir/b.txt", "dir/c.txt", "dir/sub", "dir/sub/d.txt")


def test_build_snapshot_excludes_store_directory() -> None:
    snapshot = build_snapshot([".gitmeta/@a.txt", ".gitmeta", "a.txt", ".gitmetafile"], exclude=".gitmeta")

    assert snapshot == Snapshot(["a.txt", ".gitmetafile"])


def test_tree_lister_uses_store_dir() -> None:
    vcs = FakeVcs(["dir/b.txt", "a.txt", ".gitmeta/@a.txt"])
    lister = TreeLister(vcs, ".gitmeta")  # type: ignore[arg-type]

    snapshot = lister.current_snapshot()

    assert vcs.excluded == [".gitmeta"]
    assert snapshot.paths == ("a.txt", "dir", "dir/b.txt")
