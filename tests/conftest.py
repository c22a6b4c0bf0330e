from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from gitmeta.config import RepoContext, Settings
from gitmeta.filesystem import MissingTargetError
from gitmeta.models import StatInfo
from gitmeta.store import MetadataStore

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not available")


class FakeStat:
    """Stat function backed by a mapping of repository paths to ``StatInfo``."""

    def __init__(self, root: Path, entries: dict[str, StatInfo]) -> None:
        self.root = root
        self.entries = dict(entries)
        self.calls: list[str] = []

    def __call__(self, path: Path) -> StatInfo:
        relative = path.relative_to(self.root).as_posix()
        self.calls.append(relative)
        try:
            value = self.entries[relative]
        except KeyError:
            raise MissingTargetError(f"'{path}' does not exist") from None
        if isinstance(value, Exception):
            raise value
        return value


def stat_info(mode: int, owner: str | int, group: str | int, *, is_symlink: bool = False) -> StatInfo:
    """Build a ``StatInfo`` from symbolic names (uid/gid 1000) or numeric ids."""

    uid = owner if isinstance(owner, int) else 1000
    gid = group if isinstance(group, int) else 1000
    return StatInfo(
        mode=mode,
        uid=uid,
        gid=gid,
        owner_name=None if isinstance(owner, int) else owner,
        group_name=None if isinstance(group, int) else group,
        is_symlink=is_symlink,
    )


@pytest.fixture
def context(tmp_path: Path) -> RepoContext:
    root = tmp_path / "repo"
    root.mkdir()
    return RepoContext(root=root, settings=Settings(nobody_id=65534))


@pytest.fixture
def store(context: RepoContext) -> MetadataStore:
    return MetadataStore(context.store_path)


@pytest.fixture
def git_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    repo = tmp_path / "work"
    repo.mkdir()
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    subprocess.run(["git", "init", "--quiet"], cwd=repo, check=True)
    return repo
