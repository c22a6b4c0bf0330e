"""Narrow interface to the git command line."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 60


class VcsEnvironmentError(RuntimeError):
    """Raised when no usable git repository can be reached."""


def _git(args: Sequence[str], cwd: Path, *, timeout: int = GIT_TIMEOUT_SECONDS) -> bytes:
    """Run git and return its stdout, raising ``VcsEnvironmentError`` on failure."""

    command = ["git", *args]
    logger.debug("running %s in %s", " ".join(command), cwd)
    try:
        result = subprocess.run(command, cwd=str(cwd), capture_output=True, timeout=timeout)
    except FileNotFoundError as exc:
        raise VcsEnvironmentError("git executable not found on PATH") from exc
    except subprocess.TimeoutExpired as exc:
        raise VcsEnvironmentError(f"git {' '.join(args)} timed out after {timeout}s") from exc
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise VcsEnvironmentError(f"git {' '.join(args)} failed: {stderr}")
    return result.stdout


class GitRepository:
    """A git working tree addressed by its top-level directory."""

    def __init__(self, root: Path) -> None:
        self.root = root

    @classmethod
    def discover(cls, start: Path | None = None) -> "GitRepository":
        start = start or Path.cwd()
        try:
            output = _git(["rev-parse", "--show-toplevel"], start)
        except VcsEnvironmentError as exc:
            raise VcsEnvironmentError(f"'{start}' is not inside a git working tree ({exc})") from exc
        return cls(Path(output.decode().strip()))

    def hooks_dir(self) -> Path:
        output = _git(["rev-parse", "--git-path", "hooks"], self.root).decode().strip()
        path = Path(output)
        return path if path.is_absolute() else self.root / path

    def list_tracked_paths(self, exclude: str | None = None) -> list[str]:
        """Return tracked file paths relative to the root, in index order."""

        output = _git(["ls-files", "-z", "--full-name"], self.root)
        paths = [entry for entry in output.decode("utf-8", errors="surrogateescape").split("\0") if entry]
        if exclude is None:
            return paths
        prefix = f"{exclude}/"
        return [path for path in paths if path != exclude and not path.startswith(prefix)]

    def stage(self, path: str) -> None:
        _git(["add", "--all", "--", path], self.root)

    def unstage(self, path: str) -> None:
        _git(["rm", "-r", "--cached", "--quiet", "--ignore-unmatch", "--", path], self.root)
