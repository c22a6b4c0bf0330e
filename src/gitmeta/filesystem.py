"""Filesystem helpers for gitmeta: stat and apply mode/ownership."""

from __future__ import annotations

import grp
import logging
import os
import pwd
import stat
import sys
from pathlib import Path

from .models import StatInfo

logger = logging.getLogger(__name__)

# uid/gid -2 as seen through the unsigned stat fields on macOS.
DARWIN_NOBODY_ID = 4294967294
POSIX_NOBODY_ID = 65534


class MissingTargetError(RuntimeError):
    """Raised when the path to stat or modify no longer exists."""


def default_nobody_id(platform: str | None = None) -> int:
    """Return the conventional "nobody" id for ``platform``."""

    platform = platform or sys.platform
    if platform == "darwin":
        return DARWIN_NOBODY_ID
    return POSIX_NOBODY_ID


def user_name(uid: int) -> str | None:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return None


def group_name(gid: int) -> str | None:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return None


def stat_path(path: Path) -> StatInfo:
    """Return mode and ownership for ``path`` without following symlinks."""

    try:
        stat_result = path.lstat()
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise MissingTargetError(f"'{path}' does not exist") from exc

    return StatInfo(
        mode=stat.S_IMODE(stat_result.st_mode),
        uid=stat_result.st_uid,
        gid=stat_result.st_gid,
        owner_name=user_name(stat_result.st_uid),
        group_name=group_name(stat_result.st_gid),
        is_symlink=stat.S_ISLNK(stat_result.st_mode),
    )


def resolve_uid(spec: str) -> int:
    """Return the uid for a symbolic user name or numeric id string."""

    if spec.isdigit():
        return int(spec)
    try:
        return pwd.getpwnam(spec).pw_uid
    except KeyError:
        raise LookupError(f"Unknown user '{spec}'") from None


def resolve_gid(spec: str) -> int:
    """Return the gid for a symbolic group name or numeric id string."""

    if spec.isdigit():
        return int(spec)
    try:
        return grp.getgrnam(spec).gr_gid
    except KeyError:
        raise LookupError(f"Unknown group '{spec}'") from None


def apply_metadata(path: Path, mode: int, owner: str, group: str) -> None:
    """Set mode and ownership of ``path``.

    Ownership is changed before the mode because ``chown`` clears the
    setuid/setgid bits. Each call is skipped when the value already matches,
    so unprivileged users can restore files they already own.
    Symlink modes are left alone.
    """

    try:
        current = path.lstat()
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise MissingTargetError(f"'{path}' does not exist") from exc

    uid = resolve_uid(owner)
    gid = resolve_gid(group)
    if (current.st_uid, current.st_gid) != (uid, gid):
        logger.debug("chown %s %d:%d", path, uid, gid)
        os.chown(path, uid, gid, follow_symlinks=False)

    if stat.S_ISLNK(current.st_mode):
        return
    # chown may have dropped setuid/setgid, so compare against a fresh stat.
    if stat.S_IMODE(path.lstat().st_mode) != mode:
        logger.debug("chmod %s %04o", path, mode)
        os.chmod(path, mode)
