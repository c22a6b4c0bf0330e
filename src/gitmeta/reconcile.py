"""Reconcile live filesystem metadata with the metadata store."""

from __future__ import annotations

import errno
import logging
from pathlib import Path
from typing import Callable

from .config import RepoContext, Settings
from .filesystem import MissingTargetError, stat_path
from .models import (
    MalformedRecordError,
    MetadataRecord,
    ReconcileAction,
    ReconcileChange,
    ReconcileReport,
    Snapshot,
    StatInfo,
)
from .store import MetadataStore

logger = logging.getLogger(__name__)

StatFn = Callable[[Path], StatInfo]


def _describe_os_error(exc: OSError) -> str:
    if exc.errno == errno.ENAMETOOLONG:
        return f"store key exceeds the filesystem's file name limit ({exc})"
    return str(exc)


def _id_spec(numeric_id: int, name: str | None, pinned: bool) -> str:
    if pinned or name is None:
        return str(numeric_id)
    return name


def record_from_stat(info: StatInfo, settings: Settings) -> MetadataRecord:
    """Build the record stored for a path with the given stat information.

    Owner and group are recorded by name so records stay portable across
    machines, except for root and nobody, which are always recorded by id.
    """

    pinned = {0, settings.nobody_id}
    if settings.pin_group_by_owner:
        group_pinned = info.gid == 0 or info.uid == settings.nobody_id
    else:
        group_pinned = info.gid in pinned

    return MetadataRecord(
        mode=settings.symlink_mode if info.is_symlink else f"{info.mode:04o}",
        owner=_id_spec(info.uid, info.owner_name, info.uid in pinned),
        group=_id_spec(info.gid, info.group_name, group_pinned),
    )


class Reconciler:
    """Brings the metadata store in line with a snapshot of the working tree.

    Every mutation is applied to the store as soon as it is discovered, so an
    interrupted run leaves a store that the next run converges from.
    """

    def __init__(self, context: RepoContext, store: MetadataStore, stat_fn: StatFn = stat_path) -> None:
        self.context = context
        self.store = store
        self.stat_fn = stat_fn

    def reconcile(self, snapshot: Snapshot, *, dev_mode: bool = False, dry_run: bool = False) -> ReconcileReport:
        changes = self.prune(snapshot, dry_run=dry_run)
        changes.extend(self.update(snapshot, dev_mode=dev_mode, dry_run=dry_run))
        return ReconcileReport(changes=tuple(changes))

    def prune(self, snapshot: Snapshot, *, dry_run: bool = False) -> list[ReconcileChange]:
        """Delete stored records for paths missing from ``snapshot``."""

        changes: list[ReconcileChange] = []
        for path in sorted(self.store.list_all()):
            if path in snapshot:
                continue
            try:
                old = self._read(path)
                if not dry_run:
                    self.store.delete(path)
            except OSError as exc:
                logger.warning("Could not remove record for '%s': %s", path, _describe_os_error(exc))
                continue
            changes.append(ReconcileChange(path=path, action=ReconcileAction.REMOVED, old=old))
        return changes

    def update(self, snapshot: Snapshot, *, dev_mode: bool = False, dry_run: bool = False) -> list[ReconcileChange]:
        """Add or refresh records for every path in ``snapshot``."""

        changes: list[ReconcileChange] = []
        for path in snapshot:
            try:
                change = self._update_path(path, dev_mode=dev_mode, dry_run=dry_run)
            except MissingTargetError:
                logger.debug("'%s' is tracked but missing on disk; skipping", path)
                continue
            except OSError as exc:
                logger.warning("Skipping '%s': %s", path, _describe_os_error(exc))
                continue
            if change is not None:
                changes.append(change)
        return changes

    # ------------------------------------------------------------------
    # Internal helpers

    def _update_path(self, path: str, *, dev_mode: bool, dry_run: bool) -> ReconcileChange | None:
        settings = self.context.settings
        current = record_from_stat(self.stat_fn(self.context.absolute(path)), settings)
        existing = self._read(path)
        if existing == current:
            return None

        if dev_mode:
            if existing is not None:
                return None
            current = settings.placeholder_record

        if not dry_run:
            self.store.write(path, current)

        action = ReconcileAction.ADDED if existing is None else ReconcileAction.CHANGED
        return ReconcileChange(path=path, action=action, old=existing, new=current)

    def _read(self, path: str) -> MetadataRecord | None:
        try:
            return self.store.read(path)
        except MalformedRecordError as exc:
            logger.warning("Ignoring corrupt record for '%s': %s", path, exc)
            return None
