"""High level orchestration for gitmeta operations."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import DEFAULT_CONFIG_FILENAME, RepoContext, write_settings
from .filesystem import apply_metadata, stat_path
from .hooks import HookInstaller
from .models import ReapplyResult, ReconcileReport
from .reapply import ApplyFn, Reapplier
from .reconcile import Reconciler, StatFn
from .store import MetadataStore
from .tree import TreeLister
from .vcs import GitRepository

logger = logging.getLogger(__name__)


class GitmetaManager:
    """Coordinates the commit, merge, status and init operations."""

    def __init__(
        self,
        context: RepoContext,
        vcs: GitRepository,
        *,
        stat_fn: StatFn = stat_path,
        apply_fn: ApplyFn = apply_metadata,
    ) -> None:
        self.context = context
        self.vcs = vcs
        self.store = MetadataStore(context.store_path)
        self.lister = TreeLister(vcs, context.settings.store_dir)
        self.reconciler = Reconciler(context, self.store, stat_fn)
        self.reapplier = Reapplier(context, self.store, apply_fn)

    def commit(self, *, dev_mode: bool = False) -> ReconcileReport:
        """Record current metadata and stage the store directory."""

        report = self.reconciler.reconcile(self.lister.current_snapshot(), dev_mode=dev_mode)
        store_dir = self.context.settings.store_dir
        if self.store.is_empty():
            self.vcs.unstage(store_dir)
        else:
            self.vcs.stage(store_dir)
        logger.debug("reconciled store: %s", report.summary())
        return report

    def status(self) -> ReconcileReport:
        """Return the changes ``commit`` would make, without writing."""

        return self.reconciler.reconcile(self.lister.current_snapshot(), dry_run=True)

    def merge(self) -> list[ReapplyResult]:
        return self.reapplier.reapply()

    def install_hooks(self, *, dev_mode: bool = False) -> list[tuple[Path, str, bool]]:
        installer = HookInstaller(self.vcs.hooks_dir(), self.context.settings.command)
        return installer.install(dev_mode=dev_mode)

    def write_config(self) -> Path | None:
        """Write the active settings to the repository config file.

        Returns ``None`` when a config file already exists.
        """

        path = self.context.root / DEFAULT_CONFIG_FILENAME
        if path.exists():
            return None
        write_settings(self.context.settings, path)
        return path
