"""Reapply stored metadata onto the working tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from .config import RepoContext
from .filesystem import MissingTargetError, apply_metadata
from .models import MalformedRecordError, ReapplyAction, ReapplyResult
from .store import MetadataStore

logger = logging.getLogger(__name__)

ApplyFn = Callable[[Path, int, str, str], None]


class Reapplier:
    """Applies every stored record to the matching filesystem object.

    Failures are confined to the entry that caused them; the pass always
    visits every record.
    """

    def __init__(self, context: RepoContext, store: MetadataStore, apply_fn: ApplyFn = apply_metadata) -> None:
        self.context = context
        self.store = store
        self.apply_fn = apply_fn

    def reapply(self) -> list[ReapplyResult]:
        return [self._reapply_path(path) for path in sorted(self.store.list_all())]

    def _reapply_path(self, path: str) -> ReapplyResult:
        try:
            record = self.store.read(path)
        except (MalformedRecordError, OSError) as exc:
            logger.warning("Skipping '%s': unreadable record: %s", path, exc)
            return ReapplyResult(path=path, action=ReapplyAction.SKIPPED, details=str(exc))

        if record is None:
            return ReapplyResult(path=path, action=ReapplyAction.SKIPPED, details="Record vanished")

        try:
            self.apply_fn(self.context.absolute(path), record.mode_bits, record.owner, record.group)
        except MissingTargetError as exc:
            logger.warning("Skipping '%s': %s", path, exc)
            return ReapplyResult(path=path, action=ReapplyAction.SKIPPED, record=record, details="Path missing")
        except (LookupError, OSError) as exc:
            logger.warning("Skipping '%s': %s", path, exc)
            return ReapplyResult(path=path, action=ReapplyAction.SKIPPED, record=record, details=str(exc))

        logger.debug("applied %s to '%s'", record, path)
        return ReapplyResult(path=path, action=ReapplyAction.APPLIED, record=record)
