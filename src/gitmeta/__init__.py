"""Core package for the gitmeta project."""

from .cli import app, run
from .codec import MalformedKeyError, decode_key, encode_key
from .config import ConfigError, RepoContext, Settings
from .filesystem import MissingTargetError
from .manager import GitmetaManager
from .models import (
    MalformedRecordError,
    MetadataRecord,
    ReapplyAction,
    ReapplyResult,
    ReconcileAction,
    ReconcileChange,
    ReconcileReport,
    Snapshot,
    StatInfo,
)
from .reapply import Reapplier
from .reconcile import Reconciler
from .store import MetadataStore
from .tree import TreeLister
from .vcs import GitRepository, VcsEnvironmentError

__all__ = [
    "ConfigError",
    "GitRepository",
    "GitmetaManager",
    "MalformedKeyError",
    "MalformedRecordError",
    "MetadataRecord",
    "MetadataStore",
    "MissingTargetError",
    "ReapplyAction",
    "ReapplyResult",
    "Reapplier",
    "ReconcileAction",
    "ReconcileChange",
    "ReconcileReport",
    "Reconciler",
    "RepoContext",
    "Settings",
    "Snapshot",
    "StatInfo",
    "TreeLister",
    "VcsEnvironmentError",
    "decode_key",
    "encode_key",
    "app",
    "run",
]
