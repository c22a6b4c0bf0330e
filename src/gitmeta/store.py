"""Flat-file metadata database for gitmeta."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from .codec import MalformedKeyError, decode_key, encode_key
from .models import MalformedRecordError, MetadataRecord

logger = logging.getLogger(__name__)


class MetadataStore:
    """Stores one single-line record file per repository path.

    Keys are flat filenames produced by :func:`gitmeta.codec.encode_key`, so
    the store never contains subdirectories and a metadata change shows up as a
    one-line diff in version control.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def key_path(self, path: str) -> Path:
        return self.directory / encode_key(path)

    def read(self, path: str) -> MetadataRecord | None:
        try:
            text = self.key_path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise MalformedRecordError(f"Record for '{path}' is not valid UTF-8") from exc
        return MetadataRecord.parse(text)

    def write(self, path: str, record: MetadataRecord) -> None:
        target = self.key_path(path)
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.tmp-", dir=self.directory)
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(f"{record.format()}\n")
            os.chmod(temp_path, 0o644)
            os.replace(temp_path, target)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

    def delete(self, path: str) -> None:
        self.key_path(path).unlink(missing_ok=True)

    def list_all(self) -> set[str]:
        """Return every stored repository path, skipping malformed keys."""

        if not self.directory.is_dir():
            return set()

        paths: set[str] = set()
        for child in self.directory.iterdir():
            if child.name.startswith("."):
                continue
            try:
                paths.add(decode_key(child.name))
            except MalformedKeyError as exc:
                logger.warning("Skipping malformed store entry '%s': %s", child.name, exc)
        return paths

    def is_empty(self) -> bool:
        return not self.list_all()
