from __future__ import annotations

import logging

import pytest

from gitmeta.models import MalformedRecordError, MetadataRecord
from gitmeta.store import MetadataStore

RECORD = MetadataRecord(mode="0644", owner="alice", group="staff")


def test_read_missing_returns_none(store: MetadataStore) -> None:
    assert store.read("never-written.txt") is None


def test_write_creates_flat_single_line_file(store: MetadataStore) -> None:
    store.write("dir/b.txt", RECORD)

    key_file = store.directory / "@dir%2Fb.txt"
    assert key_file.read_text() == "0644 alice:staff\n"
    assert [child.name for child in store.directory.iterdir()] == ["@dir%2Fb.txt"]
    assert store.read("dir/b.txt") == RECORD


def test_write_overwrites_and_is_idempotent(store: MetadataStore) -> None:
    store.write("a.txt", RECORD)
    updated = MetadataRecord(mode="0600", owner="0", group="0")
    store.write("a.txt", updated)
    store.write("a.txt", updated)

    assert store.read("a.txt") == updated
    assert store.list_all() == {"a.txt"}


def test_delete_missing_is_noop(store: MetadataStore) -> None:
    store.delete("missing.txt")
    store.write("a.txt", RECORD)
    store.delete("a.txt")
    store.delete("a.txt")

    assert store.read("a.txt") is None


def test_list_all_without_directory(store: MetadataStore) -> None:
    assert not store.directory.exists()
    assert store.list_all() == set()
    assert store.is_empty()


def test_list_all_skips_malformed_keys(store: MetadataStore, caplog: pytest.LogCaptureFixture) -> None:
    store.write("a.txt", RECORD)
    store.write("dir/b.txt", RECORD)
    (store.directory / "junk").write_text("0644 a:b\n")
    (store.directory / "@").write_text("0644 a:b\n")
    (store.directory / ".@a.txt.tmp-123").write_text("partial")

    with caplog.at_level(logging.WARNING, logger="gitmeta.store"):
        paths = store.list_all()

    assert paths == {"a.txt", "dir/b.txt"}
    assert "junk" in caplog.text
    assert ".@a.txt.tmp" not in caplog.text


def test_read_corrupt_record_raises(store: MetadataStore) -> None:
    store.directory.mkdir(parents=True)
    (store.directory / "@a.txt").write_text("garbage\n")

    with pytest.raises(MalformedRecordError):
        store.read("a.txt")


def test_read_non_utf8_record_raises_malformed(store: MetadataStore) -> None:
    store.directory.mkdir(parents=True)
    store.key_path("a.txt").write_bytes(b"\xff\xfe garbage\n")

    with pytest.raises(MalformedRecordError):
        store.read("a.txt")
