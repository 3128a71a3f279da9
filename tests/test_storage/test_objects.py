"""Tests for the content-addressed object store and atomic file helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from minigit.engine.hashing import content_hash
from minigit.exceptions import AmbiguousPrefixError, ObjectNotFoundError, StorageIOError
from minigit.storage.atomic import atomic_write_bytes, read_text_or_none, remove_file
from minigit.storage.objects import ObjectStore


# ==================================================================
# Object store
# ==================================================================

class TestObjectStore:
    """Tests for the sharded content-addressed store."""

    def test_put_returns_content_hash(self, blobs: ObjectStore) -> None:
        """put returns the SHA-256 of the stored bytes."""
        assert blobs.put(b"hello") == content_hash(b"hello")

    def test_get_returns_identical_bytes(self, blobs: ObjectStore) -> None:
        """Binary content round-trips unchanged."""
        h = blobs.put(b"\x00binary\xff")
        assert blobs.get(h) == b"\x00binary\xff"

    def test_sharded_layout(self, blobs: ObjectStore) -> None:
        """Objects live at xx/rest under the store root."""
        h = blobs.put(b"hello")
        assert (blobs.directory / h[:2] / h[2:]).is_file()

    def test_identical_content_stored_once(self, blobs: ObjectStore) -> None:
        """Duplicate content maps to one object."""
        h1 = blobs.put(b"same")
        h2 = blobs.put(b"same")
        assert h1 == h2
        assert list(blobs) == [h1]

    def test_put_keyed_is_write_once(self, blobs: ObjectStore) -> None:
        """An existing key is never overwritten."""
        key = "ab" + "0" * 62
        assert blobs.put_keyed(key, b"first") is True
        assert blobs.put_keyed(key, b"second") is False
        assert blobs.get(key) == b"first"

    def test_get_missing(self, blobs: ObjectStore) -> None:
        with pytest.raises(ObjectNotFoundError):
            blobs.get("0" * 64)

    def test_contains(self, blobs: ObjectStore) -> None:
        h = blobs.put(b"x")
        assert h in blobs
        assert blobs.contains(h)
        assert "0" * 64 not in blobs
        assert 42 not in blobs

    def test_empty_blob(self, blobs: ObjectStore) -> None:
        assert blobs.get(blobs.put(b"")) == b""


class TestFindByPrefix:
    """Tests for hash prefix lookup."""

    def test_unique_prefix(self, blobs: ObjectStore) -> None:
        h = blobs.put(b"hello")
        assert blobs.find_by_prefix(h[:4]) == h

    def test_too_short(self, blobs: ObjectStore) -> None:
        """Prefixes under four characters never match."""
        h = blobs.put(b"hello")
        assert blobs.find_by_prefix(h[:3]) is None

    def test_no_match(self, blobs: ObjectStore) -> None:
        assert blobs.find_by_prefix("abcd") is None

    def test_ambiguous(self, blobs: ObjectStore) -> None:
        """Several matches raise AmbiguousPrefixError."""
        blobs.put_keyed("abcd" + "0" * 60, b"one")
        blobs.put_keyed("abcd" + "1" * 60, b"two")
        with pytest.raises(AmbiguousPrefixError) as exc_info:
            blobs.find_by_prefix("abcd")
        assert len(exc_info.value.candidates) == 2


# ==================================================================
# Atomic file primitives
# ==================================================================

class TestAtomicWrite:
    """Tests for atomic writes and wrapped reads."""

    def test_creates_parents(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "c.txt"
        atomic_write_bytes(target, b"data")
        assert target.read_bytes() == b"data"

    def test_replaces_existing(self, tmp_path: Path) -> None:
        """An existing file is replaced whole."""
        target = tmp_path / "f"
        target.write_bytes(b"old")
        atomic_write_bytes(target, b"new")
        assert target.read_bytes() == b"new"

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        """The temp file is renamed away on success."""
        atomic_write_bytes(tmp_path / "f", b"data")
        assert [p.name for p in tmp_path.iterdir()] == ["f"]

    def test_failure_wrapped_and_target_untouched(self, tmp_path: Path) -> None:
        """OSError surfaces as StorageIOError."""
        blocker = tmp_path / "file"
        blocker.write_bytes(b"keep")
        with pytest.raises(StorageIOError) as exc_info:
            atomic_write_bytes(blocker / "child", b"data")
        assert exc_info.value.operation == "write"
        assert blocker.read_bytes() == b"keep"

    def test_read_text_or_none_missing(self, tmp_path: Path) -> None:
        assert read_text_or_none(tmp_path / "missing") is None

    def test_remove_file(self, tmp_path: Path) -> None:
        target = tmp_path / "f"
        target.write_bytes(b"")
        assert remove_file(target) is True
        assert remove_file(target) is False
