"""Content-addressed object storage for MiniGit.

Objects live under ``<dir>/<first two hex chars>/<rest>``.  Writes are
write-once: an existing object is never rewritten, since the same key
implies the same logical content.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from minigit.engine.hashing import content_hash
from minigit.exceptions import AmbiguousPrefixError, ObjectNotFoundError, StorageIOError
from minigit.storage.atomic import atomic_write_bytes, read_bytes

logger = logging.getLogger(__name__)


class ObjectStore:
    """Immutable byte objects keyed by hash."""

    def __init__(self, directory: Path) -> None:
        self._dir = directory

    @property
    def directory(self) -> Path:
        return self._dir

    def _path_for(self, object_hash: str) -> Path:
        if len(object_hash) < 3 or "/" in object_hash or "\\" in object_hash:
            raise ObjectNotFoundError(object_hash)
        return self._dir / object_hash[:2] / object_hash[2:]

    def put(self, data: bytes) -> str:
        """Store *data* under its SHA-256 hash and return the hash."""
        object_hash = content_hash(data)
        self.put_keyed(object_hash, data)
        return object_hash

    def put_keyed(self, object_hash: str, data: bytes) -> bool:
        """Store *data* under a caller-derived key.

        Used for commits, whose key is computed from their logical fields
        rather than their serialized bytes.

        Returns:
            True if the object was written, False if it already existed.
        """
        path = self._path_for(object_hash)
        if path.exists():
            logger.debug("Object %s already stored", object_hash[:12])
            return False
        atomic_write_bytes(path, data)
        logger.debug("Stored object %s (%d bytes)", object_hash[:12], len(data))
        return True

    def get(self, object_hash: str) -> bytes:
        """Return the stored bytes.

        Raises:
            ObjectNotFoundError: If no object has this hash.
        """
        try:
            return read_bytes(self._path_for(object_hash))
        except FileNotFoundError:
            raise ObjectNotFoundError(object_hash) from None
        except IsADirectoryError:
            raise ObjectNotFoundError(object_hash) from None

    def contains(self, object_hash: str) -> bool:
        try:
            return self._path_for(object_hash).is_file()
        except ObjectNotFoundError:
            return False

    def __contains__(self, object_hash: object) -> bool:
        return isinstance(object_hash, str) and self.contains(object_hash)

    def __iter__(self) -> Iterator[str]:
        """Yield every stored hash (order unspecified)."""
        if not self._dir.is_dir():
            return
        try:
            for shard in self._dir.iterdir():
                if not shard.is_dir() or len(shard.name) != 2:
                    continue
                for entry in shard.iterdir():
                    if entry.is_file() and not entry.name.startswith(".tmp_"):
                        yield shard.name + entry.name
        except OSError as e:
            raise StorageIOError("list", str(self._dir), e) from e

    def find_by_prefix(self, prefix: str) -> str | None:
        """Resolve a unique hash prefix (min 4 chars).

        Returns None when nothing matches.

        Raises:
            AmbiguousPrefixError: If several objects match.
        """
        if len(prefix) < 4:
            return None
        shard = self._dir / prefix[:2]
        if not shard.is_dir():
            return None
        rest = prefix[2:]
        try:
            matches = sorted(
                prefix[:2] + entry.name
                for entry in shard.iterdir()
                if entry.is_file() and entry.name.startswith(rest)
            )
        except OSError as e:
            raise StorageIOError("list", str(shard), e) from e
        if len(matches) > 1:
            raise AmbiguousPrefixError(prefix, matches)
        return matches[0] if matches else None
