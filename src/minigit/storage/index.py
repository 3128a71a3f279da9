"""Staging index for MiniGit.

A persisted ``path -> blob hash`` map: the input to the next commit.
Each line of the index file is ``<path> <blob-hash>``; a removal staged
with ``rm`` uses ``-`` in place of the hash.  The whole file is rewritten
atomically on every change.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path

from minigit.engine.hashing import is_full_hash
from minigit.exceptions import CorruptObjectError
from minigit.storage.atomic import atomic_write_text, read_text_or_none

logger = logging.getLogger(__name__)

REMOVED = "-"


class StagingIndex:
    """Pending changes for the next commit, loaded from and saved to disk."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._entries: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        text = read_text_or_none(self._path)
        entries: dict[str, str] = {}
        if not text:
            return entries
        for lineno, line in enumerate(text.splitlines(), start=1):
            if not line:
                continue
            path, sep, blob_hash = line.rpartition(" ")
            if not sep or not path or not (blob_hash == REMOVED or is_full_hash(blob_hash)):
                raise CorruptObjectError("index", f"malformed line {lineno}: {line!r}")
            entries[path] = blob_hash
        return entries

    def _save(self) -> None:
        body = "".join(f"{p} {h}\n" for p, h in sorted(self._entries.items()))
        atomic_write_text(self._path, body)
        logger.debug("Wrote index with %d entries", len(self._entries))

    def stage(self, path: str, blob_hash: str) -> None:
        """Upsert one entry and persist immediately."""
        self._entries[path] = blob_hash
        self._save()

    def stage_many(self, entries: Mapping[str, str]) -> None:
        """Upsert several entries with a single write."""
        if not entries:
            return
        self._entries.update(entries)
        self._save()

    def stage_removal(self, path: str) -> None:
        self.stage(path, REMOVED)

    def unstage(self, path: str) -> None:
        if self._entries.pop(path, None) is not None:
            self._save()

    def snapshot(self) -> dict[str, str]:
        """Copy of every staged entry, removal markers included."""
        return dict(self._entries)

    def apply(self, base: Mapping[str, str]) -> dict[str, str]:
        """Overlay the staged entries on *base* to get the next commit's file map."""
        tree = dict(base)
        for path, blob_hash in self._entries.items():
            if blob_hash == REMOVED:
                tree.pop(path, None)
            else:
                tree[path] = blob_hash
        return tree

    def clear(self) -> None:
        """Empty the index.  Call only after the commit and HEAD update are durable."""
        self._entries.clear()
        self._save()

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
