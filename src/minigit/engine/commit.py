"""Commit graph for MiniGit.

Builds commit nodes, serializes them to the canonical text form, and
stores / loads them by their identity hash.

Canonical form (fields in fixed order)::

    minigit-commit 1
    tree
    blob <hash> <path>        one per tracked file, paths sorted
    parent <hash>             zero, one or two lines, order preserved
    author <identity> <iso-timestamp>
    committer <identity> <iso-timestamp>

    <message>
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone

from minigit.engine.hashing import commit_hash as compute_commit_hash
from minigit.engine.hashing import is_full_hash
from minigit.exceptions import CorruptObjectError
from minigit.models.commit import CommitNode
from minigit.storage.objects import ObjectStore
from minigit.storage.worktree import is_safe_repo_path

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
_VERSION_LINE = f"minigit-commit {FORMAT_VERSION}"


def serialize_commit(node: CommitNode) -> bytes:
    """Render a commit in canonical text form."""
    lines = [_VERSION_LINE, "tree"]
    for path, blob_hash in sorted(node.tracked_files.items()):
        lines.append(f"blob {blob_hash} {path}")
    for parent in node.parent_hashes:
        lines.append(f"parent {parent}")
    stamp = node.created_at.isoformat()
    lines.append(f"author {node.author} {stamp}")
    lines.append(f"committer {node.author} {stamp}")
    lines.append("")
    lines.append(node.message)
    return ("\n".join(lines) + "\n").encode("utf-8")


def _split_identity(line: str, prefix: str, object_hash: str) -> tuple[str, datetime]:
    identity, _, stamp = line[len(prefix):].rpartition(" ")
    try:
        created_at = datetime.fromisoformat(stamp)
    except ValueError:
        raise CorruptObjectError(object_hash, f"bad timestamp {stamp!r}") from None
    return identity, created_at


def parse_commit(object_hash: str, data: bytes) -> CommitNode:
    """Parse canonical bytes into a CommitNode.

    Raises:
        CorruptObjectError: On any deviation from the canonical form, or if
            the recomputed hash does not match *object_hash*.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        raise CorruptObjectError(object_hash, "not valid UTF-8") from None

    header, sep, message = text.partition("\n\n")
    if not sep:
        raise CorruptObjectError(object_hash, "missing blank line before message")
    if message.endswith("\n"):
        message = message[:-1]

    lines = header.split("\n")
    if not lines or lines[0] != _VERSION_LINE:
        raise CorruptObjectError(object_hash, f"unsupported format marker {lines[0]!r}")
    if len(lines) < 4 or lines[1] != "tree":
        raise CorruptObjectError(object_hash, "missing tree section")

    files: dict[str, str] = {}
    parents: list[str] = []
    pos = 2
    while pos < len(lines) and lines[pos].startswith("blob "):
        _, blob_hash, path = (lines[pos].split(" ", 2) + [""])[:3]
        if not is_full_hash(blob_hash) or not is_safe_repo_path(path):
            raise CorruptObjectError(object_hash, f"bad blob line {lines[pos]!r}")
        files[path] = blob_hash
        pos += 1
    while pos < len(lines) and lines[pos].startswith("parent "):
        parent = lines[pos][len("parent "):]
        if not is_full_hash(parent):
            raise CorruptObjectError(object_hash, f"bad parent line {lines[pos]!r}")
        parents.append(parent)
        pos += 1
    if len(parents) > 2:
        raise CorruptObjectError(object_hash, f"{len(parents)} parents")

    rest = lines[pos:]
    if len(rest) != 2 or not rest[0].startswith("author ") or not rest[1].startswith("committer "):
        raise CorruptObjectError(object_hash, "missing author/committer lines")
    author, created_at = _split_identity(rest[0], "author ", object_hash)

    expected = compute_commit_hash(message, parents, files)
    if expected != object_hash:
        raise CorruptObjectError(object_hash, f"content hashes to {expected[:12]}")

    return CommitNode(
        commit_hash=object_hash,
        message=message,
        parent_hashes=tuple(parents),
        tracked_files=files,
        created_at=created_at,
        author=author,
    )


class CommitGraph:
    """Creates, stores and loads immutable commit nodes."""

    def __init__(self, store: ObjectStore, author: str = "MiniGit <minigit@localhost>") -> None:
        self._store = store
        self._author = author
        self._cache: dict[str, CommitNode] = {}

    def create(
        self,
        message: str,
        parents: Sequence[str],
        tracked_files: Mapping[str, str],
        *,
        created_at: datetime | None = None,
    ) -> CommitNode:
        """Build a node with its hash populated.  Nothing is written."""
        return CommitNode(
            commit_hash=compute_commit_hash(message, parents, tracked_files),
            message=message,
            parent_hashes=tuple(parents),
            tracked_files=dict(tracked_files),
            created_at=created_at or datetime.now(timezone.utc),
            author=self._author,
        )

    def store(self, node: CommitNode) -> str:
        """Persist a node under its own hash.  Re-storing is a no-op."""
        if self._store.put_keyed(node.commit_hash, serialize_commit(node)):
            logger.debug("Stored commit %s", node.commit_hash[:12])
        return node.commit_hash

    def load(self, commit_hash: str) -> CommitNode:
        """Load a node.

        Raises:
            ObjectNotFoundError: If no commit has this hash.
            CorruptObjectError: If the stored bytes do not parse.
        """
        node = self._cache.get(commit_hash)
        if node is None:
            node = parse_commit(commit_hash, self._store.get(commit_hash))
            self._cache[commit_hash] = node
        return node

    def exists(self, commit_hash: str) -> bool:
        return self._store.contains(commit_hash)

    def find_by_prefix(self, prefix: str) -> str | None:
        return self._store.find_by_prefix(prefix)
