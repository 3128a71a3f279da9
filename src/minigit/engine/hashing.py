"""Deterministic hashing utilities for MiniGit.

Provides canonical JSON serialization and SHA-256 hashing for blobs and
commits.  All hashing is deterministic: same input always produces the
same output, with no wall-clock or random input.
"""

from __future__ import annotations

import hashlib
import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

HASH_HEX_LENGTH = 64
_HASH_RE = re.compile(r"^[0-9a-f]{64}$")


def canonical_json(data: Any) -> bytes:
    """Serialize data to canonical JSON bytes.

    Uses sorted keys, compact separators, and UTF-8 encoding
    to ensure deterministic output.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def content_hash(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw blob bytes."""
    return hashlib.sha256(data).hexdigest()


def commit_hash(
    message: str,
    parent_hashes: Sequence[str],
    tracked_files: Mapping[str, str],
) -> str:
    """Compute the identity hash of a commit.

    Only the message, the ordered parent list and the path-sorted file map
    feed the hash.  Timestamps and author are metadata and never included.
    """
    data: dict[str, Any] = {
        "message": message,
        "parents": list(parent_hashes),
        "files": sorted(tracked_files.items()),
    }
    return hashlib.sha256(canonical_json(data)).hexdigest()


def is_full_hash(value: str) -> bool:
    """True if *value* looks like a full lowercase SHA-256 hex digest."""
    return bool(_HASH_RE.match(value))
