"""Merge domain models for MiniGit.

Defines per-path conflict information, the merge result returned to the
caller, and the pending-merge state persisted between commands.
"""

from __future__ import annotations

import enum
from typing import Literal, Optional

from pydantic import BaseModel

OURS_MARKER = b"<<<<<<< OURS"
SEPARATOR_MARKER = b"======="
THEIRS_MARKER = b">>>>>>> THEIRS"


class ConflictType(str, enum.Enum):
    """Ways a path can fail to merge automatically."""

    CONTENT = "content"  # modified differently on both sides
    ADD_ADD = "add/add"  # added on both sides with different content
    DELETE_MODIFY = "delete/modify"  # deleted by us, modified by them
    MODIFY_DELETE = "modify/delete"  # modified by us, deleted by them

    def __str__(self) -> str:
        return self.value


class ConflictInfo(BaseModel):
    """One conflicting path.  A ``None`` hash means the path is absent on that side."""

    path: str
    conflict_type: ConflictType
    base_hash: Optional[str] = None
    ours_hash: Optional[str] = None
    theirs_hash: Optional[str] = None

    @staticmethod
    def render_markers(ours: bytes, theirs: bytes) -> bytes:
        """Wrap both versions in ``<<<<<<< OURS`` / ``=======`` / ``>>>>>>> THEIRS`` markers."""
        def _terminated(side: bytes) -> bytes:
            if side and not side.endswith(b"\n"):
                return side + b"\n"
            return side

        return b"".join([
            OURS_MARKER + b"\n",
            _terminated(ours),
            SEPARATOR_MARKER + b"\n",
            _terminated(theirs),
            THEIRS_MARKER + b"\n",
        ])

    @staticmethod
    def parse_markers(data: bytes) -> tuple[bytes, bytes] | None:
        """Recover (ours, theirs) from a marker block, or None if markers are absent."""
        lines = data.splitlines(keepends=True)
        try:
            start = next(i for i, ln in enumerate(lines) if ln.rstrip(b"\r\n") == OURS_MARKER)
            mid = next(
                i for i, ln in enumerate(lines)
                if i > start and ln.rstrip(b"\r\n") == SEPARATOR_MARKER
            )
            end = next(
                i for i, ln in enumerate(lines)
                if i > mid and ln.rstrip(b"\r\n") == THEIRS_MARKER
            )
        except StopIteration:
            return None
        return b"".join(lines[start + 1:mid]), b"".join(lines[mid + 1:end])

    def __str__(self) -> str:
        return f"CONFLICT ({self.conflict_type}): {self.path}"


class MergeResult(BaseModel):
    """Outcome of ``Repository.merge``.

    ``conflict`` is a successful return: the working tree holds marker
    files and no commit was made.  The caller resolves, re-stages, and
    commits.
    """

    merge_type: Literal["up_to_date", "fast_forward", "clean", "conflict"]
    source_branch: str
    target_branch: Optional[str] = None  # None when HEAD is detached
    ours_hash: str
    theirs_hash: str
    merge_base_hash: Optional[str] = None
    merged_files: dict[str, str] = {}
    conflicts: list[ConflictInfo] = []
    commit_hash: Optional[str] = None

    @property
    def committed(self) -> bool:
        return self.commit_hash is not None

    @property
    def conflicted_paths(self) -> list[str]:
        return [c.path for c in self.conflicts]

    def __str__(self) -> str:
        target = self.target_branch or "HEAD"
        if self.merge_type == "conflict":
            return f"merge {self.source_branch}->{target}: {len(self.conflicts)} conflict(s)"
        return f"{self.merge_type} merge {self.source_branch}->{target}"


class MergeState(BaseModel):
    """Pending merge persisted while conflicts await manual resolution."""

    their_hash: str
    their_branch: str
    conflicts: list[str] = []
    message: str
