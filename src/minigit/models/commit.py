"""Commit domain model for MiniGit.

CommitNode is an immutable snapshot: message, parent links, and the full
path -> blob hash map of the working tree at that commit.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class CommitNode(BaseModel):
    """A stored (or about-to-be-stored) commit.

    ``commit_hash`` is derived from ``message``, ``parent_hashes`` and
    ``tracked_files`` only.  ``created_at`` and ``author`` are metadata.
    """

    model_config = ConfigDict(frozen=True)

    commit_hash: str
    message: str
    parent_hashes: tuple[str, ...] = ()
    tracked_files: dict[str, str] = {}
    created_at: datetime
    author: str

    @field_validator("parent_hashes")
    @classmethod
    def _at_most_two_parents(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if len(v) > 2:
            raise ValueError(f"a commit has at most 2 parents, got {len(v)}")
        return v

    @property
    def first_parent(self) -> str | None:
        return self.parent_hashes[0] if self.parent_hashes else None

    @property
    def is_merge(self) -> bool:
        return len(self.parent_hashes) == 2

    def __str__(self) -> str:
        short_hash = self.commit_hash[:8]
        msg = self.message.splitlines()[0] if self.message else ""
        if len(msg) > 60:
            msg = msg[:57] + "..."
        return f"{short_hash} {msg}"

    def __repr__(self) -> str:
        return (
            f"CommitNode({self.commit_hash[:8]} parents={len(self.parent_hashes)} "
            f"files={len(self.tracked_files)} {self.message!r})"
        )
