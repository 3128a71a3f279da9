"""HEAD and branch models for MiniGit."""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class HeadKind(str, enum.Enum):
    """The three states HEAD can be in."""

    SYMBOLIC = "symbolic"  # names a branch that has a commit
    DETACHED = "detached"  # holds a raw commit hash
    UNBORN = "unborn"  # names a branch with no commit yet

    def __str__(self) -> str:
        return self.value


class HeadState(BaseModel):
    """Snapshot of HEAD as read from disk."""

    model_config = ConfigDict(frozen=True)

    kind: HeadKind
    branch: Optional[str] = None
    commit_hash: Optional[str] = None

    @property
    def is_detached(self) -> bool:
        return self.kind is HeadKind.DETACHED

    def __str__(self) -> str:
        if self.kind is HeadKind.DETACHED:
            return f"HEAD detached at {(self.commit_hash or '')[:8]}"
        if self.kind is HeadKind.UNBORN:
            return f"On branch {self.branch} (no commits yet)"
        return f"On branch {self.branch}"


class BranchInfo(BaseModel):
    """Returned by Repository.list_branches()."""

    name: str
    commit_hash: str
    is_current: bool = False
