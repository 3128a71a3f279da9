"""Configuration and status models for MiniGit.

RepoConfig holds per-repository settings persisted in ``<meta>/config.json``.
StatusInfo is what ``Repository.status()`` reports.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from minigit.models.refs import HeadState


class RepoConfig(BaseModel):
    """Per-repository configuration."""

    format_version: int = 1
    default_branch: str = "main"
    author: str = "MiniGit <minigit@localhost>"
    lock_timeout: float = Field(default=5.0, ge=0)


class StatusInfo(BaseModel):
    """Working tree, index and HEAD summary."""

    head: HeadState
    staged_added: list[str] = []
    staged_modified: list[str] = []
    staged_removed: list[str] = []
    unstaged_modified: list[str] = []
    unstaged_deleted: list[str] = []
    untracked: list[str] = []
    conflicts: list[str] = []
    merging_branch: Optional[str] = None

    @property
    def is_clean(self) -> bool:
        return not (
            self.staged_added
            or self.staged_modified
            or self.staged_removed
            or self.unstaged_modified
            or self.unstaged_deleted
            or self.conflicts
        )
