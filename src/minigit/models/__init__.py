"""MiniGit domain models."""

from minigit.models.commit import CommitNode
from minigit.models.config import RepoConfig, StatusInfo
from minigit.models.merge import ConflictInfo, ConflictType, MergeResult, MergeState
from minigit.models.refs import BranchInfo, HeadKind, HeadState

__all__ = [
    "BranchInfo",
    "CommitNode",
    "ConflictInfo",
    "ConflictType",
    "HeadKind",
    "HeadState",
    "MergeResult",
    "MergeState",
    "RepoConfig",
    "StatusInfo",
]
