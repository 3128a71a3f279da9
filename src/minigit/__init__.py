"""MiniGit: a minimal version-control engine.

Content-addressed blobs and commits, branches and HEAD, a staging
index, and three-way merge with conflict markers.
"""

__version__ = "0.1.0"

# Core entry point
from minigit.repository import Repository

# Models
from minigit.models.commit import CommitNode
from minigit.models.config import RepoConfig, StatusInfo
from minigit.models.merge import ConflictInfo, ConflictType, MergeResult, MergeState
from minigit.models.refs import BranchInfo, HeadKind, HeadState

# Exceptions
from minigit.exceptions import (
    MiniGitError,
    NotARepositoryError,
    ObjectNotFoundError,
    CorruptObjectError,
    RefNotFoundError,
    NoCommitsYetError,
    NoCommonAncestorError,
    StorageIOError,
    RepositoryBusyError,
    InvalidBranchNameError,
    AmbiguousPrefixError,
    NothingToCommitError,
    InvalidMessageError,
    PathNotFoundError,
    InvalidPathError,
    MergeError,
    MergeInProgressError,
    UnresolvedConflictsError,
    DirtyIndexError,
    NoMergeInProgressError,
)

__all__ = [
    "__version__",
    "Repository",
    # Models
    "CommitNode",
    "RepoConfig",
    "StatusInfo",
    "ConflictInfo",
    "ConflictType",
    "MergeResult",
    "MergeState",
    "BranchInfo",
    "HeadKind",
    "HeadState",
    # Exceptions
    "MiniGitError",
    "NotARepositoryError",
    "ObjectNotFoundError",
    "CorruptObjectError",
    "RefNotFoundError",
    "NoCommitsYetError",
    "NoCommonAncestorError",
    "StorageIOError",
    "RepositoryBusyError",
    "InvalidBranchNameError",
    "AmbiguousPrefixError",
    "NothingToCommitError",
    "InvalidMessageError",
    "PathNotFoundError",
    "InvalidPathError",
    "MergeError",
    "MergeInProgressError",
    "UnresolvedConflictsError",
    "DirtyIndexError",
    "NoMergeInProgressError",
]
