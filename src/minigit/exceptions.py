"""MiniGit exception hierarchy.

All MiniGit-specific exceptions inherit from MiniGitError.
Merge conflicts are NOT exceptions: they come back as a MergeResult
with ``merge_type="conflict"``.
"""

from __future__ import annotations


class MiniGitError(Exception):
    """Base exception for all MiniGit errors."""


class NotARepositoryError(MiniGitError):
    """Raised when an operation runs outside an initialized repository."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Not a minigit repository: {path}")


class ObjectNotFoundError(MiniGitError):
    """Raised when a blob or commit hash lookup fails."""

    def __init__(self, object_hash: str) -> None:
        self.object_hash = object_hash
        super().__init__(f"Object not found: {object_hash}")


class CorruptObjectError(MiniGitError):
    """Raised when stored bytes do not parse into the expected fields."""

    def __init__(self, object_hash: str, reason: str) -> None:
        self.object_hash = object_hash
        self.reason = reason
        super().__init__(f"Corrupt object {object_hash}: {reason}")


class RefNotFoundError(MiniGitError):
    """Raised when a name resolves to neither a branch nor a stored commit."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"Reference not found: {ref}")


class NoCommitsYetError(MiniGitError):
    """Raised when an operation needs a commit but HEAD is unborn."""

    def __init__(self, action: str = "continue") -> None:
        self.action = action
        super().__init__(f"Cannot {action}: no commits yet")


class NoCommonAncestorError(MiniGitError):
    """Raised when two commits share no history."""

    def __init__(self, hash_a: str, hash_b: str) -> None:
        self.hash_a = hash_a
        self.hash_b = hash_b
        super().__init__(
            f"No common ancestor between {hash_a[:8]} and {hash_b[:8]}"
        )


class StorageIOError(MiniGitError):
    """Raised when an underlying filesystem read or write fails."""

    def __init__(self, operation: str, path: str, cause: OSError | None = None) -> None:
        self.operation = operation
        self.path = path
        self.cause = cause
        msg = f"Storage error during {operation}: {path}"
        if cause is not None:
            msg += f" ({cause})"
        super().__init__(msg)


class RepositoryBusyError(MiniGitError):
    """Raised when the repository lock cannot be acquired in time."""

    def __init__(self, path: str, timeout: float) -> None:
        self.path = path
        self.timeout = timeout
        super().__init__(
            f"Repository is busy: could not lock {path} within {timeout:g}s"
        )


class InvalidBranchNameError(MiniGitError):
    """Raised when a branch name violates naming rules."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid branch name '{name}': {reason}")


class AmbiguousPrefixError(MiniGitError):
    """Raised when a commit hash prefix matches multiple commits."""

    def __init__(self, prefix: str, candidates: list[str]) -> None:
        self.prefix = prefix
        self.candidates = candidates
        candidate_str = ", ".join(c[:12] + "..." for c in candidates[:5])
        super().__init__(
            f"Ambiguous prefix '{prefix}'. Matches: {candidate_str}"
        )


class NothingToCommitError(MiniGitError):
    """Raised when a commit would not change anything."""

    def __init__(self) -> None:
        super().__init__("Nothing to commit, working tree clean")


class InvalidMessageError(MiniGitError):
    """Raised when a commit message cannot be stored as UTF-8 text."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid commit message: {reason}")


class PathNotFoundError(MiniGitError):
    """Raised when ``add`` names a path that is neither on disk nor tracked."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Path not found: {path}")


class InvalidPathError(MiniGitError):
    """Raised when a path lies outside the working tree or cannot be tracked."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        shown = path.encode("utf-8", "backslashreplace").decode("utf-8")
        super().__init__(f"Invalid path '{shown}': {reason}")


class MergeError(MiniGitError):
    """Base exception for merge errors."""


class MergeInProgressError(MergeError):
    """Raised when an operation is blocked by an unfinished merge."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(
            f"Cannot {action}: a merge is in progress. "
            f"Resolve conflicts and commit, or run 'minigit merge --abort'."
        )


class UnresolvedConflictsError(MergeError):
    """Raised when committing before every conflicted path is re-staged."""

    def __init__(self, paths: list[str]) -> None:
        self.paths = paths
        super().__init__(
            f"Unresolved conflicts in: {', '.join(paths)}. "
            f"Fix the files and 'minigit add' them before committing."
        )


class DirtyIndexError(MergeError):
    """Raised when a merge is attempted with staged, uncommitted changes."""

    def __init__(self, paths: list[str]) -> None:
        self.paths = paths
        super().__init__(
            f"Staged changes would be lost by merge: {', '.join(paths)}. "
            f"Commit them first."
        )


class NoMergeInProgressError(MergeError):
    """Raised when aborting a merge that is not pending."""

    def __init__(self) -> None:
        super().__init__("There is no merge to abort")
