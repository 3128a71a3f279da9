"""Branch refs and HEAD for MiniGit.

Branches are files under ``refs/heads/<name>`` holding one commit hash.
HEAD is either symbolic (``ref: refs/heads/<name>``) or a raw commit
hash (detached).  Every update replaces the whole file atomically.
"""

from __future__ import annotations

import logging

from minigit.engine.hashing import is_full_hash
from minigit.exceptions import CorruptObjectError, StorageIOError
from minigit.models.refs import HeadKind, HeadState
from minigit.storage.atomic import atomic_write_text, read_text_or_none
from minigit.storage.layout import RepoLayout

logger = logging.getLogger(__name__)

SYMBOLIC_PREFIX = "ref: refs/heads/"


class RefStore:
    """Maps branch names to commit hashes and tracks HEAD."""

    def __init__(self, layout: RepoLayout, default_branch: str = "main") -> None:
        self._layout = layout
        self._default_branch = default_branch

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def get_branch(self, name: str) -> str | None:
        """Return the branch's commit hash, or None if it was never written."""
        path = self._layout.heads_dir / name
        if not path.is_file():
            return None
        text = read_text_or_none(path)
        if text is None:
            return None
        value = text.strip()
        if not value:
            return None
        if not is_full_hash(value):
            raise CorruptObjectError(f"refs/heads/{name}", f"not a commit hash: {value!r}")
        return value

    def set_branch(self, name: str, commit_hash: str) -> None:
        """Point a branch at a commit, overwriting any previous value."""
        atomic_write_text(self._layout.heads_dir / name, commit_hash + "\n")
        logger.debug("refs/heads/%s -> %s", name, commit_hash[:12])

    def list_branches(self) -> list[str]:
        heads = self._layout.heads_dir
        if not heads.is_dir():
            return []
        try:
            return sorted(
                p.relative_to(heads).as_posix()
                for p in heads.rglob("*")
                if p.is_file() and not p.name.startswith(".tmp_")
            )
        except OSError as e:
            raise StorageIOError("list", str(heads), e) from e

    # ------------------------------------------------------------------
    # HEAD
    # ------------------------------------------------------------------

    def read_head(self) -> HeadState:
        """Read HEAD.  A missing or empty HEAD is unborn on the default branch."""
        text = read_text_or_none(self._layout.head_file)
        value = (text or "").strip()
        if not value:
            return HeadState(kind=HeadKind.UNBORN, branch=self._default_branch)
        if value.startswith(SYMBOLIC_PREFIX):
            branch = value[len(SYMBOLIC_PREFIX):]
            commit = self.get_branch(branch)
            if commit is None:
                return HeadState(kind=HeadKind.UNBORN, branch=branch)
            return HeadState(kind=HeadKind.SYMBOLIC, branch=branch, commit_hash=commit)
        if is_full_hash(value):
            return HeadState(kind=HeadKind.DETACHED, commit_hash=value)
        raise CorruptObjectError("HEAD", f"unrecognized contents: {value!r}")

    def resolve_head(self) -> str | None:
        """The commit HEAD points at, or None if no commit exists yet."""
        return self.read_head().commit_hash

    def current_branch(self) -> str | None:
        """Branch HEAD is attached to (even if unborn); None when detached."""
        return self.read_head().branch

    def update_head(self, commit_hash: str) -> None:
        """Advance HEAD to a new commit.

        Attached (or unborn) HEAD moves its branch; detached HEAD is
        overwritten directly.
        """
        head = self.read_head()
        if head.kind is HeadKind.DETACHED:
            self.detach_head(commit_hash)
        else:
            self.set_branch(head.branch or self._default_branch, commit_hash)

    def attach_head(self, branch: str) -> None:
        atomic_write_text(self._layout.head_file, f"{SYMBOLIC_PREFIX}{branch}\n")
        logger.debug("HEAD -> refs/heads/%s", branch)

    def detach_head(self, commit_hash: str) -> None:
        atomic_write_text(self._layout.head_file, commit_hash + "\n")
        logger.debug("HEAD detached at %s", commit_hash[:12])
