"""Branch operations for MiniGit.

Create, list, and validate branches.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from minigit.exceptions import InvalidBranchNameError, NoCommitsYetError
from minigit.models.refs import BranchInfo

if TYPE_CHECKING:
    from minigit.storage.refs import RefStore

logger = logging.getLogger(__name__)

# Characters forbidden in branch names (git-style)
_FORBIDDEN_CHARS = re.compile(r"[\s~^:?*\[\\]")


def validate_branch_name(name: str) -> None:
    """Validate a branch name against git-style naming rules.

    Raises InvalidBranchNameError on violation.
    """
    if not name:
        raise InvalidBranchNameError(name, "branch name cannot be empty")

    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidBranchNameError(
            name.encode("utf-8", "backslashreplace").decode("utf-8"),
            "branch name must be valid UTF-8",
        ) from None

    if ".." in name:
        raise InvalidBranchNameError(name, "branch name cannot contain '..'")

    if name.endswith(".lock"):
        raise InvalidBranchNameError(name, "branch name cannot end with '.lock'")

    if name.startswith(".") or "/." in name:
        raise InvalidBranchNameError(name, "branch name components cannot start with '.'")

    if name.endswith("."):
        raise InvalidBranchNameError(name, "branch name cannot end with '.'")

    if name == "HEAD":
        raise InvalidBranchNameError(name, "'HEAD' is reserved")

    if _FORBIDDEN_CHARS.search(name):
        raise InvalidBranchNameError(
            name, "branch name contains forbidden characters (whitespace, ~, ^, :, ?, *, [, \\)"
        )

    if name.startswith("/") or name.endswith("/") or "//" in name:
        raise InvalidBranchNameError(name, "branch name has invalid slash usage")


def create_branch(name: str, at_hash: str | None, refs: RefStore) -> str:
    """Point branch ``name`` at ``at_hash``.

    An existing branch of the same name is overwritten without complaint.

    Returns:
        The commit hash the branch now points to.

    Raises:
        InvalidBranchNameError: If the name is invalid.
        NoCommitsYetError: If ``at_hash`` is empty (nothing committed yet).
    """
    validate_branch_name(name)
    if not at_hash:
        raise NoCommitsYetError("create branch")
    previous = refs.get_branch(name)
    refs.set_branch(name, at_hash)
    if previous is not None and previous != at_hash:
        logger.info("Branch %s moved from %s to %s", name, previous[:8], at_hash[:8])
    else:
        logger.info("Branch %s created at %s", name, at_hash[:8])
    return at_hash


def list_branches(refs: RefStore) -> list[BranchInfo]:
    """All branches that point at a commit, with the current one flagged."""
    current = refs.current_branch()
    branches: list[BranchInfo] = []
    for name in refs.list_branches():
        commit_hash = refs.get_branch(name)
        if commit_hash is not None:
            branches.append(
                BranchInfo(name=name, commit_hash=commit_hash, is_current=(name == current))
            )
    return branches
