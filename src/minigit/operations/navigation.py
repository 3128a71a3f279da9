"""Navigation operations for MiniGit -- target resolution and checkout.

These operations move HEAD and rewrite the working tree to match a
commit.  The working tree rewrite only touches paths tracked by the old
or the new commit; untracked files are left alone.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING

from minigit.engine.hashing import is_full_hash
from minigit.exceptions import RefNotFoundError

if TYPE_CHECKING:
    from minigit.engine.commit import CommitGraph
    from minigit.storage.index import StagingIndex
    from minigit.storage.objects import ObjectStore
    from minigit.storage.refs import RefStore
    from minigit.storage.worktree import WorkTree

logger = logging.getLogger(__name__)

_HEX_PREFIX = re.compile(r"^[0-9a-f]{4,64}$")


def resolve_target(target: str, refs: RefStore, graph: CommitGraph) -> tuple[str, str | None]:
    """Resolve a branch name or commit hash.

    Resolution order:
    1. Branch name (refs/heads/{name})
    2. Full commit hash
    3. Unique hash prefix (min 4 hex chars)

    Returns:
        ``(commit_hash, branch_name)``; ``branch_name`` is None for hashes.

    Raises:
        RefNotFoundError: If nothing matches.
        AmbiguousPrefixError: If a prefix matches several commits.
    """
    branch_hash = refs.get_branch(target) if target in refs.list_branches() else None
    if branch_hash is not None:
        return branch_hash, target

    if is_full_hash(target) and graph.exists(target):
        return target, None

    if _HEX_PREFIX.match(target):
        resolved = graph.find_by_prefix(target)
        if resolved is not None:
            return resolved, None

    raise RefNotFoundError(target)


def materialize(
    old_files: Mapping[str, str],
    new_files: Mapping[str, str],
    blobs: ObjectStore,
    worktree: WorkTree,
) -> None:
    """Make the working tree match ``new_files``.

    Paths tracked in ``old_files`` but absent from ``new_files`` are
    deleted; every path in ``new_files`` is rewritten from its blob.
    Blobs are read and every target path is checked before anything is
    deleted, so a missing object or a blocked path leaves the tree untouched.

    Raises:
        ObjectNotFoundError: If a blob of ``new_files`` is missing.
        InvalidPathError: If an untracked file or directory blocks a path.
    """
    contents = {path: blobs.get(blob_hash) for path, blob_hash in new_files.items()}
    removals = sorted(set(old_files) - set(new_files))
    worktree.check_replace(removals, contents)
    for path in removals:
        worktree.remove(path)
    for path in sorted(contents):
        worktree.write(path, contents[path])
    logger.debug("Materialized %d file(s), removed %d", len(contents), len(removals))


def checkout(
    target: str,
    *,
    refs: RefStore,
    graph: CommitGraph,
    blobs: ObjectStore,
    index: StagingIndex,
    worktree: WorkTree,
) -> tuple[str, bool]:
    """Checkout a branch or commit.

    - Branch name: attach HEAD to that branch.
    - Commit hash or prefix: detach HEAD at that commit.

    The working tree is rewritten before HEAD moves, and staged entries
    are discarded since they were made against the old tree.

    Returns:
        Tuple of (resolved_commit_hash, is_detached).

    Raises:
        RefNotFoundError: If the target cannot be resolved.
    """
    commit_hash, branch = resolve_target(target, refs, graph)
    new_node = graph.load(commit_hash)

    current = refs.resolve_head()
    old_files = graph.load(current).tracked_files if current is not None else {}

    materialize(old_files, new_node.tracked_files, blobs, worktree)

    if branch is not None:
        refs.attach_head(branch)
    else:
        refs.detach_head(commit_hash)

    if index:
        logger.warning("Discarding %d staged change(s) on checkout", len(index))
        index.clear()

    logger.info(
        "Checked out %s (%s)", branch or commit_hash[:8], "detached" if branch is None else "attached"
    )
    return commit_hash, branch is None
