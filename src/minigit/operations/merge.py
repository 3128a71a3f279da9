"""Merge operations for MiniGit.

Implements the per-path three-way decision table, conflict marker
output, and the merge flow:

    Start -> AncestorSearch -> ThreeWayDiff -> {CleanMerge | ConflictPending}

A clean merge always produces a two-parent commit ``[ours, theirs]``
(unless fast-forward is requested).  A conflicted merge writes marker
files, stages the paths that merged cleanly, persists a MergeState and
returns without committing.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from minigit.exceptions import (
    CorruptObjectError,
    DirtyIndexError,
    NoCommitsYetError,
    RefNotFoundError,
)
from minigit.models.merge import ConflictInfo, ConflictType, MergeResult, MergeState
from minigit.operations.dag import find_common_ancestor, is_ancestor
from minigit.operations.navigation import materialize
from minigit.storage.atomic import atomic_write_text, read_text_or_none, remove_file
from minigit.storage.index import REMOVED

if TYPE_CHECKING:
    from minigit.engine.commit import CommitGraph
    from minigit.storage.index import StagingIndex
    from minigit.storage.objects import ObjectStore
    from minigit.storage.refs import RefStore
    from minigit.storage.worktree import WorkTree

logger = logging.getLogger(__name__)


class FileOutcome(str, enum.Enum):
    """What the three-way table decided for one path."""

    SAME = "same"  # both sides agree (identical change, or untouched)
    TAKE_OURS = "take_ours"
    TAKE_THEIRS = "take_theirs"
    CONFLICT = "conflict"

    def __str__(self) -> str:
        return self.value


def resolve_path(
    base: str | None,
    ours: str | None,
    theirs: str | None,
) -> FileOutcome:
    """Apply the three-way table to one path.  ``None`` means absent.

    | base | ours          | theirs           | outcome      |
    |------|---------------|------------------|--------------|
    | any  | == theirs     | == ours          | SAME         |
    | b    | == b          | != b             | TAKE_THEIRS  |
    | b    | != b          | == b             | TAKE_OURS    |
    | b    | != b          | != b, != ours    | CONFLICT     |

    Absence is just another value, so additions and deletions on one
    side fall out of the same rows; add/add, delete/modify and
    modify/delete land in CONFLICT.
    """
    if ours == theirs:
        return FileOutcome.SAME
    if ours == base:
        return FileOutcome.TAKE_THEIRS
    if theirs == base:
        return FileOutcome.TAKE_OURS
    return FileOutcome.CONFLICT


def _conflict_type(base: str | None, ours: str | None, theirs: str | None) -> ConflictType:
    if base is None:
        return ConflictType.ADD_ADD
    if ours is None:
        return ConflictType.DELETE_MODIFY
    if theirs is None:
        return ConflictType.MODIFY_DELETE
    return ConflictType.CONTENT


def merge_file_maps(
    base: Mapping[str, str],
    ours: Mapping[str, str],
    theirs: Mapping[str, str],
) -> tuple[dict[str, str], list[ConflictInfo]]:
    """Three-way merge of complete file maps.

    Returns:
        ``(merged, conflicts)``.  ``merged`` holds every cleanly resolved
        path; conflicting paths are left out of it (no blob recorded).
    """
    merged: dict[str, str] = {}
    conflicts: list[ConflictInfo] = []
    for path in sorted(set(base) | set(ours) | set(theirs)):
        b, o, t = base.get(path), ours.get(path), theirs.get(path)
        outcome = resolve_path(b, o, t)
        if outcome is FileOutcome.CONFLICT:
            conflicts.append(
                ConflictInfo(
                    path=path,
                    conflict_type=_conflict_type(b, o, t),
                    base_hash=b,
                    ours_hash=o,
                    theirs_hash=t,
                )
            )
            continue
        value = t if outcome is FileOutcome.TAKE_THEIRS else o
        if value is not None:
            merged[path] = value
    return merged, conflicts


# ---------------------------------------------------------------------------
# Pending merge state
# ---------------------------------------------------------------------------


def load_merge_state(path: Path) -> MergeState | None:
    text = read_text_or_none(path)
    if text is None:
        return None
    try:
        return MergeState.model_validate_json(text)
    except ValueError as e:
        raise CorruptObjectError("MERGE_STATE", str(e)) from None


def save_merge_state(path: Path, state: MergeState) -> None:
    atomic_write_text(path, state.model_dump_json(indent=2))


def clear_merge_state(path: Path) -> bool:
    return remove_file(path)


# ---------------------------------------------------------------------------
# Merge flow
# ---------------------------------------------------------------------------


def _conflict_markers(conflict: ConflictInfo, blobs: ObjectStore) -> bytes:
    ours = blobs.get(conflict.ours_hash) if conflict.ours_hash else b""
    theirs = blobs.get(conflict.theirs_hash) if conflict.theirs_hash else b""
    return ConflictInfo.render_markers(ours, theirs)


def merge_branches(
    source_branch: str,
    *,
    refs: RefStore,
    graph: CommitGraph,
    blobs: ObjectStore,
    index: StagingIndex,
    worktree: WorkTree,
    merge_state_path: Path,
    fast_forward: bool = False,
) -> MergeResult:
    """Merge ``source_branch`` into the current HEAD.

    Args:
        source_branch: Name of the branch to merge in.
        fast_forward: If True and HEAD is an ancestor of the source tip,
            move HEAD without creating a merge commit.

    Returns:
        MergeResult with merge_type ``up_to_date``, ``fast_forward``,
        ``clean`` (committed) or ``conflict`` (pending).

    Raises:
        NoCommitsYetError: If HEAD has no commit.
        RefNotFoundError: If the source branch does not exist.
        DirtyIndexError: If staged changes are waiting to be committed.
        NoCommonAncestorError: If the histories are disjoint.
    """
    head = refs.read_head()
    ours_hash = head.commit_hash
    if ours_hash is None:
        raise NoCommitsYetError("merge")
    theirs_hash = refs.get_branch(source_branch)
    if theirs_hash is None:
        raise RefNotFoundError(source_branch)
    if index:
        raise DirtyIndexError(list(index))

    target_branch = head.branch
    common = dict(
        source_branch=source_branch,
        target_branch=target_branch,
        ours_hash=ours_hash,
        theirs_hash=theirs_hash,
    )

    if is_ancestor(theirs_hash, ours_hash, graph):
        logger.info("Already up to date with %s", source_branch)
        return MergeResult(merge_type="up_to_date", merge_base_hash=theirs_hash, **common)

    ours_node = graph.load(ours_hash)
    theirs_node = graph.load(theirs_hash)

    if fast_forward and is_ancestor(ours_hash, theirs_hash, graph):
        materialize(ours_node.tracked_files, theirs_node.tracked_files, blobs, worktree)
        refs.update_head(theirs_hash)
        logger.info("Fast-forwarded to %s", theirs_hash[:8])
        return MergeResult(
            merge_type="fast_forward",
            merge_base_hash=ours_hash,
            merged_files=dict(theirs_node.tracked_files),
            commit_hash=theirs_hash,
            **common,
        )

    base_hash = find_common_ancestor(ours_hash, theirs_hash, graph)
    base_node = graph.load(base_hash)
    merged, conflicts = merge_file_maps(
        base_node.tracked_files, ours_node.tracked_files, theirs_node.tracked_files
    )
    message = f"Merge branch '{source_branch}' into {target_branch or 'HEAD'}"

    if conflicts:
        conflicted = {c.path for c in conflicts}
        removals: list[str] = []
        writes: dict[str, bytes] = {}
        staged: dict[str, str] = {}
        # Clean paths go to the tree and the index so the resolving commit carries them.
        for path in sorted(set(ours_node.tracked_files) | set(merged)):
            if path in conflicted:
                continue
            new = merged.get(path)
            if new == ours_node.tracked_files.get(path):
                continue
            if new is None:
                removals.append(path)
                staged[path] = REMOVED
            else:
                writes[path] = blobs.get(new)
                staged[path] = new
        for conflict in conflicts:
            writes[conflict.path] = _conflict_markers(conflict, blobs)

        worktree.check_replace(removals, writes)
        for path in removals:
            worktree.remove(path)
        for path in sorted(writes):
            worktree.write(path, writes[path])
        index.stage_many(staged)
        for conflict in conflicts:
            logger.warning("%s", conflict)
        save_merge_state(
            merge_state_path,
            MergeState(
                their_hash=theirs_hash,
                their_branch=source_branch,
                conflicts=sorted(conflicted),
                message=message,
            ),
        )
        return MergeResult(
            merge_type="conflict",
            merge_base_hash=base_hash,
            merged_files=merged,
            conflicts=conflicts,
            **common,
        )

    node = graph.create(message, [ours_hash, theirs_hash], merged)
    graph.store(node)
    materialize(ours_node.tracked_files, merged, blobs, worktree)
    refs.update_head(node.commit_hash)
    index.clear()
    logger.info("Merged %s: commit %s", source_branch, node.commit_hash[:8])
    return MergeResult(
        merge_type="clean",
        merge_base_hash=base_hash,
        merged_files=merged,
        commit_hash=node.commit_hash,
        **common,
    )
