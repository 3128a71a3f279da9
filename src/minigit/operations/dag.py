"""DAG utilities for MiniGit -- merge base computation and ancestor queries.

Commits have at most two parents.  Walks follow every parent edge unless
stated otherwise.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator
from typing import TYPE_CHECKING

from minigit.exceptions import NoCommonAncestorError

if TYPE_CHECKING:
    from minigit.engine.commit import CommitGraph
    from minigit.models.commit import CommitNode

logger = logging.getLogger(__name__)


def _bfs_walk(start: str, graph: CommitGraph) -> Iterator[str]:
    """BFS from a start hash, yielding each reachable commit hash once (start included)."""
    visited: set[str] = set()
    queue: deque[str] = deque([start])
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        yield current
        for parent in graph.load(current).parent_hashes:
            if parent not in visited:
                queue.append(parent)


def get_all_ancestors(commit_hash: str, graph: CommitGraph) -> set[str]:
    """Every ancestor of a commit, including the commit itself."""
    return set(_bfs_walk(commit_hash, graph))


def find_common_ancestor(hash_a: str, hash_b: str, graph: CommitGraph) -> str:
    """Find the merge base of two commits.

    Computes the full ancestor set of each tip.  Common ancestors that are
    themselves ancestors of another common ancestor are discarded; among
    the rest, the one reached first by a breadth-first walk from
    ``hash_b`` wins.  For linear or simply branched histories this is the
    unique lowest common ancestor.

    Raises:
        NoCommonAncestorError: If the histories are disjoint.
    """
    if hash_a == hash_b:
        return hash_a
    ancestors_a = get_all_ancestors(hash_a, graph)
    common = [h for h in _bfs_walk(hash_b, graph) if h in ancestors_a]
    if not common:
        raise NoCommonAncestorError(hash_a, hash_b)

    # Every strict ancestor of a common ancestor is a worse merge base.
    dominated: set[str] = set()
    for candidate in common:
        if candidate in dominated:
            continue
        stack = list(graph.load(candidate).parent_hashes)
        while stack:
            parent = stack.pop()
            if parent in dominated:
                continue
            dominated.add(parent)
            stack.extend(graph.load(parent).parent_hashes)

    base = next(h for h in common if h not in dominated)
    logger.debug("Merge base of %s and %s is %s", hash_a[:8], hash_b[:8], base[:8])
    return base


def is_ancestor(potential_ancestor: str, commit_hash: str, graph: CommitGraph) -> bool:
    """True if ``potential_ancestor`` is reachable from ``commit_hash`` (or equal)."""
    for h in _bfs_walk(commit_hash, graph):
        if h == potential_ancestor:
            return True
    return False


def iter_first_parent(commit_hash: str, graph: CommitGraph) -> Iterator[CommitNode]:
    """Yield commits from ``commit_hash`` back to the root along first parents."""
    current: str | None = commit_hash
    while current is not None:
        node = graph.load(current)
        yield node
        current = node.first_parent
