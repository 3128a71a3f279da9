"""Tests for DAG queries: ancestry, merge base, first-parent walks."""

from __future__ import annotations

import pytest

from minigit.engine.commit import CommitGraph
from minigit.exceptions import NoCommonAncestorError
from minigit.operations.dag import (
    find_common_ancestor,
    get_all_ancestors,
    is_ancestor,
    iter_first_parent,
)


def _commit(graph: CommitGraph, message: str, *parents: str) -> str:
    node = graph.create(message, list(parents), {})
    return graph.store(node)


@pytest.fixture
def diamond(graph: CommitGraph) -> dict[str, str]:
    """root -> a -> (b on one side, c on the other) -> m merges b and c."""
    root = _commit(graph, "root")
    a = _commit(graph, "a", root)
    b = _commit(graph, "b", a)
    c = _commit(graph, "c", a)
    m = _commit(graph, "m", b, c)
    return {"root": root, "a": a, "b": b, "c": c, "m": m}


# ==================================================================
# Ancestry
# ==================================================================

class TestAncestry:
    """Tests for ancestor sets and is_ancestor."""

    def test_all_ancestors_includes_self(self, graph: CommitGraph, diamond) -> None:
        """The ancestor set of a merge covers both parents' lines."""
        assert get_all_ancestors(diamond["m"], graph) == set(diamond.values())

    def test_is_ancestor_inclusive(self, graph: CommitGraph, diamond) -> None:
        """A commit counts as its own ancestor."""
        assert is_ancestor(diamond["m"], diamond["m"], graph)

    def test_is_ancestor_through_second_parent(self, graph: CommitGraph, diamond) -> None:
        """Second parents are followed."""
        assert is_ancestor(diamond["c"], diamond["m"], graph)

    def test_not_ancestor(self, graph: CommitGraph, diamond) -> None:
        """Siblings are not ancestors of each other."""
        assert not is_ancestor(diamond["b"], diamond["c"], graph)
        assert not is_ancestor(diamond["m"], diamond["a"], graph)


# ==================================================================
# Merge base
# ==================================================================

class TestMergeBase:
    """Tests for find_common_ancestor."""

    def test_same_commit(self, graph: CommitGraph, diamond) -> None:
        assert find_common_ancestor(diamond["b"], diamond["b"], graph) == diamond["b"]

    def test_fork_point(self, graph: CommitGraph, diamond) -> None:
        """Two branches meet at their fork point."""
        assert find_common_ancestor(diamond["b"], diamond["c"], graph) == diamond["a"]

    def test_symmetric_for_simple_fork(self, graph: CommitGraph, diamond) -> None:
        assert find_common_ancestor(diamond["c"], diamond["b"], graph) == diamond["a"]

    def test_ancestor_is_its_own_base(self, graph: CommitGraph, diamond) -> None:
        """When one tip contains the other, the contained tip is the base."""
        assert find_common_ancestor(diamond["m"], diamond["b"], graph) == diamond["b"]
        assert find_common_ancestor(diamond["root"], diamond["m"], graph) == diamond["root"]

    def test_lowest_not_first_found(self, graph: CommitGraph, diamond) -> None:
        """After merging c into the b line, a new fork from m uses m as base, not a."""
        x = _commit(graph, "x", diamond["m"])
        y = _commit(graph, "y", diamond["c"])
        z = _commit(graph, "z", y, x)
        assert find_common_ancestor(x, z, graph) == x
        w = _commit(graph, "w", diamond["m"])
        assert find_common_ancestor(w, z, graph) == diamond["m"]

    def test_long_branch_ignores_older_common_ancestors(self, graph: CommitGraph) -> None:
        """A long-lived branch merges against its latest shared commit."""
        base = _commit(graph, "base")
        ours = base
        for i in range(5):
            ours = _commit(graph, f"ours {i}", ours)
        theirs = _commit(graph, "theirs", base)
        assert find_common_ancestor(ours, theirs, graph) == base

    def test_disjoint_histories(self, graph: CommitGraph) -> None:
        """Unrelated roots have no common ancestor."""
        left = _commit(graph, "left")
        right = _commit(graph, "right")
        with pytest.raises(NoCommonAncestorError):
            find_common_ancestor(left, right, graph)


# ==================================================================
# First-parent history
# ==================================================================

class TestFirstParent:
    """Tests for first-parent walks."""

    def test_walks_first_parents_only(self, graph: CommitGraph, diamond) -> None:
        """Second parents are skipped in first-parent history."""
        messages = [n.message for n in iter_first_parent(diamond["m"], graph)]
        assert messages == ["m", "b", "a", "root"]

    def test_single_root(self, graph: CommitGraph, diamond) -> None:
        assert [n.commit_hash for n in iter_first_parent(diamond["root"], graph)] == [diamond["root"]]
