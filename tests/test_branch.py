"""Tests for branch creation, listing, and name validation."""

from __future__ import annotations

import os

import pytest

from minigit import InvalidBranchNameError, NoCommitsYetError, Repository
from minigit.operations.branch import validate_branch_name
from tests.conftest import commit_files


class TestValidateBranchName:
    """Tests for git-style branch name rules."""

    @pytest.mark.parametrize("name", ["main", "feature/login", "fix-1", "v1.2", "a_b"])
    def test_valid(self, name: str) -> None:
        """Ordinary names, including nested ones, pass."""
        validate_branch_name(name)

    @pytest.mark.parametrize(
        "name",
        [
            "",
            "a..b",
            "x.lock",
            ".hidden",
            "a/.b",
            "trailing.",
            "HEAD",
            "has space",
            "tilde~1",
            "caret^",
            "co:lon",
            "q?",
            "star*",
            "br[acket",
            "back\\slash",
            "/lead",
            "trail/",
            "dou//ble",
        ],
    )
    def test_invalid(self, name: str) -> None:
        """Each rule violation raises InvalidBranchNameError."""
        with pytest.raises(InvalidBranchNameError):
            validate_branch_name(name)

    def test_undecodable_bytes(self) -> None:
        """Names carrying raw non-UTF-8 bytes are rejected with a printable message."""
        with pytest.raises(InvalidBranchNameError) as exc_info:
            validate_branch_name(os.fsdecode(b"feat\xff"))
        str(exc_info.value).encode("utf-8")


class TestCreateBranch:
    """Tests for creating branches at HEAD."""

    def test_requires_commit(self, repo: Repository) -> None:
        """Branching from an unborn HEAD fails."""
        with pytest.raises(NoCommitsYetError):
            repo.branch("feature")

    def test_points_at_head_without_switching(self, repo: Repository) -> None:
        """A new branch points at HEAD; HEAD stays on main."""
        c1 = commit_files(repo, {"a.txt": "a"}, "first")
        assert repo.branch("feature") == c1
        assert repo.current_branch == "main"
        assert repo.refs.get_branch("feature") == c1

    def test_existing_branch_silently_moved(self, repo: Repository) -> None:
        """Re-creating a branch moves it to the current HEAD."""
        c1 = commit_files(repo, {"a.txt": "a"}, "first")
        repo.branch("feature")
        c2 = commit_files(repo, {"a.txt": "b"}, "second")
        assert repo.branch("feature") == c2
        assert repo.refs.get_branch("feature") == c2
        assert c1 != c2

    def test_nested_name(self, repo: Repository) -> None:
        """Slash-separated names are listed by full name."""
        commit_files(repo, {"a.txt": "a"}, "first")
        repo.branch("team/feature")
        assert [b.name for b in repo.list_branches()] == ["main", "team/feature"]


class TestListBranches:
    """Tests for branch listing."""

    def test_empty_repository(self, repo: Repository) -> None:
        assert repo.list_branches() == []

    def test_current_flagged(self, repo: Repository) -> None:
        """Only the checked-out branch is current."""
        commit_files(repo, {"a.txt": "a"}, "first")
        repo.branch("feature")
        repo.checkout("feature")
        flags = {b.name: b.is_current for b in repo.list_branches()}
        assert flags == {"feature": True, "main": False}

    def test_none_current_when_detached(self, repo: Repository) -> None:
        """No branch is current while HEAD is detached."""
        c1 = commit_files(repo, {"a.txt": "a"}, "first")
        repo.checkout(c1)
        assert not any(b.is_current for b in repo.list_branches())
