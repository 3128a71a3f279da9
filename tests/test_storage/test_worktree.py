"""Tests for working tree path handling and file access."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from minigit.exceptions import InvalidPathError
from minigit.storage.worktree import WorkTree, is_safe_repo_path


# ==================================================================
# Path rules
# ==================================================================

class TestIsSafeRepoPath:
    """Tests for the trackable-path predicate."""

    @pytest.mark.parametrize("path", ["a.txt", "dir/a.txt", "a b/c", "...", ".hidden", "café.txt"])
    def test_accepts(self, path: str) -> None:
        assert is_safe_repo_path(path)

    @pytest.mark.parametrize(
        "path",
        ["", "/abs", "../up", "a/../b", "./a", "a//b", "a/", ".minigit/HEAD", "a\\b", "a\nb"],
    )
    def test_rejects(self, path: str) -> None:
        assert not is_safe_repo_path(path)

    def test_rejects_undecodable_bytes(self) -> None:
        """Names decoded with surrogateescape cannot be stored as UTF-8."""
        assert not is_safe_repo_path(os.fsdecode(b"caf\xe9.txt"))


class TestToRepoPath:
    """Tests for converting user paths to repo paths."""

    def test_relative_to_cwd(self, worktree: WorkTree) -> None:
        """Relative paths are resolved from cwd."""
        sub = worktree.root / "sub"
        sub.mkdir()
        assert worktree.to_repo_path("a.txt", cwd=sub) == "sub/a.txt"

    def test_absolute_inside(self, worktree: WorkTree) -> None:
        assert worktree.to_repo_path(worktree.root / "x" / "y.txt") == "x/y.txt"

    def test_root_itself(self, worktree: WorkTree) -> None:
        assert worktree.to_repo_path(".", cwd=worktree.root) == "."

    def test_dotdot_normalized(self, worktree: WorkTree) -> None:
        assert worktree.to_repo_path("x/../a.txt", cwd=worktree.root) == "a.txt"

    def test_outside(self, worktree: WorkTree, tmp_path: Path) -> None:
        """Paths above the root are rejected."""
        with pytest.raises(InvalidPathError):
            worktree.to_repo_path(tmp_path.parent / "elsewhere.txt")

    def test_metadata_dir(self, worktree: WorkTree) -> None:
        """The metadata directory is never trackable."""
        with pytest.raises(InvalidPathError):
            worktree.to_repo_path(".minigit/HEAD", cwd=worktree.root)

    def test_undecodable_error_message_is_printable(self, worktree: WorkTree) -> None:
        """The error text escapes raw bytes instead of carrying surrogates."""
        with pytest.raises(InvalidPathError) as exc_info:
            worktree.to_repo_path(os.fsdecode(b"caf\xe9.txt"), cwd=worktree.root)
        str(exc_info.value).encode("utf-8")
        assert "\\udce9" in str(exc_info.value)


# ==================================================================
# File access
# ==================================================================

class TestFileAccess:
    """Tests for reading, writing, removing and walking files."""

    def test_write_creates_dirs_and_reads_back(self, worktree: WorkTree) -> None:
        worktree.write("a/b/c.txt", b"data")
        assert worktree.exists("a/b/c.txt")
        assert worktree.read("a/b/c.txt") == b"data"

    def test_remove_prunes_empty_parents(self, worktree: WorkTree) -> None:
        """Directories left empty by a removal are deleted."""
        worktree.write("a/b/c.txt", b"data")
        assert worktree.remove("a/b/c.txt") is True
        assert not (worktree.root / "a").exists()

    def test_remove_keeps_nonempty_parents(self, worktree: WorkTree) -> None:
        """Pruning stops at the first directory that still has content."""
        worktree.write("a/b/c.txt", b"data")
        worktree.write("a/keep.txt", b"data")
        worktree.remove("a/b/c.txt")
        assert (worktree.root / "a" / "keep.txt").is_file()
        assert not (worktree.root / "a" / "b").exists()

    def test_write_over_directory(self, worktree: WorkTree) -> None:
        worktree.write("d/inner.txt", b"x")
        with pytest.raises(InvalidPathError):
            worktree.write("d", b"file")

    def test_iter_files_skips_metadata(self, worktree: WorkTree) -> None:
        """Walks are sorted and exclude the metadata directory."""
        worktree.write("b.txt", b"")
        worktree.write("a/z.txt", b"")
        assert list(worktree.iter_files()) == ["a/z.txt", "b.txt"]

    def test_iter_files_subdirectory(self, worktree: WorkTree) -> None:
        worktree.write("a/z.txt", b"")
        worktree.write("b.txt", b"")
        assert list(worktree.iter_files("a")) == ["a/z.txt"]

    @pytest.mark.skipif(sys.platform in ("darwin", "win32"), reason="filesystem only accepts UTF-8 names")
    def test_iter_files_skips_undecodable_names(self, worktree: WorkTree) -> None:
        """Files whose names are not UTF-8 are left out of walks."""
        (worktree.root / os.fsdecode(b"caf\xe9.txt")).write_bytes(b"x")
        worktree.write("ok.txt", b"")
        assert list(worktree.iter_files()) == ["ok.txt"]


# ==================================================================
# Pre-flight checks
# ==================================================================

class TestCheckReplace:
    """Tests for verifying a tree rewrite before any file is touched."""

    def test_clear_paths_pass(self, worktree: WorkTree) -> None:
        worktree.write("old.txt", b"o")
        worktree.check_replace(["old.txt"], ["new.txt", "dir/new.txt"])

    def test_directory_of_removed_files_passes(self, worktree: WorkTree) -> None:
        """A directory emptied by the removals may become a file."""
        worktree.write("d/f", b"x")
        worktree.check_replace(["d/f"], ["d"])

    def test_directory_with_untracked_file_blocks(self, worktree: WorkTree) -> None:
        """An untracked file keeps the directory alive, so the write would fail."""
        worktree.write("d/f", b"x")
        worktree.write("d/untracked", b"u")
        with pytest.raises(InvalidPathError):
            worktree.check_replace(["d/f"], ["d"])
        assert (worktree.root / "d" / "f").is_file()

    def test_empty_subdirectory_blocks(self, worktree: WorkTree) -> None:
        """An empty nested directory is not pruned by removals."""
        worktree.write("d/f", b"x")
        (worktree.root / "d" / "empty").mkdir()
        with pytest.raises(InvalidPathError):
            worktree.check_replace(["d/f"], ["d"])

    def test_file_as_parent_blocks(self, worktree: WorkTree) -> None:
        """A file where a parent directory is needed blocks the write."""
        worktree.write("sub", b"file")
        with pytest.raises(InvalidPathError):
            worktree.check_replace([], ["sub/b.txt"])

    def test_removed_file_as_parent_passes(self, worktree: WorkTree) -> None:
        """A parent-path file that is being removed does not block."""
        worktree.write("sub", b"file")
        worktree.check_replace(["sub"], ["sub/b.txt"])

    def test_removal_of_directory_blocks(self, worktree: WorkTree) -> None:
        """A tracked path replaced by a directory cannot be removed as a file."""
        worktree.write("x/inner", b"i")
        with pytest.raises(InvalidPathError):
            worktree.check_replace(["x"], [])
