"""Shared test fixtures for MiniGit.

Every repository lives in a pytest ``tmp_path``; the ``repo`` fixture
also changes into the repository root so relative paths behave like
they do from a shell.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from minigit.engine.commit import CommitGraph
from minigit.repository import Repository
from minigit.storage.index import StagingIndex
from minigit.storage.layout import RepoLayout
from minigit.storage.objects import ObjectStore
from minigit.storage.refs import RefStore
from minigit.storage.worktree import WorkTree


@pytest.fixture
def layout(tmp_path: Path) -> RepoLayout:
    """Layout with the metadata directories created but no repository files."""
    lay = RepoLayout(tmp_path)
    for directory in (lay.objects_dir, lay.commits_dir, lay.heads_dir):
        directory.mkdir(parents=True)
    return lay


@pytest.fixture
def blobs(layout: RepoLayout) -> ObjectStore:
    return ObjectStore(layout.objects_dir)


@pytest.fixture
def graph(layout: RepoLayout) -> CommitGraph:
    return CommitGraph(ObjectStore(layout.commits_dir))


@pytest.fixture
def refs(layout: RepoLayout) -> RefStore:
    return RefStore(layout)


@pytest.fixture
def index(layout: RepoLayout) -> StagingIndex:
    return StagingIndex(layout.index_file)


@pytest.fixture
def worktree(layout: RepoLayout) -> WorkTree:
    return WorkTree(layout.root)


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Repository:
    """Freshly initialized repository; cwd is its root."""
    root = tmp_path / "work"
    root.mkdir()
    monkeypatch.chdir(root)
    return Repository.init(root)


# ------------------------------------------------------------------
# Shared test helpers
# ------------------------------------------------------------------

def write_file(repo: Repository, path: str, text: str) -> Path:
    """Write a working-tree file (parents created) and return its absolute path."""
    target = repo.root / path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text)
    return target


def read_file(repo: Repository, path: str) -> str:
    return (repo.root / path).read_text()


def commit_files(repo: Repository, files: dict[str, str], message: str) -> str:
    """Write, stage and commit ``files``; return the new commit hash."""
    for path, text in files.items():
        write_file(repo, path, text)
    repo.add(*files)
    return repo.commit(message).commit_hash


def _commit_side(
    repo: Repository, files: dict[str, str], deletions: tuple[str, ...], message: str, fallback: str
) -> str:
    if not files and not deletions:
        return fallback
    if deletions:
        repo.remove(*deletions)
    for path, text in files.items():
        write_file(repo, path, text)
    if files:
        repo.add(*files)
    return repo.commit(message).commit_hash


def diverge(
    repo: Repository,
    *,
    base: dict[str, str],
    ours: dict[str, str],
    theirs: dict[str, str],
    branch_name: str = "feature",
    delete_ours: tuple[str, ...] = (),
    delete_theirs: tuple[str, ...] = (),
) -> tuple[str, str, str]:
    """Build base -> (main: ours) / (feature: theirs) and leave HEAD on main.

    Returns:
        ``(base_hash, ours_hash, theirs_hash)``
    """
    base_hash = commit_files(repo, base, "base")
    repo.branch(branch_name)

    repo.checkout(branch_name)
    theirs_hash = _commit_side(repo, theirs, delete_theirs, "theirs", base_hash)

    repo.checkout("main")
    ours_hash = _commit_side(repo, ours, delete_ours, "ours", base_hash)
    return base_hash, ours_hash, theirs_hash
