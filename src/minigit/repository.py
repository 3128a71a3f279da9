"""Repository -- the public entry point for MiniGit.

Ties together the content store, commit graph, ref store, staging index
and merge engine behind one method per command.  Every mutating command
holds the repository lock for its whole duration and reloads the index
and refs from disk, so separate processes see a consistent state.

Commit ordering inside the lock: write the commit object, swap the ref,
clear the index.  A failure before the ref swap leaves the previous
state intact (at worst an unreachable object remains).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from itertools import islice
from pathlib import Path

from minigit.engine.commit import CommitGraph
from minigit.engine.hashing import content_hash
from minigit.exceptions import (
    CorruptObjectError,
    InvalidMessageError,
    MergeInProgressError,
    NoMergeInProgressError,
    NotARepositoryError,
    NothingToCommitError,
    PathNotFoundError,
    StorageIOError,
    UnresolvedConflictsError,
)
from minigit.models.commit import CommitNode
from minigit.models.config import RepoConfig, StatusInfo
from minigit.models.merge import MergeResult, MergeState
from minigit.models.refs import BranchInfo, HeadState
from minigit.operations import branch as branch_ops
from minigit.operations import merge as merge_ops
from minigit.operations import navigation
from minigit.operations.dag import iter_first_parent
from minigit.storage.atomic import atomic_write_text, read_text_or_none
from minigit.storage.index import REMOVED, StagingIndex
from minigit.storage.layout import RepoLayout
from minigit.storage.lock import RepositoryLock
from minigit.storage.objects import ObjectStore
from minigit.storage.refs import RefStore
from minigit.storage.worktree import WorkTree

logger = logging.getLogger(__name__)

DEFAULT_METADATA_DIR = ".minigit"


class Repository:
    """A MiniGit repository rooted at a working-tree directory.

    Create one with :meth:`Repository.init`, :meth:`Repository.open` or
    :meth:`Repository.discover`.

    Example::

        repo = Repository.init("project")
        repo.add("a.txt")
        repo.commit("first")
        repo.branch("feature")
        result = repo.merge("feature")
    """

    def __init__(self, layout: RepoLayout, config: RepoConfig) -> None:
        self._layout = layout
        self._config = config
        self._blobs = ObjectStore(layout.objects_dir)
        self._graph = CommitGraph(ObjectStore(layout.commits_dir), author=config.author)
        self._refs = RefStore(layout, default_branch=config.default_branch)
        self._worktree = WorkTree(layout.root, layout.metadata_dir)
        self._lock = RepositoryLock(layout.lock_file, timeout=config.lock_timeout)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def init(
        cls,
        root: str | os.PathLike[str] = ".",
        *,
        config: RepoConfig | None = None,
        metadata_dir: str = DEFAULT_METADATA_DIR,
    ) -> Repository:
        """Create an empty repository (HEAD unborn on the default branch).

        Initializing an existing repository is a no-op that opens it.
        """
        layout = RepoLayout(Path(root).absolute(), metadata_dir)
        if layout.is_initialized():
            logger.info("Repository already initialized at %s", layout.meta)
            return cls.open(root, metadata_dir=metadata_dir)

        config = config or RepoConfig()
        try:
            for directory in (layout.objects_dir, layout.commits_dir, layout.heads_dir):
                directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError("init", str(layout.meta), e) from e
        atomic_write_text(layout.config_file, config.model_dump_json(indent=2))
        repo = cls(layout, config)
        repo._refs.attach_head(config.default_branch)
        StagingIndex(layout.index_file).clear()
        logger.info("Initialized empty repository in %s", layout.meta)
        return repo

    @classmethod
    def open(
        cls,
        root: str | os.PathLike[str] = ".",
        *,
        metadata_dir: str = DEFAULT_METADATA_DIR,
    ) -> Repository:
        """Open an existing repository rooted exactly at ``root``.

        Raises:
            NotARepositoryError: If ``root`` has no metadata directory.
            CorruptObjectError: If the config file cannot be parsed.
        """
        layout = RepoLayout(Path(root).absolute(), metadata_dir)
        if not layout.is_initialized():
            raise NotARepositoryError(str(layout.root))
        text = read_text_or_none(layout.config_file)
        if text is None:
            config = RepoConfig()
        else:
            try:
                config = RepoConfig.model_validate_json(text)
            except ValueError as e:
                raise CorruptObjectError("config.json", str(e)) from None
        return cls(layout, config)

    @classmethod
    def discover(
        cls,
        start: str | os.PathLike[str] = ".",
        *,
        metadata_dir: str = DEFAULT_METADATA_DIR,
    ) -> Repository:
        """Open the nearest repository at or above ``start``.

        Raises:
            NotARepositoryError: If no ancestor directory is a repository.
        """
        here = Path(start).absolute()
        for candidate in (here, *here.parents):
            if (candidate / metadata_dir).is_dir():
                return cls.open(candidate, metadata_dir=metadata_dir)
        raise NotARepositoryError(str(here))

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def root(self) -> Path:
        return self._layout.root

    @property
    def config(self) -> RepoConfig:
        return self._config

    @property
    def graph(self) -> CommitGraph:
        return self._graph

    @property
    def blobs(self) -> ObjectStore:
        return self._blobs

    @property
    def refs(self) -> RefStore:
        return self._refs

    @property
    def head_state(self) -> HeadState:
        return self._refs.read_head()

    @property
    def head(self) -> str | None:
        """Commit hash HEAD resolves to, or None before the first commit."""
        return self._refs.resolve_head()

    @property
    def current_branch(self) -> str | None:
        return self._refs.current_branch()

    @property
    def is_detached(self) -> bool:
        return self._refs.read_head().is_detached

    @property
    def merge_state(self) -> MergeState | None:
        return merge_ops.load_merge_state(self._layout.merge_state_file)

    def staged(self) -> dict[str, str]:
        """Current staging index entries (``-`` marks a staged removal)."""
        return self._index().snapshot()

    def get_commit(self, commit_hash: str) -> CommitNode:
        return self._graph.load(commit_hash)

    def read_blob(self, blob_hash: str) -> bytes:
        return self._blobs.get(blob_hash)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the exclusive repository lock for a unit of work."""
        with self._lock:
            yield

    def _index(self) -> StagingIndex:
        return StagingIndex(self._layout.index_file)

    def _head_files(self) -> dict[str, str]:
        head = self._refs.resolve_head()
        if head is None:
            return {}
        return dict(self._graph.load(head).tracked_files)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def add(self, *paths: str | os.PathLike[str], cwd: Path | None = None) -> dict[str, str]:
        """Stage files (or every file under a directory).

        A path that no longer exists but is tracked or staged is staged
        for removal.

        Returns:
            The staged ``path -> blob hash`` entries (``-`` for removals).

        Raises:
            PathNotFoundError: If a path is neither on disk nor tracked.
            InvalidPathError: If a path lies outside the working tree.
        """
        with self.locked():
            index = self._index()
            head_files = self._head_files()
            state = merge_ops.load_merge_state(self._layout.merge_state_file)
            merging = state is not None
            known = set(head_files) | set(index) | set(state.conflicts if state else [])
            staged: dict[str, str] = {}

            for user_path in paths:
                repo_path = self._worktree.to_repo_path(user_path, cwd)
                if self._worktree.is_dir(repo_path):
                    prefix = "" if repo_path == "." else repo_path + "/"
                    on_disk = list(self._worktree.iter_files(repo_path))
                    for path in on_disk:
                        staged[path] = self._blobs.put(self._worktree.read(path))
                    for path in known - set(on_disk):
                        if path.startswith(prefix):
                            staged[path] = REMOVED
                elif self._worktree.exists(repo_path):
                    staged[repo_path] = self._blobs.put(self._worktree.read(repo_path))
                elif repo_path in known:
                    staged[repo_path] = REMOVED
                else:
                    raise PathNotFoundError(str(user_path))

            # Re-adding HEAD's exact content drops the entry, except mid-merge
            # where staging is how a conflict is marked resolved.
            for path, blob_hash in sorted(staged.items()):
                unchanged = head_files.get(path) == blob_hash or (
                    blob_hash == REMOVED and path not in head_files
                )
                if unchanged and not merging:
                    del staged[path]
                    index.unstage(path)
            index.stage_many(staged)
            for path, blob_hash in sorted(staged.items()):
                logger.debug("Staged %s -> %s", path, blob_hash[:12])
            return staged

    def remove(self, *paths: str | os.PathLike[str], cwd: Path | None = None) -> list[str]:
        """Stage removal of tracked files and delete them from the working tree.

        Raises:
            PathNotFoundError: If a path is neither tracked nor staged.
        """
        with self.locked():
            index = self._index()
            known = set(self._head_files()) | set(index)
            removed: list[str] = []
            for user_path in paths:
                repo_path = self._worktree.to_repo_path(user_path, cwd)
                if repo_path not in known:
                    raise PathNotFoundError(str(user_path))
                self._worktree.remove(repo_path)
                removed.append(repo_path)
            index.stage_many({path: REMOVED for path in removed})
            return removed

    def commit(self, message: str) -> CommitNode:
        """Snapshot the staged changes into a new commit on HEAD.

        The new commit's file map is the parent's file map overlaid with
        the index.  While a merge is pending the commit gets a second
        parent (the merged branch tip) and every conflicted path must be
        staged first.

        Raises:
            NothingToCommitError: If nothing is staged, or the resulting
                file map equals the parent's.
            UnresolvedConflictsError: If a conflicted path is not staged.
            InvalidMessageError: If the message is not encodable as UTF-8.
        """
        try:
            message.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidMessageError(f"undecodable bytes at position {e.start}") from None
        with self.locked():
            index = self._index()
            state = merge_ops.load_merge_state(self._layout.merge_state_file)
            parent = self._refs.resolve_head()

            if state is not None:
                unresolved = [p for p in state.conflicts if p not in index]
                if unresolved:
                    raise UnresolvedConflictsError(unresolved)
            elif not index:
                raise NothingToCommitError()

            base = dict(self._graph.load(parent).tracked_files) if parent else {}
            tree = index.apply(base)
            if state is None and tree == base:
                raise NothingToCommitError()

            parents = [parent] if parent else []
            if state is not None:
                parents.append(state.their_hash)

            node = self._graph.create(message, parents, tree)
            self._graph.store(node)
            self._refs.update_head(node.commit_hash)
            index.clear()
            if state is not None:
                merge_ops.clear_merge_state(self._layout.merge_state_file)
            logger.info("Committed %s: %s", node.commit_hash[:8], message)
            return node

    def log(self, limit: int | None = None) -> list[CommitNode]:
        """First-parent history from HEAD, newest first.  Empty before the first commit."""
        head = self._refs.resolve_head()
        if head is None:
            return []
        return list(islice(iter_first_parent(head, self._graph), limit))

    def branch(self, name: str) -> str:
        """Create (or silently overwrite) branch ``name`` at HEAD.

        Raises:
            NoCommitsYetError: If HEAD has no commit.
            InvalidBranchNameError: If the name is invalid.
        """
        with self.locked():
            return branch_ops.create_branch(name, self._refs.resolve_head(), self._refs)

    def list_branches(self) -> list[BranchInfo]:
        return branch_ops.list_branches(self._refs)

    def checkout(self, target: str) -> str:
        """Checkout a branch (attached HEAD) or commit hash / prefix (detached HEAD).

        Returns:
            The commit hash now checked out.

        Raises:
            RefNotFoundError: If ``target`` is neither a branch nor a stored commit.
            MergeInProgressError: If a conflicted merge is pending.
        """
        with self.locked():
            if self._layout.merge_state_file.exists():
                raise MergeInProgressError("checkout")
            commit_hash, _is_detached = navigation.checkout(
                target,
                refs=self._refs,
                graph=self._graph,
                blobs=self._blobs,
                index=self._index(),
                worktree=self._worktree,
            )
            return commit_hash

    def merge(self, source_branch: str, *, fast_forward: bool = False) -> MergeResult:
        """Merge ``source_branch`` into HEAD.

        Conflicts are reported in the returned :class:`MergeResult`
        (``merge_type == "conflict"``), not raised.

        Raises:
            MergeInProgressError: If a conflicted merge is already pending.
            NoCommitsYetError, RefNotFoundError, DirtyIndexError,
            NoCommonAncestorError: When the merge cannot run at all.
        """
        with self.locked():
            if self._layout.merge_state_file.exists():
                raise MergeInProgressError("merge")
            return merge_ops.merge_branches(
                source_branch,
                refs=self._refs,
                graph=self._graph,
                blobs=self._blobs,
                index=self._index(),
                worktree=self._worktree,
                merge_state_path=self._layout.merge_state_file,
                fast_forward=fast_forward,
            )

    def abort_merge(self) -> None:
        """Drop a pending merge: restore HEAD's files, clear index and merge state.

        Raises:
            NoMergeInProgressError: If no merge is pending.
        """
        with self.locked():
            state = merge_ops.load_merge_state(self._layout.merge_state_file)
            if state is None:
                raise NoMergeInProgressError()
            index = self._index()
            head_files = self._head_files()
            for path in sorted(set(state.conflicts) | set(index)):
                if path in head_files:
                    self._worktree.write(path, self._blobs.get(head_files[path]))
                else:
                    self._worktree.remove(path)
            index.clear()
            merge_ops.clear_merge_state(self._layout.merge_state_file)
            logger.info("Aborted merge of %s", state.their_branch)

    def status(self) -> StatusInfo:
        """Compare HEAD, the index and the working tree."""
        head_state = self._refs.read_head()
        head_files = self._head_files()
        staged = self._index().snapshot()
        state = merge_ops.load_merge_state(self._layout.merge_state_file)

        added, modified, removed = [], [], []
        for path, blob_hash in sorted(staged.items()):
            if blob_hash == REMOVED:
                if path in head_files:
                    removed.append(path)
            elif path not in head_files:
                added.append(path)
            elif head_files[path] != blob_hash:
                modified.append(path)

        expected = {p: h for p, h in staged.items() if h != REMOVED}
        for path, blob_hash in head_files.items():
            if staged.get(path) != REMOVED:
                expected.setdefault(path, blob_hash)

        unstaged_modified, unstaged_deleted = [], []
        for path, blob_hash in sorted(expected.items()):
            if not self._worktree.exists(path):
                unstaged_deleted.append(path)
            elif content_hash(self._worktree.read(path)) != blob_hash:
                unstaged_modified.append(path)

        untracked = [p for p in self._worktree.iter_files() if p not in expected and p not in staged]

        return StatusInfo(
            head=head_state,
            staged_added=added,
            staged_modified=modified,
            staged_removed=removed,
            unstaged_modified=unstaged_modified,
            unstaged_deleted=unstaged_deleted,
            untracked=untracked,
            conflicts=[p for p in (state.conflicts if state else []) if p not in staged],
            merging_branch=state.their_branch if state else None,
        )

    def __repr__(self) -> str:
        return f"Repository(root='{self.root}', head='{self.head}')"
