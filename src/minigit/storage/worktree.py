"""Working tree access for MiniGit.

Tracked paths are stored as normalized POSIX paths relative to the
repository root.  The metadata directory is never read, listed or
written through this module.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path, PurePosixPath

from minigit.exceptions import InvalidPathError, StorageIOError
from minigit.storage.atomic import atomic_write_bytes, read_bytes, remove_file

logger = logging.getLogger(__name__)


def is_safe_repo_path(path: str, metadata_dir: str = ".minigit") -> bool:
    """True for a normalized relative POSIX path that stays inside the tree."""
    if not path or "\n" in path or "\r" in path or "\\" in path or path.startswith("/"):
        return False
    try:
        path.encode("utf-8")
    except UnicodeEncodeError:
        return False
    parts = PurePosixPath(path).parts
    if not parts or parts[0] == metadata_dir:
        return False
    return all(p not in ("", ".", "..") for p in parts) and "/".join(parts) == path


class WorkTree:
    """Reads and writes tracked files under the repository root."""

    def __init__(self, root: Path, metadata_dir: str = ".minigit") -> None:
        self._root = root
        self._metadata_dir = metadata_dir

    @property
    def root(self) -> Path:
        return self._root

    def to_repo_path(self, user_path: str | os.PathLike[str], cwd: Path | None = None) -> str:
        """Convert a user-supplied path into a tracked repo path.

        Relative paths are taken from *cwd* (default: the process working
        directory).

        Raises:
            InvalidPathError: If the path escapes the tree or names the
                metadata directory.
        """
        raw = Path(user_path)
        if not raw.is_absolute():
            raw = (cwd or Path.cwd()) / raw
        absolute = Path(os.path.normpath(raw))
        resolved_parent = Path(os.path.realpath(absolute.parent)) / absolute.name
        roots = (Path(os.path.normpath(self._root)), Path(os.path.realpath(self._root)))
        rel: Path | None = None
        for candidate in (absolute, resolved_parent):
            for root in roots:
                try:
                    rel = candidate.relative_to(root)
                    break
                except ValueError:
                    continue
            if rel is not None:
                break
        if rel is None:
            raise InvalidPathError(str(user_path), "outside the repository")
        repo_path = rel.as_posix()
        if repo_path in ("", "."):
            return "."
        if not is_safe_repo_path(repo_path, self._metadata_dir):
            raise InvalidPathError(str(user_path), "cannot be tracked")
        return repo_path

    def abs_path(self, repo_path: str) -> Path:
        if not is_safe_repo_path(repo_path, self._metadata_dir):
            raise InvalidPathError(repo_path, "cannot be tracked")
        return self._root / repo_path

    def exists(self, repo_path: str) -> bool:
        return self.abs_path(repo_path).is_file()

    def is_dir(self, repo_path: str) -> bool:
        return repo_path == "." or self.abs_path(repo_path).is_dir()

    def read(self, repo_path: str) -> bytes:
        return read_bytes(self.abs_path(repo_path))

    def write(self, repo_path: str, data: bytes) -> None:
        path = self.abs_path(repo_path)
        if path.is_dir():
            raise InvalidPathError(repo_path, "a directory is in the way")
        atomic_write_bytes(path, data)

    def remove(self, repo_path: str) -> bool:
        """Delete a tracked file and prune directories it leaves empty."""
        path = self.abs_path(repo_path)
        removed = remove_file(path)
        parent = path.parent
        while removed and parent != self._root:
            try:
                parent.rmdir()
            except OSError:
                break
            parent = parent.parent
        return removed

    def check_replace(self, removals: Iterable[str], writes: Iterable[str]) -> None:
        """Verify that ``writes`` can land once ``removals`` are deleted.

        Nothing is touched.  A directory sitting on a path to be written is
        only acceptable if deleting ``removals`` prunes it away entirely;
        an existing non-directory on a parent path must itself be removed.

        Raises:
            InvalidPathError: For the first path that would fail.
        """
        removing = set(removals)
        for repo_path in sorted(removing):
            if self.abs_path(repo_path).is_dir():
                raise InvalidPathError(repo_path, "a directory is in the way")
        for repo_path in sorted(writes):
            path = self.abs_path(repo_path)
            if path.is_dir() and not self._pruned_by(path, removing):
                raise InvalidPathError(repo_path, "a directory is in the way")
            for parent in PurePosixPath(repo_path).parents:
                parent_path = parent.as_posix()
                if parent_path == ".":
                    continue
                target = self._root / parent_path
                if target.exists() and not target.is_dir() and parent_path not in removing:
                    raise InvalidPathError(repo_path, f"'{parent_path}' is not a directory")

    def _pruned_by(self, directory: Path, removing: set[str]) -> bool:
        for dirpath, dirnames, filenames in os.walk(directory):
            if not dirnames and not filenames:
                return False
            for name in filenames:
                rel = (Path(dirpath) / name).relative_to(self._root).as_posix()
                if rel not in removing:
                    return False
        return True

    def iter_files(self, start: str = ".") -> Iterator[str]:
        """Yield repo paths of every regular file under *start*, skipping metadata."""
        base = self._root if start == "." else self.abs_path(start)
        try:
            for dirpath, dirnames, filenames in os.walk(base):
                current = Path(dirpath)
                if current == self._root:
                    dirnames[:] = [d for d in dirnames if d != self._metadata_dir]
                dirnames.sort()
                for name in sorted(filenames):
                    rel = (current / name).relative_to(self._root).as_posix()
                    if is_safe_repo_path(rel, self._metadata_dir):
                        yield rel
                    else:
                        logger.debug("Skipping untrackable path %r", rel)
        except OSError as e:
            raise StorageIOError("walk", str(base), e) from e
