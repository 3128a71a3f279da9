"""Atomic file primitives for MiniGit storage.

Every persisted file is written to a temporary file in the destination
directory, flushed to disk, then moved over the final name with
``os.replace``.  Readers see either the old contents or the new ones,
never a partial write.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from minigit.exceptions import StorageIOError

logger = logging.getLogger(__name__)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write *data* to *path* atomically, creating parent directories.

    Raises:
        StorageIOError: If any filesystem step fails.  The destination is
            left untouched and the temp file is removed.
    """
    fd: int | None = None
    temp_path: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=str(path.parent), prefix=".tmp_")
        with os.fdopen(fd, "wb") as fh:
            fd = None
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(temp_path, path)
        temp_path = None
    except OSError as e:
        raise StorageIOError("write", str(path), e) from e
    finally:
        if fd is not None:
            os.close(fd)
        if temp_path is not None and os.path.exists(temp_path):
            os.unlink(temp_path)


def atomic_write_text(path: Path, text: str) -> None:
    atomic_write_bytes(path, text.encode("utf-8"))


def read_bytes(path: Path) -> bytes:
    """Read a file, wrapping OS failures.  Missing files raise FileNotFoundError."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        raise
    except OSError as e:
        raise StorageIOError("read", str(path), e) from e


def read_text_or_none(path: Path) -> str | None:
    """Read a UTF-8 file, returning None if it does not exist."""
    try:
        return read_bytes(path).decode("utf-8")
    except FileNotFoundError:
        return None


def remove_file(path: Path) -> bool:
    """Delete a file if present.  Returns True if something was removed."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        raise StorageIOError("remove", str(path), e) from e
    logger.debug("Removed %s", path)
    return True
