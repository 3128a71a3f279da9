"""Exclusive repository lock.

One ``fcntl.flock`` on ``<meta>/lock`` guards the object area, refs and
index for the duration of a command.  Acquisition polls with a bounded
wait and raises RepositoryBusyError on timeout.
"""

from __future__ import annotations

import fcntl
import logging
import time
from pathlib import Path
from types import TracebackType
from typing import IO

from minigit.exceptions import RepositoryBusyError, StorageIOError

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.05


class RepositoryLock:
    """Re-entrant (per instance) exclusive lock on a repository."""

    def __init__(self, path: Path, timeout: float = 5.0) -> None:
        self._path = path
        self._timeout = timeout
        self._handle: IO[bytes] | None = None
        self._depth = 0

    @property
    def held(self) -> bool:
        return self._depth > 0

    def acquire(self) -> None:
        if self._depth > 0:
            self._depth += 1
            return
        try:
            handle = open(self._path, "ab")
        except OSError as e:
            raise StorageIOError("lock", str(self._path), e) from e

        start = time.monotonic()
        while True:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() - start >= self._timeout:
                    handle.close()
                    raise RepositoryBusyError(str(self._path), self._timeout) from None
                time.sleep(_POLL_INTERVAL)
            except OSError as e:
                handle.close()
                raise StorageIOError("lock", str(self._path), e) from e

        self._handle = handle
        self._depth = 1
        logger.debug("Acquired repository lock %s", self._path)

    def release(self) -> None:
        if self._depth == 0:
            return
        self._depth -= 1
        if self._depth > 0 or self._handle is None:
            return
        try:
            fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
        finally:
            self._handle.close()
            self._handle = None
        logger.debug("Released repository lock %s", self._path)

    def __enter__(self) -> RepositoryLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.release()
