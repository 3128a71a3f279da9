"""On-disk layout of a MiniGit repository.

```
<root>/<meta>/
  config.json
  objects/ab/cdef...     blobs, sharded by the first two hex chars
  commits/ab/cdef...     commit objects, same sharding
  refs/heads/<branch>    one commit hash line
  HEAD                   "ref: refs/heads/<name>" or a raw hash
  index                  lines of "<path> <blob-hash>"
  MERGE_STATE            JSON, only while a conflicted merge is pending
  lock
```
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RepoLayout:
    """Resolved paths for one repository."""

    root: Path
    metadata_dir: str = ".minigit"

    @property
    def meta(self) -> Path:
        return self.root / self.metadata_dir

    @property
    def config_file(self) -> Path:
        return self.meta / "config.json"

    @property
    def objects_dir(self) -> Path:
        return self.meta / "objects"

    @property
    def commits_dir(self) -> Path:
        return self.meta / "commits"

    @property
    def heads_dir(self) -> Path:
        return self.meta / "refs" / "heads"

    @property
    def head_file(self) -> Path:
        return self.meta / "HEAD"

    @property
    def index_file(self) -> Path:
        return self.meta / "index"

    @property
    def merge_state_file(self) -> Path:
        return self.meta / "MERGE_STATE"

    @property
    def lock_file(self) -> Path:
        return self.meta / "lock"

    def is_initialized(self) -> bool:
        return self.meta.is_dir()
