"""Advisory file locks scoped to a repository.

Contains:
- get_lock_file_path_for_repo_path: Derive the lock file for a repository
- ScopedFlock: Shared or exclusive flock released exactly once
"""

import fcntl
import os
from pathlib import Path


def get_lock_file_path_for_repo_path(repo_path: Path) -> Path:
    """Return the lock file guarding a repository.

    The lock file sits beside the repository directory so it never shows up
    in the repository's own work tree.

    Args:
        repo_path: Path to the repository.

    Returns:
        Path to ``<parent>/.<name>.reposeed-lock``.
    """
    repo_path = Path(repo_path).resolve()
    return repo_path.parent / f".{repo_path.name}.reposeed-lock"


class ScopedFlock:
    """An acquired ``flock`` on a lock file.

    Acquisition blocks until the lock is available. Use as a context manager
    or call ``release()`` from a ``finally`` block. With ``remove_on_release``
    the lock file is deleted (while still held) on release; use it only for
    locks on throwaway repositories nobody else can be waiting on.
    """

    SHARED = fcntl.LOCK_SH
    EXCLUSIVE = fcntl.LOCK_EX

    def __init__(self, path: Path, operation: int, remove_on_release: bool = False):
        self.path = Path(path)
        self.operation = operation
        self.remove_on_release = remove_on_release
        self._fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o644)
        try:
            fcntl.flock(self._fd, operation)
        except OSError:
            os.close(self._fd)
            raise
        self._released = False

    @classmethod
    def create_shared(cls, path: Path, remove_on_release: bool = False) -> "ScopedFlock":
        return cls(path, cls.SHARED, remove_on_release)

    @classmethod
    def create_exclusive(cls, path: Path, remove_on_release: bool = False) -> "ScopedFlock":
        return cls(path, cls.EXCLUSIVE, remove_on_release)

    @property
    def is_shared(self) -> bool:
        return self.operation == self.SHARED

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            raise RuntimeError(f"Lock already released: {self.path}")
        try:
            if self.remove_on_release:
                self.path.unlink(missing_ok=True)
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._released = True

    def __enter__(self) -> "ScopedFlock":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._released:
            self.release()
