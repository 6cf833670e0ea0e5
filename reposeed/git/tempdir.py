"""Transient working directories.

Contains:
- TempDir: A temporary directory removed when its scope ends unless kept
"""

import shutil
import tempfile
from pathlib import Path


class TempDir:
    """A temporary directory with guaranteed cleanup.

    Used as a context manager the directory is deleted on exit, on both the
    success and the error path, unless ``keep()`` handed it to the caller.
    """

    def __init__(self, prefix: str):
        self._path = Path(tempfile.mkdtemp(prefix=f"reposeed_{prefix}_"))
        self._kept = False
        self._removed = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def kept(self) -> bool:
        return self._kept

    def keep(self) -> None:
        """Transfer ownership of the directory to the caller."""
        self._kept = True

    def remove(self) -> None:
        """Delete the directory now, even if it was kept."""
        if self._removed:
            return
        shutil.rmtree(self._path, ignore_errors=True)
        self._removed = True

    def release(self) -> None:
        """Delete the directory unless it was kept."""
        if not self._kept:
            self.remove()

    def __enter__(self) -> "TempDir":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"TempDir({str(self._path)!r}, kept={self._kept})"
