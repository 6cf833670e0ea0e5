"""Tests for reposeed.git.tempdir and reposeed.git.lock modules."""

import fcntl
import os

import pytest

from reposeed.git.lock import ScopedFlock, get_lock_file_path_for_repo_path
from reposeed.git.tempdir import TempDir


class TestTempDir:
    """Tests for TempDir class."""

    def test_creates_directory(self):
        """Test that the directory exists while in scope."""
        with TempDir("test") as tmp:
            assert tmp.path.is_dir()
            assert "reposeed_test_" in tmp.path.name

    def test_removed_on_exit(self):
        """Test that the directory is deleted when the scope ends."""
        with TempDir("test") as tmp:
            (tmp.path / "file.txt").write_text("x")
            path = tmp.path
        assert not path.exists()

    def test_removed_on_error(self):
        """Test that the directory is deleted when the scope raises."""
        with pytest.raises(RuntimeError):
            with TempDir("test") as tmp:
                path = tmp.path
                raise RuntimeError("boom")
        assert not path.exists()

    def test_kept_directory_survives(self):
        """Test that keep() hands the directory to the caller."""
        with TempDir("test") as tmp:
            tmp.keep()
            path = tmp.path
        try:
            assert path.exists()
            assert tmp.kept
        finally:
            tmp.remove()
        assert not path.exists()

    def test_remove_is_idempotent(self):
        """Test that removing twice is harmless."""
        tmp = TempDir("test")
        tmp.remove()
        tmp.remove()
        assert not tmp.path.exists()


class TestLockFilePath:
    """Tests for get_lock_file_path_for_repo_path function."""

    def test_lock_beside_repository(self, temp_dir):
        """Test that the lock file lives next to, not inside, the repo."""
        repo = temp_dir / "repo"
        repo.mkdir()

        lock_path = get_lock_file_path_for_repo_path(repo)

        assert lock_path.parent == repo.resolve().parent
        assert lock_path.name == ".repo.reposeed-lock"

    def test_deterministic(self, temp_dir):
        """Test that the same path always maps to the same lock."""
        repo = temp_dir / "repo"
        assert get_lock_file_path_for_repo_path(repo) == get_lock_file_path_for_repo_path(repo / ".." / "repo")


class TestScopedFlock:
    """Tests for ScopedFlock class."""

    def _try_lock(self, path, operation):
        fd = os.open(path, os.O_RDWR | os.O_CREAT)
        try:
            fcntl.flock(fd, operation | fcntl.LOCK_NB)
            fcntl.flock(fd, fcntl.LOCK_UN)
            return True
        except BlockingIOError:
            return False
        finally:
            os.close(fd)

    def test_shared_locks_coexist(self, temp_dir):
        """Test that two shared holders can hold the lock together."""
        path = temp_dir / "lock"
        with ScopedFlock.create_shared(path) as lock:
            assert lock.is_shared
            assert self._try_lock(path, fcntl.LOCK_SH)

    def test_shared_lock_blocks_exclusive(self, temp_dir):
        """Test that a shared holder blocks an exclusive acquisition."""
        path = temp_dir / "lock"
        with ScopedFlock.create_shared(path):
            assert not self._try_lock(path, fcntl.LOCK_EX)
        assert self._try_lock(path, fcntl.LOCK_EX)

    def test_exclusive_lock_blocks_shared(self, temp_dir):
        """Test that an exclusive holder blocks shared acquisition."""
        path = temp_dir / "lock"
        lock = ScopedFlock.create_exclusive(path)
        assert not lock.is_shared
        assert not self._try_lock(path, fcntl.LOCK_SH)
        lock.release()
        assert self._try_lock(path, fcntl.LOCK_SH)

    def test_released_on_error(self, temp_dir):
        """Test that the lock is released when the scope raises."""
        path = temp_dir / "lock"
        with pytest.raises(ValueError):
            with ScopedFlock.create_exclusive(path) as lock:
                raise ValueError("boom")
        assert lock.released
        assert self._try_lock(path, fcntl.LOCK_EX)

    def test_double_release_raises(self, temp_dir):
        """Test that a lock is released exactly once."""
        lock = ScopedFlock.create_shared(temp_dir / "lock")
        lock.release()
        with pytest.raises(RuntimeError):
            lock.release()

    def test_context_exit_after_manual_release(self, temp_dir):
        """Test that leaving the scope after release() does not release again."""
        with ScopedFlock.create_shared(temp_dir / "lock") as lock:
            lock.release()
        assert lock.released

    def test_remove_on_release_deletes_lock_file(self, temp_dir):
        """Test that a lock created with remove_on_release leaves no file."""
        path = temp_dir / "lock"
        with ScopedFlock.create_exclusive(path, remove_on_release=True):
            assert path.exists()
        assert not path.exists()

    def test_lock_file_kept_by_default(self, temp_dir):
        """Test that a lock file stays after release by default."""
        path = temp_dir / "lock"
        with ScopedFlock.create_shared(path):
            pass
        assert path.exists()
