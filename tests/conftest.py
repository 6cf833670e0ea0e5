"""Shared test fixtures and configuration."""

import shutil
import subprocess
import tempfile
from pathlib import Path

import pytest

from reposeed.env import clear_env


def _git(path: Path, *args: str) -> str:
    """Run git in ``path`` and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _init_repo(path: Path, branch: str = "main") -> Path:
    """Create an empty repository with a fixed identity."""
    path.mkdir(parents=True, exist_ok=True)
    _git(path, "init", "--quiet")
    _git(path, "config", "user.name", "Source Author")
    _git(path, "config", "user.email", "author@example.com")
    _git(path, "config", "commit.gpgsign", "false")
    _git(path, "symbolic-ref", "HEAD", f"refs/heads/{branch}")
    return path


def _commit_files(repo: Path, files: dict, message: str) -> str:
    """Write files (str or bytes content), commit them and return the new id."""
    for name, content in files.items():
        target = repo / name
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content)
    _git(repo, "add", "--all")
    _git(repo, "commit", "--quiet", "-m", message)
    return _git(repo, "rev-parse", "HEAD")


def pytest_collection_modifyitems(config, items):
    """Skip tests marked ``git`` when git is not installed."""
    if shutil.which("git") is not None:
        return
    skip_git = pytest.mark.skip(reason="git is not installed")
    for item in items:
        if item.get_closest_marker("git") is not None:
            item.add_marker(skip_git)


@pytest.fixture(autouse=True)
def reset_env():
    """Forget extra environment variables registered by a test."""
    yield
    clear_env()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def git():
    """Run a git command in a directory: ``git(path, "log", ...)``."""
    return _git


@pytest.fixture
def init_repo():
    """Create an empty repository: ``init_repo(path, branch="main")``."""
    return _init_repo


@pytest.fixture
def commit_files():
    """Write and commit files: ``commit_files(repo, {"a.txt": "..."}, "msg")``."""
    return _commit_files


@pytest.fixture
def source_repo(temp_dir):
    """Create a source repository with a small committed tree.

    ``lib/`` holds three files, the rest of the tree lives outside it.
    """
    repo = _init_repo(temp_dir / "source")
    _commit_files(
        repo,
        {
            "lib/a.txt": "alpha\n",
            "lib/b.txt": "bravo\n\n",
            "lib/sub/c.bin": b"\x00\x01\x02\xff binary",
            "other/d.txt": "delta\n",
            "README.md": "# source\n",
        },
        "Add initial files",
    )
    return repo
