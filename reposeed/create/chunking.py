"""Chunked import of an exported tree.

Every single payload reposeed processes must stay far below a hard size
ceiling, so an export is committed as a chain of bounded chunks instead of
one commit.

Contains:
- CHUNK_MAX_FILES: Default number of files per chunk
- list_untracked_files: List files git does not track yet
- chunk_paths: Partition paths into bounded batches
- get_file_sizes: Sizes of files relative to a directory
- commit_chunks: Commit each batch on top of the previous one
"""

from pathlib import Path
from typing import Optional

from reposeed.git.runner import run_command, run_git
from reposeed.log import Logger, NullLogger


# 2 GiB ceiling / 500 files assumes files average at most 4 MiB
CHUNK_MAX_FILES = 500

CHUNK_SUBJECT = "unfiltered commit chunk #{index}"


def list_untracked_files(path: Path) -> list[str]:
    """Return every untracked, non-ignored file in a work tree."""
    output = run_command(
        ["git", "ls-files", "-z", "--others", "--exclude-standard"],
        cwd=path,
    ).stdout
    return [name for name in output.split("\x00") if name]


def get_file_sizes(root: Path, paths: list[str]) -> dict[str, int]:
    """Return the on-disk size of each path under ``root``."""
    return {p: (root / p).lstat().st_size for p in paths}


def chunk_paths(
    paths: list[str],
    max_files: int = CHUNK_MAX_FILES,
    max_bytes: Optional[int] = None,
    sizes: Optional[dict[str, int]] = None,
) -> list[list[str]]:
    """Partition paths into ordered batches.

    Each batch holds at most ``max_files`` paths. With ``max_bytes`` a batch
    is also closed before its total size would pass the budget; a file larger
    than the budget on its own gets a batch to itself.

    Args:
        paths: Paths in the order they should be committed.
        max_files: Maximum entries per batch.
        max_bytes: Optional byte budget per batch.
        sizes: Size of each path; required when ``max_bytes`` is set.

    Returns:
        List of batches, preserving input order.
    """
    if max_files < 1:
        raise ValueError("max_files must be at least 1")
    if max_bytes is not None and sizes is None:
        raise ValueError("sizes are required when max_bytes is set")

    chunks: list[list[str]] = []
    current: list[str] = []
    current_bytes = 0

    for path in paths:
        size = sizes[path] if max_bytes is not None else 0
        too_many = len(current) >= max_files
        too_big = max_bytes is not None and current and current_bytes + size > max_bytes
        if too_many or too_big:
            chunks.append(current)
            current = []
            current_bytes = 0
        current.append(path)
        current_bytes += size

    if current:
        chunks.append(current)
    return chunks


def commit_chunks(path: Path, chunks: list[list[str]], logger: Logger = None) -> list[str]:
    """Commit each batch in order, forming one linear chain.

    Args:
        path: Work tree holding the files.
        chunks: Batches from ``chunk_paths``.
        logger: Progress sink.

    Returns:
        Commit ids in creation order.
    """
    logger = logger or NullLogger()
    commits = []
    for i, chunk in enumerate(chunks):
        logger.verbose(f"    Processing chunk {i + 1}/{len(chunks)}")
        run_command(["git", "add", "--force", "--"] + chunk, cwd=path)
        run_command(
            ["git", "commit", "--quiet", "--no-verify", "--message", CHUNK_SUBJECT.format(index=i)],
            cwd=path,
        )
        commits.append(run_git(path, ["rev-parse", "HEAD"]))
    return commits
