"""Chunked import and squash engine.

This package provides:
- chunking: list_untracked_files, chunk_paths, get_file_sizes, commit_chunks
- engine: create_new_git_repo, create_new_git_repo_at, create_new_git_repo_impl
- phase: CreateNewRepoPhase, PhaseResult
"""

from reposeed.create.chunking import (
    CHUNK_MAX_FILES,
    list_untracked_files,
    chunk_paths,
    get_file_sizes,
    commit_chunks,
)
from reposeed.create.engine import (
    INITIAL_COMMIT_SUBJECT,
    create_new_git_repo,
    create_new_git_repo_at,
    create_new_git_repo_impl,
    read_chunk_changesets,
    filter_changesets,
    squash_to_root,
)
from reposeed.create.phase import (
    CreateNewRepoPhase,
    PhaseResult,
)


__all__ = [
    # Chunking
    "CHUNK_MAX_FILES",
    "list_untracked_files",
    "chunk_paths",
    "get_file_sizes",
    "commit_chunks",
    # Engine
    "INITIAL_COMMIT_SUBJECT",
    "create_new_git_repo",
    "create_new_git_repo_at",
    "create_new_git_repo_impl",
    "read_chunk_changesets",
    "filter_changesets",
    "squash_to_root",
    # Phase
    "CreateNewRepoPhase",
    "PhaseResult",
]
