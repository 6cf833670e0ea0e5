"""Git plumbing for reposeed.

This package provides:
- runner: CommandResult, run_command, run_git, exec_steps
- tempdir: TempDir
- lock: ScopedFlock, get_lock_file_path_for_repo_path
- diff: split_diffs, render_patch, get_submodule_revision
- repo: Repo, SourceRepo, DestinationRepo, ExportResult, open_repo, init_git_repo
"""

# Runner utilities
from reposeed.git.runner import (
    CommandResult,
    run_command,
    run_git,
    exec_steps,
)

# Resources
from reposeed.git.tempdir import TempDir
from reposeed.git.lock import (
    ScopedFlock,
    get_lock_file_path_for_repo_path,
)

# Patch text
from reposeed.git.diff import (
    split_diffs,
    render_patch,
    get_submodule_revision,
)

# Repository handles
from reposeed.git.repo import (
    ExportResult,
    Repo,
    SourceRepo,
    DestinationRepo,
    open_repo,
    init_git_repo,
)


__all__ = [
    # Runner
    "CommandResult",
    "run_command",
    "run_git",
    "exec_steps",
    # Resources
    "TempDir",
    "ScopedFlock",
    "get_lock_file_path_for_repo_path",
    # Diff
    "split_diffs",
    "render_patch",
    "get_submodule_revision",
    # Repo
    "ExportResult",
    "Repo",
    "SourceRepo",
    "DestinationRepo",
    "open_repo",
    "init_git_repo",
]
