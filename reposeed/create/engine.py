"""Create a new repository holding one filtered, squashed commit.

The export of a large source tree cannot be processed as one payload, so it
is committed in chunks to a scratch repository, read back one chunk commit at
a time as changesets, filtered, replayed into the destination repository and
finally squashed into a single commit:

1. ``git ls-files`` lists every exported file; the list is split into chunks.
2. Each chunk is ``git add``-ed and committed on top of the previous one.
3. Starting at the root commit (``git rev-list --max-parents=0``) every chunk
   commit is read into a Changeset, filtered and committed to the destination.
4. The destination branch is soft-reset to its root and the root is amended,
   folding every chunk into one commit that keeps the root's message (and so
   its tracking footer).

Contains:
- INITIAL_COMMIT_SUBJECT: Subject of the seeded commit
- create_new_git_repo: Seed a repository in a new temporary directory
- create_new_git_repo_at: Seed a repository at a caller-chosen path
- create_new_git_repo_impl: The export, chunk, filter and squash pipeline
- read_chunk_changesets: Read the chunk chain back as changesets
- filter_changesets: Apply the filter to each changeset in order
- squash_to_root: Fold a destination branch into its root commit
"""

import shutil
from pathlib import Path
from typing import Optional

from reposeed.changeset.filters import ChangesetFilter
from reposeed.changeset.models import Changeset
from reposeed.changeset.tracking import add_tracking_data
from reposeed.config import Committer, Manifest
from reposeed.create.chunking import chunk_paths, commit_chunks, get_file_sizes, list_untracked_files
from reposeed.exceptions import ConsistencyError, PreconditionError
from reposeed.git.lock import ScopedFlock, get_lock_file_path_for_repo_path
from reposeed.git.repo import DestinationRepo, SourceRepo, init_git_repo, open_repo
from reposeed.git.runner import exec_steps
from reposeed.git.tempdir import TempDir
from reposeed.log import Logger


INITIAL_COMMIT_SUBJECT = "Initial commit"

# Branch of the scratch repository the chunks are committed to
EXPORT_BRANCH = "master"


def create_new_git_repo(
    manifest: Manifest,
    changeset_filter: ChangesetFilter,
    committer: Committer,
    include_submodules: bool = True,
    revision: Optional[str] = None,
    logger: Logger = None,
) -> TempDir:
    """Seed a new repository in a temporary directory.

    The directory is deleted if anything fails. On success it is returned
    unkept; call ``keep()`` to take ownership of it.

    Returns:
        The temporary directory holding the new repository.
    """
    temp_dir = TempDir("git-with-initial-commit")
    try:
        create_new_git_repo_impl(
            temp_dir.path,
            manifest,
            changeset_filter,
            committer,
            include_submodules,
            revision,
            logger,
        )
    except Exception:
        temp_dir.remove()
        raise
    return temp_dir


def create_new_git_repo_at(
    manifest: Manifest,
    output_dir: Path,
    changeset_filter: ChangesetFilter,
    committer: Committer,
    include_submodules: bool = True,
    revision: Optional[str] = None,
    logger: Logger = None,
) -> None:
    """Seed a new repository at ``output_dir``.

    Raises:
        PreconditionError: If ``output_dir`` already exists. Nothing is
            touched in that case.
    """
    output_dir = Path(output_dir)
    if output_dir.exists():
        raise PreconditionError(f"path '{output_dir}' already exists")
    output_dir.mkdir(mode=0o755, parents=True)

    try:
        create_new_git_repo_impl(
            output_dir,
            manifest,
            changeset_filter,
            committer,
            include_submodules,
            revision,
            logger,
        )
    except Exception:
        shutil.rmtree(output_dir, ignore_errors=True)
        raise


def create_new_git_repo_impl(
    output_dir: Path,
    manifest: Manifest,
    changeset_filter: ChangesetFilter,
    committer: Committer,
    include_submodules: bool = True,
    revision: Optional[str] = None,
    logger: Logger = None,
) -> None:
    """Export, chunk, filter and squash into the empty directory ``output_dir``."""
    logger = logger or Logger(manifest.verbose)

    with manifest.get_source_shared_lock() as source_lock:
        source = open_repo(SourceRepo, source_lock, manifest.source_path, manifest.source_branch)
        logger.info("  Exporting...")
        export = source.export(manifest.source_roots, include_submodules, revision)

    rev = export.revision
    with export.temp_dir as export_dir:
        logger.info("  Creating unfiltered commit...")
        init_git_repo(export_dir.path, committer, EXPORT_BRANCH)

        filenames = list_untracked_files(export_dir.path)
        sizes = get_file_sizes(export_dir.path, filenames) if manifest.chunk_max_bytes else None
        chunks = chunk_paths(filenames, manifest.chunk_max_files, manifest.chunk_max_bytes, sizes)
        if not chunks:
            raise ConsistencyError(f"Nothing was exported from {manifest.source_path} at {rev}")
        commit_chunks(export_dir.path, chunks, logger)

        logger.info("  Filtering...")
        changesets = read_chunk_changesets(export_dir.path, rev, logger)

    changesets = filter_changesets(changesets, changeset_filter, logger)
    changesets[0] = add_tracking_data(
        changesets[0].with_subject(INITIAL_COMMIT_SUBJECT),
        manifest.source_repo_id,
        rev,
    )

    logger.info("  Creating new repo...")
    init_git_repo(output_dir, committer, manifest.destination_branch)
    output_lock = ScopedFlock.create_exclusive(
        get_lock_file_path_for_repo_path(output_dir), remove_on_release=True
    )
    with output_lock:
        destination = open_repo(
            DestinationRepo,
            output_lock,
            output_dir,
            manifest.destination_branch,
            orphan=True,
        )
        for changeset in changesets:
            destination.commit_patch(changeset, include_submodules)
        squash_to_root(destination)


def read_chunk_changesets(export_path: Path, revision: str, logger: Logger) -> list[Changeset]:
    """Read every chunk commit, root first, as a changeset.

    Each changeset is re-identified as ``revision``, the source commit the
    export was taken at.

    Raises:
        ConsistencyError: If no changeset could be read.
    """
    changesets: list[Changeset] = []
    export_lock = ScopedFlock.create_shared(
        get_lock_file_path_for_repo_path(export_path), remove_on_release=True
    )
    with export_lock:
        exported_repo = open_repo(SourceRepo, export_lock, export_path, EXPORT_BRANCH)
        current_commit = exported_repo.get_root_commit()
        while current_commit is not None:
            logger.verbose(f"    Processing {current_commit}")
            changeset = exported_repo.get_changeset(current_commit)
            if changeset is not None:
                changesets.append(changeset.with_id(revision))
            current_commit = exported_repo.find_next_commit(current_commit, frozenset())

    if not changesets:
        raise ConsistencyError("got no changesets from the chunked export")
    return changesets


def filter_changesets(
    changesets: list[Changeset],
    changeset_filter: ChangesetFilter,
    logger: Logger,
) -> list[Changeset]:
    """Apply the filter to each changeset in order."""
    filtered = []
    for changeset in changesets:
        changeset = changeset_filter(changeset)
        if logger.verbose_enabled:
            changeset.dump_debug_messages(logger)
        filtered.append(changeset)
    return filtered


def squash_to_root(repo: DestinationRepo) -> None:
    """Fold every commit on the branch into its root commit.

    The root keeps its message; only the content changes.
    """
    initial_commit = repo.get_root_commit()
    exec_steps(
        repo.path,
        [
            # Rewind HEAD (but NOT the index or work tree) to the root
            ["git", "reset", "--soft", initial_commit],
            # Amend the root with the content of every chunk
            ["git", "commit", "--quiet", "--no-verify", "--amend", "--no-edit", "--allow-empty"],
        ],
    )
