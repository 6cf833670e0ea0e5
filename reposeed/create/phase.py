"""The create-new-repo phase.

Contains:
- PhaseResult: Outcome of a phase that ran to completion
- CreateNewRepoPhase: Seeds a new repository from the manifest's source
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from reposeed.changeset.filters import ChangesetFilter
from reposeed.config import Committer, Manifest
from reposeed.create.engine import create_new_git_repo, create_new_git_repo_at
from reposeed.exceptions import GenericError, ReposeedError
from reposeed.log import Logger


@dataclass
class PhaseResult:
    """Normal termination of a phase. Failures raise instead."""

    exit_code: int = 0
    output_path: Optional[Path] = None
    skipped: bool = False


class CreateNewRepoPhase:
    """Create a new git repo with an initial commit.

    The phase is skipped unless ``enabled``. With no ``output_path`` the new
    repository is created in a temporary directory that is kept on success.
    """

    readable_name = "Create a new git repo with an initial commit"

    def __init__(
        self,
        changeset_filter: ChangesetFilter,
        committer: Committer,
        enabled: bool = False,
        source_commit: Optional[str] = None,
        output_path: Optional[Path] = None,
        include_submodules: bool = True,
    ):
        self.changeset_filter = changeset_filter
        self.committer = committer
        self.enabled = enabled or source_commit is not None
        self.source_commit = source_commit
        self.output_path = Path(output_path) if output_path is not None else None
        self.include_submodules = include_submodules

    def run(self, manifest: Manifest, logger: Logger) -> PhaseResult:
        """Run the phase.

        Returns:
            PhaseResult with the path of the new repository.

        Raises:
            ReposeedError: On any failure, after it has been logged.
        """
        if not self.enabled:
            logger.verbose(f"Skipping phase: {self.readable_name}")
            return PhaseResult(skipped=True)

        logger.info(f"Starting phase: {self.readable_name}")
        output = self.output_path
        try:
            if output is None:
                temp_dir = create_new_git_repo(
                    manifest,
                    self.changeset_filter,
                    self.committer,
                    self.include_submodules,
                    self.source_commit,
                    logger,
                )
                # Do not delete the output directory
                temp_dir.keep()
                output = temp_dir.path
            else:
                create_new_git_repo_at(
                    manifest,
                    output,
                    self.changeset_filter,
                    self.committer,
                    self.include_submodules,
                    self.source_commit,
                    logger,
                )
        except ReposeedError as e:
            logger.err(f"  Error: {e}")
            raise
        except Exception as e:
            logger.err(f"  Error: {e}")
            raise GenericError(str(e)) from e

        logger.info(f"  New repository created at {output}")
        logger.out(str(output))
        return PhaseResult(exit_code=0, output_path=output)
