"""Typed repository handles.

Contains:
- ExportResult: Exported content plus the revision it was taken at
- Repo: Base handle bound to a path, branch and lock
- SourceRepo: Read-only handle (export, changeset extraction, graph walk)
- DestinationRepo: Write-only handle (patch application, commits)
- open_repo: Open a handle of a given kind
- init_git_repo: Initialise an empty repository for a committer
"""

import tarfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Type, TypeVar

from reposeed.changeset.models import Changeset
from reposeed.exceptions import AccessError, ConsistencyError, ExportError, ExternalToolError, PatchError
from reposeed.git.diff import get_submodule_revision, render_patch, split_diffs
from reposeed.git.lock import ScopedFlock
from reposeed.git.runner import ENCODING, ENCODING_ERRORS, exec_steps, run_command, run_git
from reposeed.git.tempdir import TempDir


GITLINK_MODE = "160000"


@dataclass
class ExportResult:
    """Content exported from a source repository."""

    temp_dir: TempDir
    revision: str


class Repo:
    """A git work tree opened under a lock."""

    def __init__(self, lock: ScopedFlock, path: Path, branch: str):
        self.lock = lock
        self.path = Path(path)
        self.branch = branch
        self._validate()

    def _validate(self) -> None:
        if self.lock.released:
            raise AccessError(f"Lock for {self.path} was already released")
        if not self.path.is_dir():
            raise AccessError(f"{self.path} is not a directory")
        try:
            top = run_git(self.path, ["rev-parse", "--show-toplevel"])
        except ExternalToolError as e:
            raise AccessError(f"{self.path} is not a git repository") from e
        if Path(top).resolve() != self.path.resolve():
            raise AccessError(f"{self.path} is not the root of a git repository (root: {top})")

    def get_head_revision(self) -> str:
        return run_git(self.path, ["rev-parse", "--verify", "HEAD"])

    def get_root_commit(self) -> str:
        """Return the single parentless commit reachable from HEAD.

        Raises:
            ConsistencyError: If HEAD has no root or several.
        """
        output = run_git(self.path, ["rev-list", "--max-parents=0", "HEAD"])
        roots = [line for line in output.split("\n") if line]
        if len(roots) != 1:
            raise ConsistencyError(
                f"Expected exactly one root commit in {self.path}, found {len(roots)}"
            )
        return roots[0]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.path)!r}, branch={self.branch!r})"


class SourceRepo(Repo):
    """Handle that only reads: exports content and walks history."""

    def __init__(self, lock: ScopedFlock, path: Path, branch: str, roots: Sequence[str] = ()):
        self.roots = tuple(roots)
        super().__init__(lock, path, branch)

    def _validate(self) -> None:
        super()._validate()
        try:
            run_git(self.path, ["rev-parse", "--verify", "--quiet", f"{self.branch}^{{commit}}"])
        except ExternalToolError as e:
            raise AccessError(f"Branch '{self.branch}' does not exist in {self.path}") from e

    def resolve_revision(self, revision: Optional[str] = None) -> str:
        """Resolve a revision (default: the branch head) to a full commit id."""
        ref = revision or self.branch
        return run_git(self.path, ["rev-parse", "--verify", f"{ref}^{{commit}}"])

    def export(
        self,
        roots: Sequence[str],
        include_submodules: bool = True,
        revision: Optional[str] = None,
    ) -> ExportResult:
        """Export the content under ``roots`` into a new temporary directory.

        Args:
            roots: Path prefixes to export. Empty exports everything.
            include_submodules: Also export checked-out submodules.
            revision: Revision to export (default: the branch head).

        Returns:
            ExportResult holding the directory and the resolved revision.

        Raises:
            ExportError: If the revision is unknown or git fails.
        """
        try:
            rev = self.resolve_revision(revision)
        except ExternalToolError as e:
            raise ExportError(f"Unknown revision '{revision or self.branch}' in {self.path}") from e

        temp_dir = TempDir("export")
        try:
            _archive_tree(self.path, rev, list(roots), temp_dir.path, "", include_submodules)
        except ExternalToolError as e:
            temp_dir.remove()
            raise ExportError(f"Failed to export {self.path} at {rev}: {e}") from e
        except Exception:
            temp_dir.remove()
            raise

        return ExportResult(temp_dir=temp_dir, revision=rev)

    def get_changeset(self, commit_id: str) -> Optional[Changeset]:
        """Build the changeset a commit introduces relative to its first parent.

        Args:
            commit_id: Commit to read.

        Returns:
            The changeset, or None if the commit makes no change under the
            handle's roots (e.g. a merge with no content of its own).
        """
        header = run_command(
            ["git", "log", "-1", "--format=%H%x00%an <%ae>%x00%at%x00%s%x00%b", commit_id],
            cwd=self.path,
        ).stdout
        fields = header.split("\x00", 4)
        if len(fields) != 5:
            raise ConsistencyError(f"Unexpected git log output for {commit_id}")
        sha, author, timestamp, subject, body = fields

        args = [
            "git", "-c", "core.quotePath=false",
            "diff-tree", "--root", "-m", "--first-parent", "-p",
            "--binary", "--no-renames", "--no-commit-id", "--no-color", sha,
        ]
        if self.roots:
            args += ["--"] + list(self.roots)
        # Raw stdout: a trailing blank context line is part of the patch
        diff_output = run_command(args, cwd=self.path).stdout

        diffs = split_diffs(diff_output)
        if not diffs:
            return None

        return Changeset(
            id=sha,
            author=author,
            timestamp=int(timestamp),
            subject=subject,
            message=body.strip(),
            diffs=tuple(diffs),
        )

    def find_next_commit(self, commit_id: str, exclude=frozenset()) -> Optional[str]:
        """Return the first-parent child of a commit on the branch.

        Walks toward the branch head, skipping commits in ``exclude``.

        Returns:
            The next commit id, or None when no descendant remains.
        """
        output = run_git(
            self.path,
            ["rev-list", "--reverse", "--ancestry-path", "--first-parent", f"{commit_id}..{self.branch}"],
        )
        for line in output.split("\n"):
            if line and line not in exclude:
                return line
        return None


class DestinationRepo(Repo):
    """Handle that only writes: applies changesets as new commits."""

    def __init__(self, lock: ScopedFlock, path: Path, branch: str, orphan: bool = False):
        super().__init__(lock, path, branch)
        if orphan:
            self._checkout_orphan()

    def _has_commits(self) -> bool:
        try:
            run_git(self.path, ["rev-parse", "--verify", "--quiet", "HEAD"])
        except ExternalToolError:
            return False
        return True

    def _checkout_orphan(self) -> None:
        if not self._has_commits():
            run_git(self.path, ["symbolic-ref", "HEAD", f"refs/heads/{self.branch}"])
            return
        run_git(self.path, ["checkout", "--quiet", "--orphan", self.branch])
        run_git(self.path, ["rm", "-r", "-q", "-f", "--ignore-unmatch", "."])

    def commit_patch(self, changeset: Changeset, include_submodules: bool = True) -> str:
        """Apply a changeset and commit it with the changeset's metadata.

        Args:
            changeset: The changeset to apply.
            include_submodules: Write gitlink changes; when False they are
                left out of the commit.

        Returns:
            Id of the new commit.

        Raises:
            PatchError: If the patch does not apply or the commit fails.
        """
        regular = [d for d in changeset.diffs if not d.is_submodule]
        submodules = [d for d in changeset.diffs if d.is_submodule]

        with TempDir("patch") as tmp:
            if regular:
                patch_file = tmp.path / "changeset.patch"
                patch_file.write_bytes(render_patch(regular).encode(ENCODING, ENCODING_ERRORS))
                try:
                    run_git(self.path, ["apply", "--index", "--whitespace=nowarn", str(patch_file)])
                except ExternalToolError as e:
                    raise PatchError(f"Failed to apply patch for {changeset.id}: {e}") from e

            if include_submodules:
                for diff in submodules:
                    self._apply_submodule_change(changeset, diff)

            msg_file = tmp.path / "message.txt"
            message = changeset.get_full_message() + "\n"
            msg_file.write_bytes(message.encode(ENCODING, ENCODING_ERRORS))
            try:
                run_git(
                    self.path,
                    [
                        "commit", "--quiet", "--allow-empty", "--no-verify",
                        "--file", str(msg_file),
                        "--author", changeset.author,
                        "--date", f"{changeset.timestamp} +0000",
                    ],
                )
            except ExternalToolError as e:
                raise PatchError(f"Failed to commit {changeset.id}: {e}") from e

        return self.get_head_revision()

    def _apply_submodule_change(self, changeset: Changeset, diff) -> None:
        revision = get_submodule_revision(diff)
        try:
            if revision:
                run_git(
                    self.path,
                    ["update-index", "--add", "--cacheinfo", f"{GITLINK_MODE},{revision},{diff.path}"],
                )
            else:
                run_git(self.path, ["update-index", "--force-remove", diff.path])
        except ExternalToolError as e:
            raise PatchError(f"Failed to update submodule {diff.path} for {changeset.id}: {e}") from e


RepoT = TypeVar("RepoT", bound=Repo)


def open_repo(cls: Type[RepoT], lock: ScopedFlock, path: Path, branch: str, **kwargs) -> RepoT:
    """Open a repository handle of the requested kind.

    Raises:
        AccessError: If ``path`` is not a repository ``cls`` can open.
    """
    return cls(lock, Path(path), branch, **kwargs)


def init_git_repo(path: Path, committer, branch: str = "main") -> None:
    """Create an empty repository whose commits are made by ``committer``."""
    exec_steps(
        path,
        [
            ["git", "init", "--quiet"],
            ["git", "config", "user.name", committer.name],
            ["git", "config", "user.email", committer.email],
            ["git", "config", "commit.gpgsign", "false"],
            ["git", "symbolic-ref", "HEAD", f"refs/heads/{branch}"],
        ],
    )


def _archive_tree(
    repo_path: Path,
    revision: str,
    pathspecs: list[str],
    dest: Path,
    prefix: str,
    include_submodules: bool,
) -> None:
    """Extract ``repo_path`` at ``revision`` into ``dest`` under ``prefix``."""
    with TempDir("archive") as tmp:
        tar_path = tmp.path / "export.tar"
        args = ["archive", "--format=tar", f"--output={tar_path}"]
        if prefix:
            args.append(f"--prefix={prefix}")
        args.append(revision)
        if pathspecs:
            args += ["--"] + pathspecs
        run_git(repo_path, args)
        with tarfile.open(tar_path) as tar:
            # Extraction filters exist from 3.12 and the 3.10.12 / 3.11.4 backports
            if hasattr(tarfile, "tar_filter"):
                tar.extractall(dest, filter="tar")
            else:
                tar.extractall(dest)

    if not include_submodules:
        return

    args = ["ls-tree", "-r", "-z", revision]
    if pathspecs:
        args += ["--"] + pathspecs
    listing = run_command(["git"] + args, cwd=repo_path).stdout
    for entry in listing.split("\x00"):
        if not entry:
            continue
        meta, _, path = entry.partition("\t")
        mode, _, rest = meta.partition(" ")
        if mode != GITLINK_MODE:
            continue
        sub_revision = rest.split(" ")[-1]
        sub_path = repo_path / path
        # Submodules that were never checked out have nothing to export
        if not (sub_path / ".git").exists():
            continue
        _archive_tree(sub_path, sub_revision, [], dest, f"{prefix}{path}/", include_submodules)
