"""Data models for changesets.

Contains:
- ChangeOperation: Kind of change a PathChange makes
- PathChange: The patch for a single path
- Changeset: One logical change reconstructed from a source commit
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from reposeed.changeset.paths import quote_c_path


class ChangeOperation(Enum):
    """Kind of change applied to a path."""

    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"


@dataclass(frozen=True)
class PathChange:
    """Patch text for one path, header included."""

    path: str
    body: str

    @property
    def operation(self) -> ChangeOperation:
        for line in self._header_lines():
            if line.startswith("new file mode"):
                return ChangeOperation.ADD
            if line.startswith("deleted file mode"):
                return ChangeOperation.DELETE
        return ChangeOperation.MODIFY

    @property
    def is_submodule(self) -> bool:
        """True for gitlink changes (a submodule pointer moved)."""
        return "Subproject commit " in self.body

    def _header_lines(self) -> list[str]:
        header = []
        for line in self.body.split("\n"):
            if line.startswith("@@") or line.startswith("GIT binary patch"):
                break
            header.append(line)
        return header

    def with_path(self, new_path: str) -> "PathChange":
        """Return a copy of this change retargeted at ``new_path``.

        Header lines are rewritten whole, quoting the new path where git
        would; content lines are left alone.
        """
        if new_path == self.path:
            return self

        a_name = quote_c_path(f"a/{new_path}")
        b_name = quote_c_path(f"b/{new_path}")
        # git terminates ---/+++ names containing a space with a tab
        trailer = "\t" if " " in new_path else ""
        lines = self.body.split("\n")
        for i, line in enumerate(lines):
            if line.startswith("@@") or line.startswith("GIT binary patch"):
                break
            if line.startswith("diff --git "):
                lines[i] = f"diff --git {a_name} {b_name}"
            elif line.startswith("--- ") and line.rstrip("\t") != "--- /dev/null":
                lines[i] = f"--- {a_name}{trailer}"
            elif line.startswith("+++ ") and line.rstrip("\t") != "+++ /dev/null":
                lines[i] = f"+++ {b_name}{trailer}"
        return PathChange(path=new_path, body="\n".join(lines))


@dataclass(frozen=True)
class Changeset:
    """One logical unit of history.

    Values are immutable: every ``with_*`` method returns a new Changeset.
    """

    id: str
    author: str
    timestamp: int
    subject: str
    message: str = ""
    diffs: tuple[PathChange, ...] = ()
    debug_messages: tuple[str, ...] = field(default=(), compare=False)

    def is_empty(self) -> bool:
        return not self.diffs

    def with_id(self, new_id: str) -> "Changeset":
        return replace(self, id=new_id)

    def with_subject(self, subject: str) -> "Changeset":
        return replace(self, subject=subject)

    def with_message(self, message: str) -> "Changeset":
        return replace(self, message=message)

    def with_diffs(self, diffs) -> "Changeset":
        return replace(self, diffs=tuple(diffs))

    def with_debug_message(self, message: str) -> "Changeset":
        return replace(self, debug_messages=self.debug_messages + (message,))

    def get_paths(self) -> list[str]:
        return [diff.path for diff in self.diffs]

    def get_full_message(self) -> str:
        """Return the subject and body as a single commit message."""
        if not self.message.strip():
            return self.subject
        return f"{self.subject}\n\n{self.message.strip()}"

    def dump_debug_messages(self, logger) -> None:
        """Write the accumulated diagnostic trace to a logger."""
        logger.verbose(f"    DEBUG {self.id}: {self.subject}")
        for line in self.debug_messages:
            logger.verbose(f"      {line}")

    def find_diff(self, path: str) -> Optional[PathChange]:
        for diff in self.diffs:
            if diff.path == path:
                return diff
        return None
