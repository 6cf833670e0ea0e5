"""Patch text helpers.

Contains:
- split_diffs: Split git patch output into one PathChange per path
- render_patch: Join PathChanges back into an applicable patch
- get_submodule_revision: Read the new gitlink revision from a submodule change
"""

import re
from typing import Iterable, Optional

from reposeed.changeset.models import PathChange
from reposeed.changeset.paths import unquote_c_path


_QUOTED_HEADER_RE = re.compile(r'^diff --git "?a/(.*?)"? "?b/(.*?)"?$')
_SUBPROJECT_RE = re.compile(r"^\+Subproject commit ([0-9a-f]+)", re.MULTILINE)


def _parse_path(header: str) -> Optional[str]:
    """Extract the literal path from a ``diff --git a/X b/X`` line.

    Renames are disabled when diffs are produced, so both sides name the same
    path and the split point is found from the line length. That keeps paths
    containing `` b/`` intact. Quoted sides are unescaped.
    """
    rest = header[len("diff --git "):]
    if (len(rest) - 1) % 2 == 0:
        half = (len(rest) - 1) // 2
        a_side, sep, b_side = rest[:half], rest[half], rest[half + 1:]
        if sep == " ":
            try:
                a_path, b_path = unquote_c_path(a_side), unquote_c_path(b_side)
            except ValueError:
                a_path = b_path = ""
            if a_path.startswith("a/") and b_path.startswith("b/") and a_path[2:] == b_path[2:]:
                return b_path[2:]

    match = _QUOTED_HEADER_RE.match(header)
    return match.group(2) if match else None


def split_diffs(diff_output: str) -> list[PathChange]:
    """Split ``git diff``/``git show`` patch output into per-path changes.

    Args:
        diff_output: Raw patch output.

    Returns:
        List of PathChange in the order git emitted them.
    """
    changes: list[PathChange] = []

    if not diff_output.strip():
        return changes

    # Each file starts with 'diff --git a/... b/...'
    blocks = re.split(r"(?=^diff --git )", diff_output, flags=re.MULTILINE)

    for block in blocks:
        if not block.startswith("diff --git"):
            continue

        header = block.split("\n", 1)[0]
        path = _parse_path(header)
        if path is None:
            continue

        if not block.endswith("\n"):
            block += "\n"
        changes.append(PathChange(path=path, body=block))

    return changes


def render_patch(diffs: Iterable[PathChange]) -> str:
    """Join per-path changes into one patch ``git apply`` accepts."""
    parts = []
    for diff in diffs:
        body = diff.body
        # git apply requires the patch to end with a newline
        if not body.endswith("\n"):
            body += "\n"
        parts.append(body)
    return "".join(parts)


def get_submodule_revision(diff: PathChange) -> Optional[str]:
    """Return the gitlink a submodule change moves to, or None on removal."""
    match = _SUBPROJECT_RE.search(diff.body)
    return match.group(1) if match else None
