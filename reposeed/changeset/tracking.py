"""Provenance footer embedded in the seeded commit message.

Contains:
- TRACKING_PREFIX: Marker that starts the footer line
- TrackingFooter: Parsed footer contents
- format_tracking_footer: Render a footer line
- add_tracking_data: Append a footer to a changeset's message
- parse_tracking_footer: Recover the footer from a commit message
"""

import re
from dataclasses import dataclass
from typing import Optional

from reposeed.changeset.models import Changeset


TRACKING_PREFIX = "reposeed-source-id"

_FOOTER_RE = re.compile(
    rf"^{re.escape(TRACKING_PREFIX)}: (?P<repo>[^\s@]+)@(?P<revision>[0-9a-fA-F]+)\s*$"
)


@dataclass(frozen=True)
class TrackingFooter:
    """Where a seeded repository's content came from."""

    source_repo_id: str
    revision: str


def format_tracking_footer(source_repo_id: str, revision: str) -> str:
    """Render the footer line for a source repository and revision."""
    return f"{TRACKING_PREFIX}: {source_repo_id}@{revision}"


def add_tracking_data(changeset: Changeset, source_repo_id: str, revision: str) -> Changeset:
    """Append the tracking footer to a changeset's message body.

    Any footer already present is replaced so the result carries exactly one.

    Args:
        changeset: The changeset to tag.
        source_repo_id: Identifier of the source repository.
        revision: Resolved source revision.

    Returns:
        A new changeset whose message ends with the footer.
    """
    kept = [
        line for line in changeset.message.rstrip().split("\n")
        if not _FOOTER_RE.match(line)
    ]
    body = "\n".join(kept).strip()
    footer = format_tracking_footer(source_repo_id, revision)
    message = f"{body}\n\n{footer}" if body else footer
    return changeset.with_message(message)


def parse_tracking_footer(message: str) -> Optional[TrackingFooter]:
    """Return the footer from the last line of a commit message, if any."""
    lines = message.rstrip().split("\n")
    if not lines:
        return None
    match = _FOOTER_RE.match(lines[-1])
    if not match:
        return None
    return TrackingFooter(
        source_repo_id=match.group("repo"),
        revision=match.group("revision"),
    )
