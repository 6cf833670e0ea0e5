"""Changeset model, tracking footer and filters."""

from reposeed.changeset.models import (
    ChangeOperation,
    PathChange,
    Changeset,
)
from reposeed.changeset.paths import (
    quote_c_path,
    unquote_c_path,
)
from reposeed.changeset.tracking import (
    TRACKING_PREFIX,
    TrackingFooter,
    format_tracking_footer,
    add_tracking_data,
    parse_tracking_footer,
)
from reposeed.changeset.filters import (
    ChangesetFilter,
    identity_filter,
    strip_paths,
    move_directories,
    chain_filters,
    build_manifest_filter,
)


__all__ = [
    # Models
    "ChangeOperation",
    "PathChange",
    "Changeset",
    # Paths
    "quote_c_path",
    "unquote_c_path",
    # Tracking
    "TRACKING_PREFIX",
    "TrackingFooter",
    "format_tracking_footer",
    "add_tracking_data",
    "parse_tracking_footer",
    # Filters
    "ChangesetFilter",
    "identity_filter",
    "strip_paths",
    "move_directories",
    "chain_filters",
    "build_manifest_filter",
]
