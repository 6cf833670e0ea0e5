"""Changeset filters.

A filter is any callable taking a Changeset and returning a Changeset. Filters
must be pure: they return new values and never depend on outside state.

Contains:
- ChangesetFilter: Protocol every filter satisfies
- identity_filter: Filter that changes nothing
- strip_paths: Build a filter dropping matching paths
- move_directories: Build a filter rewriting path prefixes
- chain_filters: Compose filters left to right
- build_manifest_filter: Build the filter described by a manifest
"""

import fnmatch
from pathlib import PurePosixPath
from typing import Protocol

from reposeed.changeset.models import Changeset


class ChangesetFilter(Protocol):
    def __call__(self, changeset: Changeset) -> Changeset: ...


def identity_filter(changeset: Changeset) -> Changeset:
    return changeset


def _matches(path: str, patterns: tuple[str, ...]) -> bool:
    for pattern in patterns:
        if path == pattern:
            return True
        if fnmatch.fnmatch(path, pattern):
            return True
        if fnmatch.fnmatch(PurePosixPath(path).name, pattern):
            return True
        # A bare directory pattern strips everything beneath it
        if path.startswith(pattern.rstrip("/") + "/"):
            return True
    return False


def strip_paths(patterns) -> ChangesetFilter:
    """Build a filter that drops diffs whose path matches any pattern.

    Patterns are glob patterns matched against the full path and against the
    basename, or directory prefixes.

    Args:
        patterns: Iterable of patterns.

    Returns:
        The filter.
    """
    patterns = tuple(patterns)

    def _strip(changeset: Changeset) -> Changeset:
        kept = []
        for diff in changeset.diffs:
            if _matches(diff.path, patterns):
                changeset = changeset.with_debug_message(f"STRIP FILE: {diff.path}")
            else:
                kept.append(diff)
        return changeset.with_diffs(kept)

    return _strip


def move_directories(mapping: dict[str, str]) -> ChangesetFilter:
    """Build a filter that rewrites path prefixes.

    The first matching prefix in the mapping's order wins; a path is moved at
    most once.

    Args:
        mapping: Source prefix to destination prefix.

    Returns:
        The filter.
    """
    items = tuple(mapping.items())

    def _move(changeset: Changeset) -> Changeset:
        moved = []
        for diff in changeset.diffs:
            new_path = diff.path
            for src, dest in items:
                if diff.path.startswith(src):
                    new_path = dest + diff.path[len(src):]
                    break
            if new_path != diff.path:
                changeset = changeset.with_debug_message(
                    f"MOVE FILE: {diff.path} -> {new_path}"
                )
            moved.append(diff.with_path(new_path))
        return changeset.with_diffs(moved)

    return _move


def chain_filters(*filters: ChangesetFilter) -> ChangesetFilter:
    """Compose filters, applying them left to right."""

    def _chained(changeset: Changeset) -> Changeset:
        for changeset_filter in filters:
            changeset = changeset_filter(changeset)
        return changeset

    return _chained


def build_manifest_filter(manifest) -> ChangesetFilter:
    """Build the filter configured by a manifest's path settings."""
    filters: list[ChangesetFilter] = []
    if manifest.strip_paths:
        filters.append(strip_paths(manifest.strip_paths))
    if manifest.move_directories:
        filters.append(move_directories(manifest.move_directories))
    if not filters:
        return identity_filter
    return chain_filters(*filters)
