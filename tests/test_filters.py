"""Tests for reposeed.changeset.filters module."""

from reposeed.changeset import (
    Changeset,
    PathChange,
    build_manifest_filter,
    chain_filters,
    identity_filter,
    move_directories,
    strip_paths,
)
from reposeed.config import Manifest


def _diff(path):
    return PathChange(
        path,
        f"diff --git a/{path} b/{path}\n"
        "new file mode 100644\n"
        "--- /dev/null\n"
        f"+++ b/{path}\n"
        "@@ -0,0 +1 @@\n"
        "+content\n",
    )


def _changeset(*paths):
    return Changeset(
        id="abc123",
        author="Jane Doe <jane@example.com>",
        timestamp=1700000000,
        subject="unfiltered commit chunk #0",
        diffs=tuple(_diff(p) for p in paths),
    )


class TestIdentityFilter:
    """Tests for identity_filter function."""

    def test_returns_same_changeset(self):
        """Test that nothing changes."""
        changeset = _changeset("a.txt")
        assert identity_filter(changeset) is changeset


class TestStripPaths:
    """Tests for strip_paths filter."""

    def test_glob_pattern(self):
        """Test stripping by glob on the full path."""
        result = strip_paths(["secret/*"])(_changeset("secret/key.pem", "src/app.py"))
        assert result.get_paths() == ["src/app.py"]

    def test_basename_pattern(self):
        """Test stripping by glob on the basename."""
        result = strip_paths(["*.lock"])(_changeset("deep/dir/poetry.lock", "src/app.py"))
        assert result.get_paths() == ["src/app.py"]

    def test_directory_prefix(self):
        """Test stripping everything under a directory."""
        result = strip_paths(["internal/"])(_changeset("internal/a/b.py", "internals.py"))
        assert result.get_paths() == ["internals.py"]

    def test_records_debug_messages(self):
        """Test that stripped paths are traced."""
        result = strip_paths(["*.pem"])(_changeset("key.pem"))
        assert result.is_empty()
        assert result.debug_messages == ("STRIP FILE: key.pem",)

    def test_is_pure(self):
        """Test that the input changeset is unchanged."""
        original = _changeset("key.pem", "a.py")
        strip_paths(["*.pem"])(original)
        assert original.get_paths() == ["key.pem", "a.py"]
        assert original.debug_messages == ()


class TestMoveDirectories:
    """Tests for move_directories filter."""

    def test_moves_prefix(self):
        """Test that matching prefixes are rewritten in path and body."""
        result = move_directories({"libs/foo/": ""})(_changeset("libs/foo/src/a.py", "README.md"))

        assert result.get_paths() == ["src/a.py", "README.md"]
        assert result.diffs[0].body.startswith("diff --git a/src/a.py b/src/a.py\n")
        assert result.debug_messages == ("MOVE FILE: libs/foo/src/a.py -> src/a.py",)

    def test_first_match_wins(self):
        """Test that only the first matching prefix applies."""
        result = move_directories({"a/": "x/", "a/b/": "y/"})(_changeset("a/b/c.txt"))
        assert result.get_paths() == ["x/b/c.txt"]


class TestChainFilters:
    """Tests for chain_filters function."""

    def test_applies_left_to_right(self):
        """Test that later filters see earlier results."""
        chained = chain_filters(
            move_directories({"libs/foo/": ""}),
            strip_paths(["tests/*"]),
        )
        result = chained(_changeset("libs/foo/tests/t.py", "libs/foo/src/a.py"))
        assert result.get_paths() == ["src/a.py"]


class TestBuildManifestFilter:
    """Tests for build_manifest_filter function."""

    def test_identity_without_settings(self, temp_dir):
        """Test that an unconfigured manifest yields the identity filter."""
        assert build_manifest_filter(Manifest(source_path=temp_dir)) is identity_filter

    def test_uses_manifest_settings(self, temp_dir):
        """Test that strip and move settings are combined."""
        manifest = Manifest(
            source_path=temp_dir,
            strip_paths=["*.secret"],
            move_directories={"libs/foo/": ""},
        )
        result = build_manifest_filter(manifest)(_changeset("libs/foo/a.py", "libs/foo/b.secret"))
        assert result.get_paths() == ["a.py"]
