"""Exception classes for reposeed.

Contains:
- ReposeedError: Base exception for all reposeed errors
- PreconditionError: Raised when a requested output path already exists
- ExternalToolError: Raised when an external command exits non-zero
- ExportError: Raised when exporting a source repository fails
- AccessError: Raised when a path is not a repository of the expected kind
- PatchError: Raised when a changeset cannot be applied
- ConsistencyError: Raised when an internal invariant is violated
- ConfigError: Raised when the manifest cannot be loaded
- GenericError: Raised for any other unexpected condition
"""


class ReposeedError(Exception):
    """Base exception for reposeed errors."""

    pass


class PreconditionError(ReposeedError):
    """Raised before any mutation when a precondition does not hold."""

    pass


class ExternalToolError(ReposeedError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result


class ExportError(ReposeedError):
    """Raised when a source repository cannot be exported."""

    pass


class AccessError(ReposeedError):
    """Raised when a repository cannot be opened."""

    pass


class PatchError(ReposeedError):
    """Raised when a changeset cannot be applied to a destination."""

    pass


class ConsistencyError(ReposeedError):
    """Raised when derived state contradicts what the algorithm guarantees."""

    pass


class ConfigError(ReposeedError):
    """Raised when there's an error with the manifest configuration."""

    pass


class GenericError(ReposeedError):
    """Raised for unexpected conditions that fit no other category."""

    pass
