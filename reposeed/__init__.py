"""Seed a new git repository from a filtered slice of another one."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("reposeed")
except PackageNotFoundError:
    # Fallback for development mode
    __version__ = "0.0.0-dev"
