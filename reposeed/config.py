"""Run configuration for reposeed.

The manifest describes what to export and where it goes. It is read from a
YAML file (``.reposeed/config.yaml`` by default) and can be overridden from
the command line.

Contains:
- Committer: Identity used for every created commit
- Manifest: Source, destination and filtering settings
- load_manifest: Load a manifest from a YAML file
"""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from reposeed.exceptions import ConfigError
from reposeed.git.lock import ScopedFlock, get_lock_file_path_for_repo_path


DEFAULT_CONFIG_PATH = Path(".reposeed") / "config.yaml"
DEFAULT_CHUNK_MAX_FILES = 500
DEFAULT_COMMITTER_NAME = "reposeed"
DEFAULT_COMMITTER_EMAIL = "reposeed@localhost"


class Committer(BaseModel):
    """Identity written into every commit reposeed creates."""

    name: str = DEFAULT_COMMITTER_NAME
    email: str = DEFAULT_COMMITTER_EMAIL


class Manifest(BaseModel):
    """Source and destination settings for one run."""

    verbose: bool = False
    source_path: Path
    source_branch: str = "main"
    source_repo_id: Optional[str] = None
    source_roots: list[str] = Field(default_factory=list)
    destination_branch: str = "main"
    chunk_max_files: int = DEFAULT_CHUNK_MAX_FILES
    chunk_max_bytes: Optional[int] = None
    strip_paths: list[str] = Field(default_factory=list)
    move_directories: dict[str, str] = Field(default_factory=dict)
    committer: Committer = Field(default_factory=Committer)

    @field_validator("chunk_max_files")
    @classmethod
    def _positive_files(cls, value: int) -> int:
        if value < 1:
            raise ValueError("chunk_max_files must be at least 1")
        return value

    @field_validator("chunk_max_bytes")
    @classmethod
    def _positive_bytes(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise ValueError("chunk_max_bytes must be at least 1")
        return value

    @model_validator(mode="after")
    def _default_repo_id(self) -> "Manifest":
        if not self.source_repo_id:
            self.source_repo_id = Path(self.source_path).resolve().name
        return self

    def get_source_shared_lock(self) -> ScopedFlock:
        return ScopedFlock.create_shared(get_lock_file_path_for_repo_path(self.source_path))


def load_manifest(path: Path, overrides: Optional[dict[str, Any]] = None) -> Manifest:
    """Load a manifest from YAML, applying overrides on top.

    Args:
        path: YAML file. A missing file is treated as empty.
        overrides: Values that replace the file's (``None`` values are ignored).

    Returns:
        The validated manifest.

    Raises:
        ConfigError: If the file cannot be parsed or the result is invalid.
    """
    data: dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key == "committer":
            data["committer"] = {**(data.get("committer") or {}), **value}
        else:
            data[key] = value

    if "source_path" not in data:
        raise ConfigError("No source repository configured (set source_path or pass --source-path)")

    try:
        return Manifest(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}")
