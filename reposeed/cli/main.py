"""Main CLI command for seeding a new repository."""

from pathlib import Path
from typing import Optional

import typer

from reposeed import __version__
from reposeed.changeset.filters import build_manifest_filter
from reposeed.config import DEFAULT_CONFIG_PATH, load_manifest
from reposeed.create.phase import CreateNewRepoPhase
from reposeed.env import load_env_file
from reposeed.exceptions import ConfigError, ReposeedError
from reposeed.log import Logger


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"reposeed {__version__}")
        raise typer.Exit(0)


def main_command(
    create_new_repo: bool = typer.Option(
        False,
        "--create-new-repo",
        help="Create a new git repository with a single commit, then exit",
    ),
    from_commit: Optional[str] = typer.Option(
        None,
        "--create-new-repo-from-commit",
        help="Like --create-new-repo, but at a specified source commit",
    ),
    output_path: Optional[Path] = typer.Option(
        None,
        "--create-new-repo-output-path",
        help="When using --create-new-repo or --create-new-repo-from-commit, "
        "create the new repository in this directory",
    ),
    skip_submodules: bool = typer.Option(
        False,
        "--skip-submodules",
        help="Don't sync submodules",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Manifest file (default: .reposeed/config.yaml)",
    ),
    source_path: Optional[Path] = typer.Option(
        None,
        "--source-path",
        help="Path of the source repository",
    ),
    source_branch: Optional[str] = typer.Option(
        None,
        "--source-branch",
        help="Branch of the source repository to export",
    ),
    source_roots: Optional[list[str]] = typer.Option(
        None,
        "--source-root",
        help="Path to export from the source repository (repeatable)",
    ),
    destination_branch: Optional[str] = typer.Option(
        None,
        "--destination-branch",
        help="Branch to create in the new repository",
    ),
    committer_name: Optional[str] = typer.Option(
        None,
        "--committer-name",
        help="Name recorded on created commits",
    ),
    committer_email: Optional[str] = typer.Option(
        None,
        "--committer-email",
        help="Email recorded on created commits",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show progress for every chunk and changeset",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Seed a new git repository from a filtered export of a source repository."""
    config_path = config or DEFAULT_CONFIG_PATH
    load_env_file(config_path.parent / ".env")
    load_env_file(Path(".env"))

    committer = {}
    if committer_name:
        committer["name"] = committer_name
    if committer_email:
        committer["email"] = committer_email

    try:
        manifest = load_manifest(
            config_path,
            {
                "source_path": source_path,
                "source_branch": source_branch,
                "source_roots": source_roots or None,
                "destination_branch": destination_branch,
                "committer": committer or None,
                "verbose": verbose or None,
            },
        )
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    logger = Logger(manifest.verbose)
    phase = CreateNewRepoPhase(
        build_manifest_filter(manifest),
        manifest.committer,
        enabled=create_new_repo,
        source_commit=from_commit,
        output_path=output_path,
        include_submodules=not skip_submodules,
    )

    try:
        result = phase.run(manifest, logger)
    except ReposeedError:
        raise typer.Exit(1)

    if result.skipped:
        typer.echo(
            "Nothing to do: pass --create-new-repo or --create-new-repo-from-commit.",
            err=True,
        )
    raise typer.Exit(result.exit_code)
