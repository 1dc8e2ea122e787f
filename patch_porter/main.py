"""
CLI entry point for patch_porter.

Provides the interactive command that copies commits between repositories,
plus helpers to create and inspect the saved preferences.
"""

import json
from pathlib import Path

import click
from git.exc import GitCommandError
from pydantic import ValidationError
from rich.console import Console

from .config import Preferences, PorterSettings
from .porter import PatchPorter, TransferRequest
from .prompts import (
    FROM_BRANCH,
    FROM_REPO,
    SINCE_COMMIT,
    TO_BRANCH,
    TO_REPO,
    ConsolePrompter,
    PipelineError,
    PromptCancelled,
    build_transfer_stages,
    run_pipeline,
)

console = Console()


def load_settings(config_path: Path | None) -> PorterSettings:
    """Load settings from YAML if a config file was given."""
    if config_path is None:
        return PorterSettings()
    try:
        return PorterSettings.from_yaml(config_path)
    except Exception as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        raise SystemExit(1)


def load_preferences(path: Path) -> Preferences:
    """Load preferences, exiting when the file is missing or malformed."""
    try:
        return Preferences.load(path)
    except FileNotFoundError:
        console.print(f"[red]Preferences file not found: {path}[/red]")
        console.print("Run 'patch-porter init' to create it.")
        raise SystemExit(1)
    except (json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]Malformed preferences file {path}: {e}[/red]")
        raise SystemExit(1)


@click.group()
@click.version_option(package_name="patch_porter")
def cli():
    """Patch Porter - Copy commits between local git repositories."""
    pass


@cli.command()
@click.option(
    "--repos-root",
    "-r",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    required=True,
    help="Directory containing the repositories to copy commits between",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Optional YAML settings file",
)
@click.option(
    "--preferences",
    "-p",
    "preferences_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Preferences file to write (defaults to the configured location)",
)
def init(repos_root: Path, config_path: Path | None, preferences_path: Path | None):
    """Create the preferences file used as the default for the next run."""
    settings = load_settings(config_path)
    path = preferences_path or settings.preferences_path

    saved = Preferences(repos_root=repos_root.resolve()).save(path)
    if not saved.success:
        console.print(f"[red]Could not write preferences to {saved.path}: {saved.error}[/red]")
        raise SystemExit(1)

    console.print(f"[green]Created preferences file: {saved.path}[/green]")
    console.print(f"  Repositories root: {repos_root.resolve()}")


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Optional YAML settings file",
)
@click.option(
    "--preferences",
    "-p",
    "preferences_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Preferences file to read and update",
)
@click.option(
    "--patches-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Scratch directory for exported patches (wiped on every run)",
)
def run(config_path: Path | None, preferences_path: Path | None, patches_dir: Path | None):
    """Interactively pick repositories, branches and a commit, then copy the commits."""
    settings = load_settings(config_path)
    if preferences_path:
        settings.preferences_path = preferences_path
    if patches_dir:
        settings.patches_dir = patches_dir

    preferences = load_preferences(settings.preferences_path)
    stages = build_transfer_stages(preferences, settings.preferences_path)

    try:
        pipeline = run_pipeline(stages, ConsolePrompter())
    except PromptCancelled:
        console.print("\n[yellow]Cancelled. Nothing was transferred.[/yellow]")
        raise SystemExit(1)
    except (PipelineError, OSError, ValueError, GitCommandError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    answers = pipeline.answers
    request = TransferRequest(
        source_repo=Path(answers[FROM_REPO]),
        source_branch=answers[FROM_BRANCH],
        dest_repo=Path(answers[TO_REPO]),
        dest_branch=answers[TO_BRANCH],
        since_commit=answers[SINCE_COMMIT],
        commits=pipeline.choices[SINCE_COMMIT],
    )

    try:
        PatchPorter(settings).transfer(request)
    except GitCommandError as e:
        console.print(f"[red]Git command failed: {e}[/red]")
        console.print(
            f"[yellow]Transfer stopped; {request.dest_repo} may be mid-checkout "
            f"or mid-am. Nothing was rolled back.[/yellow]"
        )
        raise SystemExit(1)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Optional YAML settings file",
)
@click.option(
    "--preferences",
    "-p",
    "preferences_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Preferences file to read",
)
def show(config_path: Path | None, preferences_path: Path | None):
    """Show the settings and saved preferences."""
    settings = load_settings(config_path)
    path = preferences_path or settings.preferences_path

    console.print("\n[bold]Settings:[/bold]")
    console.print(f"  Preferences file: {path}")
    console.print(f"  Patches directory: {settings.patches_dir}")
    console.print(f"  Three-way apply: {settings.three_way}")

    preferences = load_preferences(path)
    console.print("\n[bold]Preferences:[/bold]")
    console.print(f"  Repositories root: {preferences.repos_root}")


if __name__ == "__main__":
    cli()
