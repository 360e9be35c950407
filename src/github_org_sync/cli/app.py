"""Main CLI application for GitHub Org Sync."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from github_org_sync import __version__
from github_org_sync.cli import db as db_cmd
from github_org_sync.cli import github as github_cmd
from github_org_sync.cli import sync as sync_cmd
from github_org_sync.cli.common import CliState
from github_org_sync.config import load_settings
from github_org_sync.logging import setup_logging

app = typer.Typer(
    name="ghsync",
    help="Incrementally sync a GitHub organization's repositories, PRs and reviews.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"ghsync version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """GitHub Org Sync - mirror an organization's PR activity into SQLite."""
    settings = load_settings()
    log_config = settings.logging

    # Setup logging with CLI overrides
    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )

    ctx.obj = CliState(settings=settings, verbose=verbose)


# Register subcommands
app.add_typer(db_cmd.app, name="db")
app.add_typer(github_cmd.app, name="github")
app.add_typer(sync_cmd.app, name="sync")


if __name__ == "__main__":
    app()
