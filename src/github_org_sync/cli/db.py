"""Database commands."""

import json

import typer
from rich.table import Table

from github_org_sync.cli.common import (
    OutputFormatOption,
    console,
    get_state,
    run_async_command,
)
from github_org_sync.config import Settings
from github_org_sync.db import (
    EntityKind,
    PersistenceGateway,
    create_engine_from_settings,
    create_session_factory,
    create_tables,
)
from github_org_sync.github import OutputFormat

app = typer.Typer(help="Database commands")


async def collect_stats(settings: Settings) -> dict[EntityKind, int]:
    """Stored record counts per entity kind (tables are created if missing)."""
    engine = create_engine_from_settings(settings)
    try:
        await create_tables(engine)
        gateway = PersistenceGateway(create_session_factory(engine))
        return await gateway.counts()
    finally:
        await engine.dispose()


@app.command("init")
def init_db(ctx: typer.Context) -> None:
    """Create the database tables if they don't exist.

    Examples:
        ghsync db init
    """
    settings = get_state(ctx).settings

    async def _init() -> None:
        engine = create_engine_from_settings(settings)
        try:
            await create_tables(engine)
        finally:
            await engine.dispose()

    run_async_command(_init(), error_prefix="Database init failed")
    console.print(f"[green]Database ready:[/green] {settings.database_url}")


@app.command("stats")
def show_stats(
    ctx: typer.Context,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Show how many records of each kind are stored.

    Examples:
        ghsync db stats
        ghsync db stats --format json
    """
    settings = get_state(ctx).settings
    counts = run_async_command(collect_stats(settings), error_prefix="Stats failed")

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps({kind.value: n for kind, n in counts.items()}))
        return

    table = Table(title="GitHub Org Sync Statistics")
    table.add_column("Kind", style="bold")
    table.add_column("Records", justify="right")
    for kind in EntityKind:
        table.add_row(kind.value.replace("_", " ").title(), str(counts.get(kind, 0)))
    console.print(table)
