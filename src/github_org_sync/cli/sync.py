"""Sync commands for GitHub Org Sync."""

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
from github_org_sync.github import (
    ConcurrencyController,
    GitHubClient,
    OutputFormat,
    RateGovernor,
    ResponseCache,
    RetryingExecutor,
    SyncAbortedError,
    SyncMode,
    SyncOrchestrator,
    SyncSummary,
)

app = typer.Typer(help="Sync organization data from GitHub")


async def run_sync(
    settings: Settings,
    organization: str,
    mode: SyncMode,
    controller: ConcurrencyController,
) -> SyncSummary:
    """Wire the access layer, store and orchestrator together and run once.

    An authentication abort is returned as an aborted summary rather than
    raised, so the caller can still report partial counts.
    """
    engine = create_engine_from_settings(settings)
    try:
        await create_tables(engine)
        gateway = PersistenceGateway(
            create_session_factory(engine), write_lock=controller.write_lock
        )

        async with GitHubClient(settings.github_token) as client:
            governor = RateGovernor(client, settings.rate_limit, lock=controller.quota_lock)
            orchestrator = SyncOrchestrator(
                client=client,
                executor=RetryingExecutor(governor, settings.retry),
                cache=ResponseCache(settings.cache.ttl_seconds, lock=controller.cache_lock),
                gateway=gateway,
                controller=controller,
                organization=organization,
            )
            try:
                return await orchestrator.run(mode)
            except SyncAbortedError as e:
                if e.summary is None:
                    raise
                return e.summary
    finally:
        await engine.dispose()


def _print_summary(summary: SyncSummary) -> None:
    """Render the final counts summary."""
    title = "Sync Aborted" if summary.aborted else "Sync Complete"
    style = "bold red" if summary.aborted else "bold"
    console.print(f"[{style}]{title}[/{style}] ({summary.mode.value}, {summary.organization})")
    if summary.cutoff:
        console.print(f"[dim]  Since: {summary.cutoff:%Y-%m-%d %H:%M:%S} UTC[/dim]")
    console.print()

    table = Table(title="Entities")
    table.add_column("Kind", style="bold")
    table.add_column("Created", justify="right", style="green")
    table.add_column("Updated", justify="right", style="blue")
    table.add_column("Skipped", justify="right", style="dim")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Stored", justify="right")

    for kind in EntityKind:
        counts = summary.counts[kind]
        table.add_row(
            kind.value.replace("_", " ").title(),
            str(counts.created),
            str(counts.updated),
            str(counts.skipped),
            str(counts.failed),
            str(summary.store_totals.get(kind, 0)),
        )
    console.print(table)

    console.print(f"  Duration: {summary.duration_seconds:.1f}s")

    if summary.errors:
        console.print()
        console.print("[bold]Errors:[/bold]")
        for error in summary.errors:
            console.print(f"  {error.kind.value} {error.identifier}: {error.message}")

    if summary.abort_reason:
        console.print()
        console.print(f"[red]Reason:[/red] {summary.abort_reason}")


@app.command("run")
def sync_run(
    ctx: typer.Context,
    org: str | None = typer.Option(
        None,
        "--org",
        "-o",
        help="Organization to sync (defaults to ORGANIZATION setting)",
    ),
    full: bool = typer.Option(
        False,
        "--full",
        help="Perform a full sync instead of incremental",
    ),
    concurrent: bool | None = typer.Option(
        None,
        "--concurrent/--sequential",
        help="Process repositories and reviews with a worker pool",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Worker pool size (defaults to SYNC__MAX_WORKERS)",
    ),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Sync the organization's repositories, PRs, reviews and users.

    Examples:
        ghsync sync run
        ghsync sync run --org vercel --full
        ghsync sync run --concurrent --workers 8
        ghsync sync run --format json
    """
    state = get_state(ctx)
    settings = state.settings
    organization = org or settings.organization
    mode = SyncMode.FULL if full else SyncMode.INCREMENTAL

    sync_config = settings.sync
    controller = ConcurrencyController(
        enabled=sync_config.concurrency_enabled if concurrent is None else concurrent,
        max_workers=workers or sync_config.max_workers,
        review_fanout_threshold=sync_config.review_fanout_threshold,
        verbose=state.verbose,
    )

    if output_format == OutputFormat.TEXT:
        console.print(f"[dim]Syncing {organization} ({mode.value})...[/dim]")
        if controller.enabled:
            console.print(f"[dim]  Workers: {controller.max_workers}[/dim]")
        console.print()

    summary = run_async_command(
        run_sync(settings, organization, mode, controller),
        error_prefix="Sync failed",
    )

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(summary.to_dict()))
    else:
        _print_summary(summary)

    if summary.aborted:
        raise typer.Exit(1)
