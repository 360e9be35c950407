"""GitHub API commands."""

import json

import typer
from rich.table import Table

from github_org_sync.cli.common import (
    OutputFormatOption,
    console,
    get_state,
    run_async_command,
)
from github_org_sync.github import GitHubClient, OutputFormat, QuotaSnapshot, QuotaStatus

app = typer.Typer(help="GitHub API commands")


def _get_status_style(status: QuotaStatus) -> str:
    """Get rich style for status."""
    match status:
        case QuotaStatus.HEALTHY:
            return "[green]HEALTHY[/green]"
        case QuotaStatus.LOW:
            return "[yellow]LOW[/yellow]"
        case QuotaStatus.EXHAUSTED:
            return "[bold red]EXHAUSTED[/bold red]"
        case _:
            return str(status)


def _format_time_remaining(seconds: int) -> str:
    """Format seconds as human-readable time."""
    if seconds <= 0:
        return "Now"
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m"


@app.command("rate-limit")
def show_rate_limit(
    ctx: typer.Context,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Show current GitHub API quota for the core pool.

    Examples:
        ghsync github rate-limit
        ghsync github rate-limit --format json
    """
    settings = get_state(ctx).settings
    threshold = settings.rate_limit.low_quota_threshold_pct

    async def _check() -> QuotaSnapshot:
        async with GitHubClient(settings.github_token) as client:
            return await client.get_quota()

    snapshot = run_async_command(_check(), error_prefix="Rate limit check failed")
    status = snapshot.get_status(threshold)

    if output_format == OutputFormat.JSON:
        payload = {
            **snapshot.model_dump(mode="json"),
            "status": status.value,
            "seconds_until_reset": int(snapshot.seconds_until_reset()),
        }
        console.print_json(json.dumps(payload))
        return

    table = Table(title="GitHub API Quota")
    table.add_column("Status")
    table.add_column("Remaining", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Remaining %", justify="right")
    table.add_column("Resets In", justify="right")
    table.add_row(
        _get_status_style(status),
        str(snapshot.remaining),
        str(snapshot.limit),
        f"{snapshot.remaining_percent:.1f}%",
        _format_time_remaining(int(snapshot.seconds_until_reset())),
    )

    console.print()
    console.print(table)
    console.print(f"  Resets at: {snapshot.reset_at:%Y-%m-%d %H:%M:%S} UTC")

    if status is QuotaStatus.LOW:
        console.print(
            "\n[yellow]Recommendation:[/yellow] Quota is low. "
            "Every sync request will be paused until it resets."
        )
    elif status is QuotaStatus.EXHAUSTED:
        console.print(
            "\n[red]Quota exhausted.[/red] A sync started now waits for the reset."
        )
