"""Media source commands."""

import asyncio

import typer
from rich.table import Table

from ..query import ArticleQueryEngine
from .common import console, load_config, with_store

sources_app = typer.Typer(help="Inspect media sources and crawl logs")

STATUS_STYLES = {
    "success": "[green]success[/green]",
    "partial": "[yellow]partial[/yellow]",
    "failed": "[red]failed[/red]",
}


@sources_app.command("list")
def sources_list(
    all_sources: bool = typer.Option(False, "--all", "-a", help="Include inactive sources"),
) -> None:
    """List media sources."""
    config = load_config()
    sources = asyncio.run(
        with_store(config, lambda store: ArticleQueryEngine(store).get_media_sources(active_only=not all_sources))
    )

    if not sources:
        console.print("[yellow]No media sources. Run 'trendfeed init' first.[/yellow]")
        return

    table = Table(title="Media Sources")
    table.add_column("Name", style="cyan")
    table.add_column("Display Name", style="magenta")
    table.add_column("Active", style="yellow")
    table.add_column("URL", style="blue")

    for source in sources:
        table.add_row(
            source.name,
            source.display_name,
            "✓" if source.is_active else "✗",
            source.base_url,
        )

    console.print(table)


@sources_app.command("logs")
def sources_logs(
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Number of logs to show"),
) -> None:
    """Show recent crawl logs."""
    config = load_config()
    logs = asyncio.run(with_store(config, lambda store: store.list_crawl_logs(limit)))

    if not logs:
        console.print("[yellow]No crawl logs yet. Run 'trendfeed collect'.[/yellow]")
        return

    table = Table(title="Crawl Logs")
    table.add_column("Started", style="dim")
    table.add_column("Source", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Articles", justify="right")
    table.add_column("Duration", style="yellow", justify="right")
    table.add_column("Error", style="dim")

    for log in logs:
        duration = "-"
        if log["completed_at"]:
            duration = f"{(log['completed_at'] - log['started_at']).total_seconds():.1f}s"
        table.add_row(
            log["started_at"].strftime("%Y-%m-%d %H:%M:%S"),
            log["source_name"],
            STATUS_STYLES.get(log["status"], log["status"]),
            str(log["articles_collected"]),
            duration,
            log["error_message"] or "",
        )

    console.print(table)
