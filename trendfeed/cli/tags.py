"""Tags command implementation."""

import asyncio

import typer
from rich.table import Table

from ..query import ArticleQueryEngine
from .common import console, load_config, with_store


def tags_command(
    limit: int = typer.Option(50, "--limit", "-n", min=1, help="Number of tags to show"),
    sort: str = typer.Option("count", "--sort", help="Sort by 'count' or 'name'"),
) -> None:
    """List tags with their article counts."""
    if sort not in ("count", "name"):
        console.print("[red]--sort must be 'count' or 'name'[/red]")
        raise typer.Exit(1)

    config = load_config()
    tags = asyncio.run(
        with_store(config, lambda store: ArticleQueryEngine(store).get_tags(limit=limit, sort=sort))
    )

    if not tags:
        console.print("[yellow]No tags yet.[/yellow]")
        return

    table = Table(title="Tags")
    table.add_column("Name", style="cyan")
    table.add_column("Slug", style="dim")
    table.add_column("Articles", style="yellow", justify="right")

    for tag in tags:
        table.add_row(tag.display_name, tag.slug, str(tag.article_count))

    console.print(table)
