"""Trends command implementation."""

import asyncio
from typing import Optional

import typer
from rich.panel import Panel
from rich.table import Table

from ..analysis import MAX_ARTICLES, TrendAnalyzer, build_provider, build_trend_batch
from ..errors import TrendFeedError
from ..ingestion import build_adapters
from ..query import ArticleFilters, LiveAggregator, Period
from .common import console, load_config, with_store


def trends_command(
    period: Optional[Period] = typer.Option(None, "--period", "-p", help="Publication window"),
) -> None:
    """Summarize current technology trends from the live feed."""
    config = load_config()

    try:
        analyzer = TrendAnalyzer(build_provider(config))
    except TrendFeedError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    filters = ArticleFilters(limit=MAX_ARTICLES, period=period)

    async def fetch(store):
        aggregator = LiveAggregator(
            store,
            build_adapters(config),
            live_sources=config.config.live.sources,
            timeout=config.config.live.timeout_seconds,
            default_period=config.config.live.default_period,
        )
        return await aggregator.get_live_articles(filters)

    try:
        page = asyncio.run(with_store(config, fetch))
        with console.status("Analyzing trends..."):
            result = analyzer.analyze(build_trend_batch(page.articles))
    except Exception as e:
        console.print(f"[red]Trend analysis failed: {e}[/red]")
        raise typer.Exit(1)

    if not page.articles:
        console.print("[yellow]No articles to analyze.[/yellow]")
        return

    console.print(Panel(result.summary, title=f"Trends ({len(page.articles)} articles)", style="blue"))

    if result.emerging_topics:
        console.print("\n[bold]Emerging topics[/bold]")
        for topic in result.emerging_topics:
            console.print(f"• {topic}")

    if result.content_recommendations:
        table = Table(title="Content Recommendations")
        table.add_column("Title", style="bold")
        table.add_column("Audience", style="cyan")
        table.add_column("Keywords", style="magenta")
        for rec in result.content_recommendations:
            table.add_row(f"{rec.title}\n[dim]{rec.description}[/dim]", rec.target_audience, ", ".join(rec.keywords))
        console.print(table)
