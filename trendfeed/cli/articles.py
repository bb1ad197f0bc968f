"""Article listing commands."""

import asyncio
from typing import List, Optional, Sequence

import typer
from rich.panel import Panel
from rich.table import Table

from ..errors import NotFoundError
from ..ingestion import build_adapters
from ..models import ArticleWithTags
from ..query import (
    ArticleFilters,
    ArticleQueryEngine,
    LiveAggregator,
    LiveArticle,
    Period,
    SortKey,
)
from .common import console, load_config, with_store


def _format_tags(tags: Sequence[str], limit: int = 4) -> str:
    shown = ", ".join(tags[:limit])
    if len(tags) > limit:
        shown += f" +{len(tags) - limit}"
    return shown


def print_article_table(
    articles: Sequence,
    title: str,
    offset: int = 0,
) -> None:
    """Print stored or live articles as a ranked table."""
    table = Table(title=title)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Source", style="cyan")
    table.add_column("Score", style="yellow", justify="right")
    table.add_column("Likes", justify="right")
    table.add_column("Bkmk", justify="right")
    table.add_column("Published", style="green")
    table.add_column("Tags", style="magenta")

    for rank, article in enumerate(articles, start=offset + 1):
        if isinstance(article, LiveArticle):
            tags = article.tags
            ref = article.url
        else:
            tags = [t.display_name for t in article.tags]
            ref = f"id {article.id}"
        table.add_row(
            str(rank),
            f"{article.title}\n[dim]{ref}[/dim]",
            article.media_source.display_name,
            str(article.trend_score),
            str(article.likes_count),
            str(article.bookmarks_count),
            article.published_at.strftime("%Y-%m-%d %H:%M"),
            _format_tags(tags),
        )

    console.print(table)


def articles_command(
    media: Optional[List[str]] = typer.Option(
        None, "--media", "-m", help="Media source name (repeatable): qiita, zenn, note, hatena"
    ),
    period: Optional[Period] = typer.Option(None, "--period", "-p", help="Publication window"),
    tag: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag name (repeatable, any match)"),
    search: str = typer.Option("", "--search", "-s", help="Substring of title or description"),
    sort: SortKey = typer.Option(SortKey.TREND, "--sort", help="Sort order"),
    page: int = typer.Option(1, "--page", min=1, help="Page number"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, max=100, help="Page size"),
    live: bool = typer.Option(False, "--live", help="Fetch from the upstream APIs instead of the database"),
) -> None:
    """List ranked articles."""
    config = load_config()
    filters = ArticleFilters(
        page=page,
        limit=limit or config.config.query.default_limit,
        media_names=media or [],
        period=period,
        tag_names=tag or [],
        search=search,
        sort=sort,
    )

    async def fetch(store):
        if live:
            aggregator = LiveAggregator(
                store,
                build_adapters(config),
                live_sources=config.config.live.sources,
                timeout=config.config.live.timeout_seconds,
                default_period=config.config.live.default_period,
            )
            return await aggregator.get_live_articles(filters)
        return await ArticleQueryEngine(store).get_articles(filters)

    try:
        result = asyncio.run(with_store(config, fetch))
    except Exception as e:
        console.print(f"[red]Failed to load articles: {e}[/red]")
        raise typer.Exit(1)

    if not result.articles:
        console.print("[yellow]No articles found.[/yellow]")
        return

    title = "Live Articles" if live else "Trending Articles"
    print_article_table(result.articles, title, offset=filters.offset)
    console.print(
        f"[dim]Page {result.page}/{result.total_pages} · {result.total} articles[/dim]"
    )


def print_article(article: ArticleWithTags) -> None:
    """Print one stored article in full."""
    lines = [
        f"[bold]{article.title}[/bold]",
        f"[blue]{article.url}[/blue]",
        "",
        f"Source: {article.media_source.display_name}",
        f"Author: {article.author_name} ({article.author_id})",
        f"Published: {article.published_at.strftime('%Y-%m-%d %H:%M')}",
        f"Score: {article.trend_score} · Likes: {article.likes_count} · "
        f"Bookmarks: {article.bookmarks_count} · Comments: {article.comments_count}",
    ]
    if article.tags:
        lines.append(f"Tags: {', '.join(t.display_name for t in article.tags)}")
    if article.description:
        lines += ["", article.description]

    console.print(Panel("\n".join(lines), title=f"Article {article.id}", expand=False))


def show_command(
    article_id: int = typer.Argument(..., help="Article ID"),
) -> None:
    """Show one stored article."""
    config = load_config()

    async def fetch(store):
        article = await ArticleQueryEngine(store).get_article_by_id(article_id)
        if article is None:
            raise NotFoundError(f"Article {article_id} not found")
        return article

    try:
        article = asyncio.run(with_store(config, fetch))
    except NotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    print_article(article)
