"""Collection orchestrator: one cycle over every active media source."""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import pendulum
from pydantic import BaseModel, Field
from rich.console import Console
from rich.table import Table

from ..db import Store
from ..errors import ConfigurationError
from ..ingestion import SourceAdapter
from ..models import CrawlLog, CrawlStatus, MediaSource
from ..tagging import TagNormalizer

logger = logging.getLogger(__name__)


class SourceRunSummary(BaseModel):
    """Outcome of one source within a cycle."""

    source: str = Field(..., description="Display name of the media source")
    status: CrawlStatus
    count: int = 0
    error: Optional[str] = None


class CollectionSummary(BaseModel):
    """Outcome of one collection cycle."""

    success: bool = True
    summary: List[SourceRunSummary] = Field(default_factory=list)
    timestamp: datetime


class SourceProgress:
    """Running counters for one source, readable after cancellation."""

    def __init__(self, source: MediaSource):
        self.source = source
        self.started_at = pendulum.now("UTC")
        self.start_time = time.time()
        self.collected = 0
        self.skipped = 0
        self.status: Optional[CrawlStatus] = None
        self.error: Optional[str] = None
        self.logged = False

    def finish(self, status: CrawlStatus, error: Optional[str] = None) -> None:
        self.status = status
        self.error = error

    @property
    def duration(self) -> float:
        return time.time() - self.start_time

    def to_summary(self) -> SourceRunSummary:
        return SourceRunSummary(
            source=self.source.display_name,
            status=self.status or CrawlStatus.FAILED,
            count=self.collected,
            error=self.error,
        )


class CollectionOrchestrator:
    """Collect articles from every active source concurrently.

    Each source runs as its own task: a failing source is logged as failed
    and never stops the others. Exactly one crawl log is written per source
    per cycle, including for sources cut off by the cycle timeout or by
    cancellation of the cycle itself.
    """

    def __init__(
        self,
        store: Store,
        adapters: Mapping[str, SourceAdapter],
        timeout: Optional[float] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            store: Article store
            adapters: Adapters keyed by media source name
            timeout: Wall-clock limit for the whole cycle in seconds
        """
        self.store = store
        self.adapters = dict(adapters)
        self.timeout = timeout
        self.tagger = TagNormalizer(store)

    async def run_cycle(self) -> CollectionSummary:
        """
        Run one collection cycle.

        Source-level failures are recorded, not raised.

        Returns:
            Per-source summary in source order
        """
        sources = await self.store.list_active_media_sources()
        logger.info("Starting article collection for %d sources", len(sources))

        progress = [SourceProgress(source) for source in sources]
        tasks = [
            asyncio.create_task(self.collect_from_source(p.source, p), name=f"collect-{p.source.name}")
            for p in progress
        ]

        pending: set = set()
        if tasks:
            try:
                _, pending = await asyncio.wait(tasks, timeout=self.timeout)
            except asyncio.CancelledError:
                # Cancelled by the caller's deadline: stop the stragglers and still log them.
                logger.warning("Collection cycle cancelled")
                await self._stop_unfinished(tasks, progress, "Cancelled before completion")
                raise

        if pending:
            await self._stop_unfinished(tasks, progress, f"Timed out after {self.timeout:g}s")

        summary = CollectionSummary(
            summary=[p.to_summary() for p in progress],
            timestamp=pendulum.now("UTC"),
        )
        logger.info(
            "Article collection completed: %s",
            ", ".join(f"{s.source}={s.status.value}({s.count})" for s in summary.summary),
        )
        return summary

    async def _stop_unfinished(
        self,
        tasks: List["asyncio.Task[int]"],
        progress: List[SourceProgress],
        reason: str,
    ) -> None:
        """Cancel sources still running and write their crawl logs."""
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        for task, p in zip(tasks, progress):
            if task in pending and not p.logged:
                status = CrawlStatus.PARTIAL if p.collected else CrawlStatus.FAILED
                p.finish(status, reason)
                logger.warning(
                    "%s: stopped with %d articles stored (%s)",
                    p.source.display_name,
                    p.collected,
                    reason,
                )
                await asyncio.shield(self._write_log(p))

    async def collect_from_source(
        self,
        source: MediaSource,
        progress: Optional[SourceProgress] = None,
    ) -> int:
        """
        Fetch, store and tag all items from one source, then log the run.

        Returns:
            Number of articles stored
        """
        if progress is None:
            progress = SourceProgress(source)

        logger.info("Collecting from %s...", source.display_name)
        try:
            adapter = self.adapters.get(source.name)
            if adapter is None:
                raise ConfigurationError(f"No adapter registered for source '{source.name}'")

            items = await adapter.fetch_items()
            for item in items:
                await self._store_item(adapter, source, item, progress)
        except Exception as e:
            logger.error("Error collecting from %s: %s", source.display_name, e)
            progress.finish(CrawlStatus.FAILED, str(e))
        else:
            if progress.skipped:
                progress.finish(CrawlStatus.PARTIAL, f"{progress.skipped} items skipped")
            else:
                progress.finish(CrawlStatus.SUCCESS)
            logger.info(
                "Collected %d articles from %s in %.1fs",
                progress.collected,
                source.display_name,
                progress.duration,
            )

        await self._write_log(progress)
        return progress.collected

    async def _store_item(
        self,
        adapter: SourceAdapter,
        source: MediaSource,
        item: Any,
        progress: SourceProgress,
    ) -> None:
        """Map, upsert and tag one item. Failures skip the item only."""
        try:
            article = adapter.map_to_article(item, source.id)
            article_id = await self.store.upsert_article_by_url(article, adapter.mutable_fields)
            if article_id is None:
                saved = await self.store.get_article_by_url(article.url)
                if saved is None:
                    raise LookupError(f"Article not found after upsert: {article.url}")
                article_id = saved.id

            await self.tagger.attach(article_id, adapter.extract_tags(item))
            progress.collected += 1
        except Exception as e:
            progress.skipped += 1
            item_id = getattr(item, "id", "?")
            logger.warning("Error saving %s item %s: %s", source.name, item_id, e)

    async def _write_log(self, progress: SourceProgress) -> None:
        """Append the crawl log for a finished source."""
        log = CrawlLog(
            media_source_id=progress.source.id,
            status=progress.status or CrawlStatus.FAILED,
            articles_collected=progress.collected,
            error_message=progress.error,
            started_at=progress.started_at,
            completed_at=pendulum.now("UTC"),
        )
        try:
            await self.store.insert_crawl_log(log)
            progress.logged = True
        except Exception as e:
            logger.error("Failed to write crawl log for %s: %s", progress.source.name, e)


def print_collection_summary(summary: CollectionSummary, console: Optional[Console] = None) -> None:
    """Print the per-source outcome of a cycle."""
    console = console or Console()

    table = Table(title="Collection Summary")
    table.add_column("Source", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Articles", style="yellow", justify="right")
    table.add_column("Details", style="dim")

    styles: Dict[CrawlStatus, str] = {
        CrawlStatus.SUCCESS: "[green]success[/green]",
        CrawlStatus.PARTIAL: "[yellow]partial[/yellow]",
        CrawlStatus.FAILED: "[red]failed[/red]",
    }
    for row in summary.summary:
        table.add_row(row.source, styles[row.status], str(row.count), row.error or "")

    console.print(table)
    total = sum(row.count for row in summary.summary)
    console.print(f"[bold]{total}[/bold] articles collected at {summary.timestamp.isoformat()}")
