"""Live feed: fetch from upstream on request, without storing anything."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..errors import UpstreamError
from ..models import MediaSource
from .filters import (
    ArticleFilters,
    LiveArticle,
    LiveArticlePage,
    Period,
    SortKey,
    period_start,
    total_pages,
)

logger = logging.getLogger(__name__)

LIVE_SORT_KEYS = {
    SortKey.TREND: lambda a: a.trend_score,
    SortKey.LIKES: lambda a: a.likes_count,
    SortKey.BOOKMARKS: lambda a: a.bookmarks_count,
    SortKey.LATEST: lambda a: a.published_at,
}


def filter_live_articles(
    articles: List[LiveArticle],
    filters: ArticleFilters,
    period: Optional[Period],
    now: Optional[datetime] = None,
) -> List[LiveArticle]:
    """Apply period, search and tag filters in process."""
    since = period_start(period, now)
    if since is not None:
        articles = [a for a in articles if a.published_at >= since]

    search = filters.search.strip().lower()
    if search:
        articles = [
            a
            for a in articles
            if search in a.title.lower() or (a.description and search in a.description.lower())
        ]

    if filters.tag_names:
        wanted = {name.lower() for name in filters.tag_names}
        articles = [a for a in articles if any(tag.lower() in wanted for tag in a.tags)]

    return articles


class LiveAggregator:
    """Aggregate a ranked page straight from the upstream APIs.

    Only sources in ``live_sources`` are fetched; the others are too slow
    or rate-limited to query on every request.
    """

    def __init__(
        self,
        store,
        adapters: Mapping[str, Any],
        live_sources: Sequence[str] = ("qiita", "zenn"),
        timeout: Optional[float] = None,
        default_period: Period = Period.THREE_DAYS,
    ) -> None:
        self.store = store
        self.adapters = dict(adapters)
        self.live_sources = list(live_sources)
        self.timeout = timeout
        self.default_period = Period(default_period)

    async def _fetch_source(self, source: MediaSource) -> List[LiveArticle]:
        """Fetch and map one source. Any failure yields no articles."""
        adapter = self.adapters.get(source.name)
        if adapter is None:
            return []

        try:
            items = await adapter.fetch_items()
        except Exception as e:
            logger.error("Error fetching from %s: %s", source.display_name, e)
            return []

        articles = []
        for item in items:
            try:
                article = adapter.map_to_article(item, source.id)
                tags = adapter.extract_tags(item)
            except Exception as e:
                logger.warning("Skipping %s item %s: %s", source.name, getattr(item, "id", "?"), e)
                continue
            articles.append(
                LiveArticle(
                    id=article.url,
                    media_source=source,
                    tags=tags,
                    **article.model_dump(exclude={"media_source_id", "body"}),
                )
            )
        return articles

    async def get_live_articles(
        self,
        filters: ArticleFilters,
        now: Optional[datetime] = None,
    ) -> LiveArticlePage:
        """
        Get one page of live articles.

        Sources are fetched concurrently; a failing source contributes
        nothing. When the deadline passes, whatever has settled is used.

        Raises:
            UpstreamError: If no source settled before the deadline
        """
        sources = await self.store.list_active_media_sources()
        if filters.media_names:
            sources = [s for s in sources if s.name in filters.media_names]
        sources = [s for s in sources if s.name in self.live_sources]

        tasks: Dict[asyncio.Task, MediaSource] = {
            asyncio.create_task(self._fetch_source(source)): source for source in sources
        }

        merged: List[LiveArticle] = []
        if tasks:
            try:
                done, pending = await asyncio.wait(tasks, timeout=self.timeout)
            finally:
                # Abandon fetches still running when the request is cancelled.
                for task in tasks:
                    if not task.done():
                        task.cancel()
            for task in pending:
                logger.warning("%s: live fetch timed out", tasks[task].display_name)
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
                if not done:
                    raise UpstreamError("live", f"No source responded within {self.timeout:g}s")

            # Keep source order so equal scores sort deterministically.
            for task in tasks:
                if task in done:
                    merged.extend(task.result())

        period = filters.period if filters.period is not None else self.default_period
        articles = filter_live_articles(merged, filters, period, now)
        articles.sort(key=LIVE_SORT_KEYS[filters.sort], reverse=True)

        total = len(articles)
        return LiveArticlePage(
            articles=articles[filters.offset : filters.offset + filters.limit],
            total=total,
            total_pages=total_pages(total, filters.limit),
            page=filters.page,
            limit=filters.limit,
        )
