"""Read-side queries over stored articles."""

import logging
from datetime import datetime
from typing import List, Optional

from ..models import ArticleWithTags, MediaSource, Tag
from .filters import ArticleFilters, ArticlePage, ArticleQuery, period_start, total_pages

logger = logging.getLogger(__name__)


class ArticleQueryEngine:
    """Serve ranked, filtered and paginated pages of stored articles."""

    def __init__(self, store) -> None:
        self.store = store

    async def get_articles(
        self,
        filters: ArticleFilters,
        now: Optional[datetime] = None,
    ) -> ArticlePage:
        """
        Get one page of articles matching all filters.

        A tag filter that matches no tag, or no article, yields an empty page.
        Tags for the page are loaded in a single batched call.

        Returns:
            Article page with total and page count
        """
        article_ids: Optional[List[int]] = None
        if filters.tag_names:
            tag_ids = await self.store.find_tag_ids_by_names(filters.tag_names)
            if tag_ids:
                article_ids = await self.store.find_article_ids_by_tag_ids(tag_ids)
            if not article_ids:
                logger.debug("No articles tagged with %s", filters.tag_names)
                return ArticlePage(page=filters.page, limit=filters.limit)

        query = ArticleQuery(
            media_names=filters.media_names,
            since=period_start(filters.period, now),
            search=filters.search.strip(),
            article_ids=article_ids,
            sort=filters.sort,
            limit=filters.limit,
            offset=filters.offset,
        )
        articles, total = await self.store.query_articles(query)

        if articles:
            tags_by_article = await self.store.get_tags_for_article_ids([a.id for a in articles])
            articles = [
                a.model_copy(update={"tags": tags_by_article.get(a.id, [])}) for a in articles
            ]

        return ArticlePage(
            articles=articles,
            total=total,
            total_pages=total_pages(total, filters.limit),
            page=filters.page,
            limit=filters.limit,
        )

    async def get_article_by_id(self, article_id: int) -> Optional[ArticleWithTags]:
        """Get one article with its source and tags, or None."""
        article = await self.store.get_article_by_id(article_id)
        if article is None:
            return None
        tags_by_article = await self.store.get_tags_for_article_ids([article_id])
        return article.model_copy(update={"tags": tags_by_article.get(article_id, [])})

    async def get_tags(self, limit: int = 50, sort: str = "count") -> List[Tag]:
        """Tags ordered by article count or name."""
        return await self.store.list_tags(limit=limit, sort=sort)

    async def get_media_sources(self, active_only: bool = True) -> List[MediaSource]:
        return await self.store.list_media_sources(active_only=active_only)
