import asyncio
from collections import Counter
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

from trendfeed.models import (
    Article,
    ArticleInsert,
    ArticleWithTags,
    CrawlLog,
    MediaSource,
    Tag,
    TagInsert,
)
from trendfeed.query.filters import ArticleQuery, SortKey

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

SORT_ATTRS = {
    SortKey.TREND: "trend_score",
    SortKey.LIKES: "likes_count",
    SortKey.BOOKMARKS: "bookmarks_count",
    SortKey.LATEST: "published_at",
}


def make_sources(names: Sequence[str] = ("qiita", "zenn", "note", "hatena")) -> List[MediaSource]:
    return [
        MediaSource(
            id=i,
            name=name,
            display_name=name.title(),
            base_url=f"https://{name}.example",
        )
        for i, name in enumerate(names, start=1)
    ]


class FakeStore:
    """In-memory store with the same upsert and query semantics as Postgres."""

    def __init__(self, sources: Optional[List[MediaSource]] = None):
        self.sources = sources if sources is not None else make_sources()
        self.articles: Dict[int, Article] = {}
        self.tags: Dict[int, Tag] = {}
        self.article_tags: Set[Tuple[int, int]] = set()
        self.crawl_logs: List[CrawlLog] = []
        self.calls: Counter = Counter()
        self._ids = count(1)
        self._tag_ids = count(1)

    def source(self, source_id: int) -> MediaSource:
        return next(s for s in self.sources if s.id == source_id)

    def logs_for(self, name: str) -> List[CrawlLog]:
        source = next(s for s in self.sources if s.name == name)
        return [log for log in self.crawl_logs if log.media_source_id == source.id]

    async def list_active_media_sources(self):
        self.calls["list_active_media_sources"] += 1
        return [s for s in self.sources if s.is_active]

    async def list_media_sources(self, active_only: bool = False):
        return [s for s in self.sources if s.is_active or not active_only]

    async def upsert_article_by_url(self, article: ArticleInsert, update_fields=()):
        self.calls["upsert_article_by_url"] += 1
        for existing in self.articles.values():
            if existing.url == article.url:
                update = {field: getattr(article, field) for field in update_fields}
                update["trend_score"] = article.trend_score
                update["updated_at"] = NOW
                self.articles[existing.id] = existing.model_copy(update=update)
                return existing.id

        article_id = next(self._ids)
        self.articles[article_id] = Article(
            id=article_id, created_at=NOW, updated_at=NOW, **article.model_dump()
        )
        return article_id

    async def get_article_by_url(self, url: str):
        return next((a for a in self.articles.values() if a.url == url), None)

    async def get_article_by_id(self, article_id: int):
        article = self.articles.get(article_id)
        if article is None:
            return None
        return self._with_source(article)

    async def upsert_tag_by_slug(self, tag: TagInsert) -> int:
        self.calls["upsert_tag_by_slug"] += 1
        for existing in self.tags.values():
            if existing.slug == tag.slug:
                return existing.id
        tag_id = next(self._tag_ids)
        self.tags[tag_id] = Tag(id=tag_id, **tag.model_dump())
        return tag_id

    async def upsert_article_tag(self, article_id: int, tag_id: int) -> None:
        self.article_tags.add((article_id, tag_id))

    async def insert_crawl_log(self, log: CrawlLog) -> int:
        self.crawl_logs.append(log)
        return len(self.crawl_logs)

    async def list_crawl_logs(self, limit: int = 20):
        return self.crawl_logs[-limit:]

    async def find_tag_ids_by_names(self, names):
        wanted = set(names)
        return [t.id for t in self.tags.values() if t.name in wanted or t.slug in wanted]

    async def find_article_ids_by_tag_ids(self, tag_ids):
        wanted = set(tag_ids)
        return sorted({a for a, t in self.article_tags if t in wanted})

    async def query_articles(self, query: ArticleQuery):
        self.calls["query_articles"] += 1
        rows = []
        for article in self.articles.values():
            source = self.source(article.media_source_id)
            if not source.is_active:
                continue
            if query.media_names and source.name not in query.media_names:
                continue
            if query.since is not None and article.published_at < query.since:
                continue
            if query.search:
                needle = query.search.lower()
                if needle not in article.title.lower() and needle not in (article.description or "").lower():
                    continue
            if query.article_ids is not None and article.id not in query.article_ids:
                continue
            rows.append(article)

        attr = SORT_ATTRS[query.sort]
        rows.sort(key=lambda a: (getattr(a, attr), a.id), reverse=True)
        page = rows[query.offset : query.offset + query.limit]
        return [self._with_source(a) for a in page], len(rows)

    async def get_tags_for_article_ids(self, article_ids):
        self.calls["get_tags_for_article_ids"] += 1
        grouped = {article_id: [] for article_id in article_ids}
        for article_id, tag_id in sorted(self.article_tags):
            if article_id in grouped:
                grouped[article_id].append(self.tags[tag_id])
        return grouped

    async def list_tags(self, limit: int = 50, sort: str = "count"):
        counts = Counter(tag_id for _, tag_id in self.article_tags)
        tags = [t.model_copy(update={"article_count": counts[t.id]}) for t in self.tags.values()]
        if sort == "name":
            tags.sort(key=lambda t: t.name)
        else:
            tags.sort(key=lambda t: (-t.article_count, t.name))
        return tags[:limit]

    def _with_source(self, article: Article) -> ArticleWithTags:
        return ArticleWithTags(
            **article.model_dump(), media_source=self.source(article.media_source_id), tags=[]
        )


class FakeAdapter:
    """Adapter over canned dict items."""

    def __init__(
        self,
        name: str,
        items: Optional[List[dict]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        mutable_fields: Tuple[str, ...] = ("likes_count", "bookmarks_count", "comments_count"),
    ):
        self.name = name
        self.items = items or []
        self.error = error
        self.delay = delay
        self.mutable_fields = mutable_fields
        self.fetch_calls = 0

    async def fetch_items(self, **params):
        self.fetch_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.items)

    def map_to_article(self, item: dict, media_source_id: int) -> ArticleInsert:
        if item.get("broken"):
            raise ValueError("broken item")
        return ArticleInsert(
            external_id=item["id"],
            media_source_id=media_source_id,
            title=item.get("title", f"Article {item['id']}"),
            url=item.get("url", f"https://{self.name}.example/{item['id']}"),
            description=item.get("description"),
            likes_count=item.get("likes", 0),
            bookmarks_count=item.get("bookmarks", 0),
            trend_score=item.get("score", 0),
            author_name=item.get("author", "author"),
            author_id=item.get("author", "author"),
            published_at=item.get("published_at", NOW - timedelta(hours=1)),
        )

    def extract_tags(self, item: dict) -> List[str]:
        return list(item.get("tags", []))


@pytest.fixture
def store():
    return FakeStore()
