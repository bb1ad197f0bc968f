"""Article store: the data-access interface used by collection and queries."""

from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from psycopg_pool import AsyncConnectionPool

from ..models import (
    ENGAGEMENT_FIELDS,
    Article,
    ArticleInsert,
    ArticleWithTags,
    CrawlLog,
    MediaSource,
    Tag,
    TagInsert,
)
from ..query.filters import ArticleQuery
from .queries import build_article_filter, order_by_clause

ARTICLE_COLUMNS = list(ArticleInsert.model_fields)


class Store(Protocol):
    """Operations the pipeline and query engine need from storage."""

    async def list_active_media_sources(self) -> List[MediaSource]: ...

    async def list_media_sources(self, active_only: bool = False) -> List[MediaSource]: ...

    async def upsert_article_by_url(
        self, article: ArticleInsert, update_fields: Sequence[str] = ()
    ) -> Optional[int]: ...

    async def get_article_by_url(self, url: str) -> Optional[Article]: ...

    async def get_article_by_id(self, article_id: int) -> Optional[ArticleWithTags]: ...

    async def upsert_tag_by_slug(self, tag: TagInsert) -> int: ...

    async def upsert_article_tag(self, article_id: int, tag_id: int) -> None: ...

    async def insert_crawl_log(self, log: CrawlLog) -> int: ...

    async def find_tag_ids_by_names(self, names: Sequence[str]) -> List[int]: ...

    async def find_article_ids_by_tag_ids(self, tag_ids: Sequence[int]) -> List[int]: ...

    async def query_articles(self, query: ArticleQuery) -> Tuple[List[ArticleWithTags], int]: ...

    async def get_tags_for_article_ids(self, article_ids: Sequence[int]) -> Dict[int, List[Tag]]: ...

    async def list_tags(self, limit: int = 50, sort: str = "count") -> List[Tag]: ...


def _article_with_source(row: Dict[str, Any]) -> ArticleWithTags:
    """Build an article from a row carrying its media source as JSON."""
    row = dict(row)
    media_source = MediaSource.model_validate(row.pop("media_source"))
    return ArticleWithTags(**row, media_source=media_source, tags=[])


class PostgresStore:
    """Store backed by Postgres through an async connection pool."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """Initialize with an open pool."""
        self.pool = pool

    async def list_active_media_sources(self) -> List[MediaSource]:
        """Sources eligible for collection and querying."""
        return await self.list_media_sources(active_only=True)

    async def list_media_sources(self, active_only: bool = False) -> List[MediaSource]:
        """All media sources, optionally only active ones."""
        query = "SELECT * FROM media_sources"
        if active_only:
            query += " WHERE is_active = TRUE"
        query += " ORDER BY id"

        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query)
                return [MediaSource.model_validate(row) for row in await cur.fetchall()]

    async def upsert_article_by_url(
        self,
        article: ArticleInsert,
        update_fields: Sequence[str] = (),
    ) -> Optional[int]:
        """
        Insert an article, or refresh an existing one with the same URL.

        On conflict only the given engagement counters, ``trend_score`` and
        ``updated_at`` change; author, body and publish date are kept.

        Returns:
            Article ID
        """
        unknown = set(update_fields) - set(ENGAGEMENT_FIELDS)
        if unknown:
            raise ValueError(f"Not updatable on upsert: {sorted(unknown)}")

        assignments = [f"{field} = EXCLUDED.{field}" for field in update_fields]
        assignments += ["trend_score = EXCLUDED.trend_score", "updated_at = CURRENT_TIMESTAMP"]

        columns = ", ".join(ARTICLE_COLUMNS)
        placeholders = ", ".join(f"%({c})s" for c in ARTICLE_COLUMNS)

        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    f"""
                    INSERT INTO articles ({columns})
                    VALUES ({placeholders})
                    ON CONFLICT (url) DO UPDATE SET
                        {", ".join(assignments)}
                    RETURNING id
                    """,
                    article.model_dump(),
                )
                row = await cur.fetchone()
                return row["id"] if row else None

    async def get_article_by_url(self, url: str) -> Optional[Article]:
        """Point lookup by URL."""
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT * FROM articles WHERE url = %s LIMIT 1", (url,))
                row = await cur.fetchone()
                return Article.model_validate(row) if row else None

    async def get_article_by_id(self, article_id: int) -> Optional[ArticleWithTags]:
        """Point lookup by ID, joined with the media source. Tags are not loaded."""
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    SELECT a.*, row_to_json(ms) AS media_source
                    FROM articles a
                    JOIN media_sources ms ON a.media_source_id = ms.id
                    WHERE a.id = %s
                    LIMIT 1
                    """,
                    (article_id,),
                )
                row = await cur.fetchone()
                return _article_with_source(row) if row else None

    async def upsert_tag_by_slug(self, tag: TagInsert) -> int:
        """Insert the tag if its slug is new and return the canonical tag ID."""
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    INSERT INTO tags (name, display_name, slug)
                    VALUES (%s, %s, %s)
                    ON CONFLICT DO NOTHING
                    """,
                    (tag.name, tag.display_name, tag.slug),
                )
                await cur.execute("SELECT id FROM tags WHERE slug = %s", (tag.slug,))
                row = await cur.fetchone()
                if row is None:
                    # Name taken by a tag with another slug.
                    await cur.execute("SELECT id FROM tags WHERE name = %s", (tag.name,))
                    row = await cur.fetchone()
                return row["id"]

    async def upsert_article_tag(self, article_id: int, tag_id: int) -> None:
        """Link an article and a tag; duplicates are ignored."""
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    INSERT INTO article_tags (article_id, tag_id)
                    VALUES (%s, %s)
                    ON CONFLICT (article_id, tag_id) DO NOTHING
                    """,
                    (article_id, tag_id),
                )

    async def insert_crawl_log(self, log: CrawlLog) -> int:
        """Append a crawl log row."""
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    INSERT INTO crawl_logs (
                        media_source_id, status, articles_collected,
                        error_message, started_at, completed_at
                    ) VALUES (%s, %s, %s, %s, %s, %s)
                    RETURNING id
                    """,
                    (
                        log.media_source_id,
                        log.status.value,
                        log.articles_collected,
                        log.error_message,
                        log.started_at,
                        log.completed_at,
                    ),
                )
                return (await cur.fetchone())["id"]

    async def list_crawl_logs(self, limit: int = 20) -> List[Dict]:
        """Most recent crawl logs with their source names."""
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    SELECT cl.*, ms.display_name AS source_name
                    FROM crawl_logs cl
                    JOIN media_sources ms ON cl.media_source_id = ms.id
                    ORDER BY cl.started_at DESC, cl.id DESC
                    LIMIT %s
                    """,
                    (limit,),
                )
                return await cur.fetchall()

    async def find_tag_ids_by_names(self, names: Sequence[str]) -> List[int]:
        """Tag IDs whose name or slug is in the list."""
        if not names:
            return []
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    "SELECT id FROM tags WHERE name = ANY(%s) OR slug = ANY(%s)",
                    (list(names), list(names)),
                )
                return [row["id"] for row in await cur.fetchall()]

    async def find_article_ids_by_tag_ids(self, tag_ids: Sequence[int]) -> List[int]:
        """Distinct article IDs linked to any of the tags."""
        if not tag_ids:
            return []
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    "SELECT DISTINCT article_id FROM article_tags WHERE tag_id = ANY(%s)",
                    (list(tag_ids),),
                )
                return [row["article_id"] for row in await cur.fetchall()]

    async def query_articles(self, query: ArticleQuery) -> Tuple[List[ArticleWithTags], int]:
        """
        Run the count query and the page query for a filter.

        Returns:
            Tuple of (page rows, total matching rows)
        """
        where_sql, params = build_article_filter(query)
        from_sql = "FROM articles a JOIN media_sources ms ON a.media_source_id = ms.id"

        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(f"SELECT COUNT(*) AS total {from_sql} WHERE {where_sql}", params)
                total = (await cur.fetchone())["total"]

                await cur.execute(
                    f"""
                    SELECT a.*, row_to_json(ms) AS media_source
                    {from_sql}
                    WHERE {where_sql}
                    ORDER BY {order_by_clause(query.sort)}
                    LIMIT %s OFFSET %s
                    """,
                    params + [query.limit, query.offset],
                )
                rows = await cur.fetchall()

        return [_article_with_source(row) for row in rows], total

    async def get_tags_for_article_ids(self, article_ids: Sequence[int]) -> Dict[int, List[Tag]]:
        """Tags for a set of articles in one query, grouped by article ID."""
        grouped: Dict[int, List[Tag]] = {article_id: [] for article_id in article_ids}
        if not article_ids:
            return grouped

        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    SELECT at.article_id, t.id, t.name, t.display_name, t.slug, t.color,
                           t.icon_url, t.created_at, t.updated_at
                    FROM article_tags at
                    JOIN tags t ON at.tag_id = t.id
                    WHERE at.article_id = ANY(%s)
                    ORDER BY at.article_id, t.name
                    """,
                    (list(article_ids),),
                )
                for row in await cur.fetchall():
                    article_id = row.pop("article_id")
                    grouped.setdefault(article_id, []).append(Tag.model_validate(row))
        return grouped

    async def list_tags(self, limit: int = 50, sort: str = "count") -> List[Tag]:
        """Tags with article counts computed by aggregation."""
        order = "t.name ASC" if sort == "name" else "article_count DESC, t.name ASC"
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    f"""
                    SELECT t.id, t.name, t.display_name, t.slug, t.color, t.icon_url,
                           t.created_at, t.updated_at,
                           COUNT(at.article_id)::int AS article_count
                    FROM tags t
                    LEFT JOIN article_tags at ON t.id = at.tag_id
                    GROUP BY t.id
                    ORDER BY {order}
                    LIMIT %s
                    """,
                    (limit,),
                )
                return [Tag.model_validate(row) for row in await cur.fetchall()]
