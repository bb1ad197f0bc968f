import asyncio
from contextlib import asynccontextmanager

import pytest
from conftest import NOW

from trendfeed.db import PostgresStore
from trendfeed.models import ArticleInsert
from trendfeed.query import ArticleQuery, SortKey


class RecordingCursor:
    def __init__(self, log, results):
        self.log = log
        self.results = results

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, sql, params=None):
        self.log.append((" ".join(sql.split()), params))

    async def fetchone(self):
        return self.results.pop(0) if self.results else None

    async def fetchall(self):
        return self.results.pop(0) if self.results else []


class RecordingPool:
    def __init__(self, results=()):
        self.log = []
        self.results = list(results)

    def cursor(self):
        return RecordingCursor(self.log, self.results)

    @asynccontextmanager
    async def connection(self):
        yield self


def article():
    return ArticleInsert(
        external_id="1",
        media_source_id=1,
        title="t",
        url="https://qiita.com/a/items/1",
        author_name="a",
        author_id="a",
        published_at=NOW,
        likes_count=3,
    )


def test_upsert_updates_only_mutable_counters():
    pool = RecordingPool(results=[{"id": 7}])
    article_id = asyncio.run(PostgresStore(pool).upsert_article_by_url(article(), ("likes_count",)))

    [(sql, params)] = pool.log
    update = sql.split("DO UPDATE SET")[1]
    assert article_id == 7
    assert "ON CONFLICT (url)" in sql
    assert "likes_count = EXCLUDED.likes_count" in update
    assert "trend_score = EXCLUDED.trend_score" in update
    assert "updated_at = CURRENT_TIMESTAMP" in update
    for kept in ("author_name", "published_at", "body", "bookmarks_count"):
        assert kept not in update
    assert params["url"] == "https://qiita.com/a/items/1"


def test_upsert_rejects_non_counter_fields():
    with pytest.raises(ValueError):
        asyncio.run(PostgresStore(RecordingPool()).upsert_article_by_url(article(), ("author_name",)))


def test_query_articles_runs_count_then_page():
    pool = RecordingPool(results=[{"total": 0}, []])
    query = ArticleQuery(media_names=["zenn"], sort=SortKey.LIKES, limit=12, offset=24)

    rows, total = asyncio.run(PostgresStore(pool).query_articles(query))

    assert (rows, total) == ([], 0)
    (count_sql, count_params), (page_sql, page_params) = pool.log
    assert count_sql.startswith("SELECT COUNT(*)")
    assert count_params == [["zenn"]]
    assert "ORDER BY a.likes_count DESC, a.id DESC" in page_sql
    assert page_params == [["zenn"], 12, 24]


def test_tags_for_articles_is_one_query():
    pool = RecordingPool(
        results=[[{"article_id": 1, "id": 5, "name": "Go", "display_name": "Go", "slug": "go"}]]
    )

    grouped = asyncio.run(PostgresStore(pool).get_tags_for_article_ids([1, 2]))

    [(sql, _)] = pool.log
    assert "t.*" not in sql
    assert "article_count" not in sql
    assert [t.slug for t in grouped[1]] == ["go"]
    assert grouped[1][0].article_count is None
    assert grouped[2] == []


def test_tags_for_no_articles_skips_query():
    pool = RecordingPool()
    assert asyncio.run(PostgresStore(pool).get_tags_for_article_ids([])) == {}
    assert pool.log == []
