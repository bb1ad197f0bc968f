import asyncio
from contextlib import asynccontextmanager

import pytest
from conftest import NOW
from psycopg.errors import UniqueViolation

from trendfeed.db import FavoriteStorage
from trendfeed.errors import ConflictError


class FakeCursor:
    """Cursor over an in-memory favorites table keyed by (user_id, article_url)."""

    def __init__(self, rows):
        self.rows = rows
        self.result = []
        self.rowcount = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, sql, params=()):
        sql = " ".join(sql.split())
        if sql.startswith("INSERT INTO favorites"):
            user_id, url, title, source = params
            if (user_id, url) in self.rows:
                raise UniqueViolation("duplicate key value violates unique constraint")
            row = {
                "id": len(self.rows) + 1,
                "user_id": user_id,
                "article_url": url,
                "article_title": title,
                "media_source_name": source,
                "created_at": NOW,
            }
            self.rows[(user_id, url)] = row
            self.result = [row]
        elif sql.startswith("DELETE"):
            self.rowcount = 1 if self.rows.pop(tuple(params), None) else 0
        elif sql.startswith("SELECT 1"):
            self.result = [{"?column?": 1}] if tuple(params) in self.rows else []
        elif sql.startswith("SELECT article_url"):
            user_id, urls = params
            self.result = [{"article_url": u} for (uid, u) in self.rows if uid == user_id and u in urls]
        elif sql.startswith("SELECT COUNT(*)"):
            self.result = [{"total": sum(1 for uid, _ in self.rows if uid == params[0])}]
        else:
            user_id, limit, offset = params
            mine = [r for (uid, _), r in self.rows.items() if uid == user_id]
            mine.sort(key=lambda r: r["id"], reverse=True)
            self.result = mine[offset : offset + limit]

    async def fetchone(self):
        return self.result[0] if self.result else None

    async def fetchall(self):
        return self.result


class FakeConnection:
    def __init__(self, rows):
        self.rows = rows

    def cursor(self):
        return FakeCursor(self.rows)


class FakePool:
    def __init__(self):
        self.rows = {}

    @asynccontextmanager
    async def connection(self):
        yield FakeConnection(self.rows)


def test_add_and_duplicate_add():
    storage = FavoriteStorage(FakePool())

    first = asyncio.run(storage.add_favorite("u1", "https://zenn.dev/a", "Title", "zenn"))
    second = asyncio.run(storage.add_favorite("u1", "https://zenn.dev/a"))

    assert first.success
    assert first.favorite.article_title == "Title"
    assert not second.success
    assert second.error == "Already favorited"


def test_remove_and_check():
    storage = FavoriteStorage(FakePool())
    asyncio.run(storage.add_favorite("u1", "https://a.example"))
    asyncio.run(storage.add_favorite("u1", "https://b.example"))

    assert asyncio.run(storage.is_favorited("u1", "https://a.example"))
    assert asyncio.run(storage.remove_favorite("u1", "https://a.example"))
    assert not asyncio.run(storage.remove_favorite("u1", "https://a.example"))

    flags = asyncio.run(
        storage.check_favorites("u1", ["https://a.example", "https://b.example", "https://c.example"])
    )
    assert flags == {"https://a.example": False, "https://b.example": True, "https://c.example": False}


def test_list_favorites_pages_newest_first():
    storage = FavoriteStorage(FakePool())
    for i in range(3):
        asyncio.run(storage.add_favorite("u1", f"https://{i}.example"))
    asyncio.run(storage.add_favorite("u2", "https://other.example"))

    page = asyncio.run(storage.list_favorites("u1", page=1, limit=2))

    assert page.total == 3
    assert [f.article_url for f in page.favorites] == ["https://2.example", "https://1.example"]


def test_check_favorites_with_no_urls():
    assert asyncio.run(FavoriteStorage(FakePool()).check_favorites("u1", [])) == {}


def test_insert_favorite_raises_conflict_on_duplicate():
    storage = FavoriteStorage(FakePool())
    asyncio.run(storage.insert_favorite("u1", "https://a.example"))

    with pytest.raises(ConflictError):
        asyncio.run(storage.insert_favorite("u1", "https://a.example"))
