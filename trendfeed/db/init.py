"""Database initialization and schema management."""

import logging
from typing import Any, Dict

from psycopg.errors import DatabaseError

from .connection import open_pool

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
-- Media sources table
CREATE TABLE IF NOT EXISTS media_sources (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    display_name TEXT NOT NULL,
    base_url TEXT NOT NULL,
    api_endpoint TEXT,
    icon_url TEXT,
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Articles table
CREATE TABLE IF NOT EXISTS articles (
    id SERIAL PRIMARY KEY,
    external_id TEXT NOT NULL,
    media_source_id INTEGER NOT NULL REFERENCES media_sources(id),
    title TEXT NOT NULL,
    url TEXT NOT NULL UNIQUE,
    description TEXT,
    body TEXT,
    thumbnail_url TEXT,
    likes_count INTEGER NOT NULL DEFAULT 0,
    bookmarks_count INTEGER NOT NULL DEFAULT 0,
    comments_count INTEGER NOT NULL DEFAULT 0,
    views_count INTEGER NOT NULL DEFAULT 0,
    trend_score INTEGER NOT NULL DEFAULT 0,
    author_name TEXT NOT NULL,
    author_id TEXT NOT NULL,
    author_profile_url TEXT,
    author_avatar_url TEXT,
    published_at TIMESTAMPTZ NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Tags table
CREATE TABLE IF NOT EXISTS tags (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    display_name TEXT NOT NULL,
    slug TEXT NOT NULL UNIQUE,
    color TEXT,
    icon_url TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Article tags link table
CREATE TABLE IF NOT EXISTS article_tags (
    article_id INTEGER NOT NULL REFERENCES articles(id) ON DELETE CASCADE,
    tag_id INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (article_id, tag_id)
);

-- Crawl logs table (append-only)
CREATE TABLE IF NOT EXISTS crawl_logs (
    id SERIAL PRIMARY KEY,
    media_source_id INTEGER NOT NULL REFERENCES media_sources(id),
    status TEXT NOT NULL CHECK (status IN ('success', 'failed', 'partial')),
    articles_collected INTEGER NOT NULL DEFAULT 0,
    error_message TEXT,
    started_at TIMESTAMPTZ NOT NULL,
    completed_at TIMESTAMPTZ,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Favorites table, keyed by article URL
CREATE TABLE IF NOT EXISTS favorites (
    id SERIAL PRIMARY KEY,
    user_id TEXT NOT NULL,
    article_url TEXT NOT NULL,
    article_title TEXT,
    media_source_name TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (user_id, article_url)
);

-- Create indexes
CREATE INDEX IF NOT EXISTS idx_articles_media_source ON articles(media_source_id);
CREATE INDEX IF NOT EXISTS idx_articles_trend_score ON articles(trend_score);
CREATE INDEX IF NOT EXISTS idx_articles_published_at ON articles(published_at);
CREATE INDEX IF NOT EXISTS idx_articles_external_id ON articles(external_id, media_source_id);
CREATE INDEX IF NOT EXISTS idx_article_tags_tag ON article_tags(tag_id);
CREATE INDEX IF NOT EXISTS idx_crawl_logs_media_source ON crawl_logs(media_source_id);
CREATE INDEX IF NOT EXISTS idx_crawl_logs_status ON crawl_logs(status);
CREATE INDEX IF NOT EXISTS idx_favorites_user ON favorites(user_id);

-- Update trigger function
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = CURRENT_TIMESTAMP;
    RETURN NEW;
END;
$$ language 'plpgsql';

-- Create update triggers
CREATE OR REPLACE TRIGGER update_media_sources_updated_at BEFORE UPDATE ON media_sources
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();

CREATE OR REPLACE TRIGGER update_articles_updated_at BEFORE UPDATE ON articles
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();

CREATE OR REPLACE TRIGGER update_tags_updated_at BEFORE UPDATE ON tags
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
"""

DEFAULT_MEDIA_SOURCES = [
    {
        "name": "qiita",
        "display_name": "Qiita",
        "base_url": "https://qiita.com",
        "api_endpoint": "https://qiita.com/api/v2/items",
        "icon_url": "/icons/qiita.svg",
    },
    {
        "name": "zenn",
        "display_name": "Zenn",
        "base_url": "https://zenn.dev",
        "api_endpoint": "https://zenn.dev/api/articles",
        "icon_url": "/icons/zenn.svg",
    },
    {
        "name": "note",
        "display_name": "note",
        "base_url": "https://note.com",
        "api_endpoint": "https://note.com/api/v3/searches",
        "icon_url": "/icons/note.svg",
    },
    {
        "name": "hatena",
        "display_name": "はてなブログ",
        "base_url": "https://hatenablog.com",
        "api_endpoint": None,
        "icon_url": "/icons/hatena.svg",
    },
]

SEED_SQL = """
INSERT INTO media_sources (name, display_name, base_url, api_endpoint, icon_url, is_active)
VALUES (%(name)s, %(display_name)s, %(base_url)s, %(api_endpoint)s, %(icon_url)s, TRUE)
ON CONFLICT (name) DO NOTHING
"""


async def validate_connection(config: Dict[str, Any]) -> bool:
    """Validate database connection."""
    try:
        async with open_pool(config) as pool:
            async with pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute("SELECT 1 AS ok")
                    result = await cur.fetchone()
                    return result is not None and result["ok"] == 1
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False


async def init_database(config: Dict[str, Any], seed: bool = True) -> None:
    """Initialize database schema and seed the known media sources."""
    try:
        async with open_pool(config) as pool:
            async with pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(SCHEMA_SQL)
                    if seed:
                        await cur.executemany(SEED_SQL, DEFAULT_MEDIA_SOURCES)
        logger.info("Database schema initialized successfully")
    except DatabaseError as e:
        logger.error("Failed to initialize database schema: %s", e)
        raise
