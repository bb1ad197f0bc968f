"""Favorite storage, keyed by article URL."""

import logging
from typing import Dict, List, Optional, Sequence

from psycopg.errors import UniqueViolation
from psycopg_pool import AsyncConnectionPool
from pydantic import BaseModel

from ..errors import ConflictError
from ..models import Favorite

logger = logging.getLogger(__name__)


class FavoriteResult(BaseModel):
    """Outcome of adding a favorite."""

    success: bool
    favorite: Optional[Favorite] = None
    error: Optional[str] = None


class FavoritePage(BaseModel):
    """One page of a user's favorites."""

    favorites: List[Favorite]
    total: int
    page: int
    limit: int


class FavoriteStorage:
    """Store users' favorite articles.

    Favorites reference articles by URL so that live articles, which have
    no stored ID, can be favorited too.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self.pool = pool

    async def insert_favorite(
        self,
        user_id: str,
        article_url: str,
        article_title: Optional[str] = None,
        media_source_name: Optional[str] = None,
    ) -> Favorite:
        """
        Insert a favorite row.

        Raises:
            ConflictError: If the user already favorited this URL
        """
        try:
            async with self.pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        INSERT INTO favorites (user_id, article_url, article_title, media_source_name)
                        VALUES (%s, %s, %s, %s)
                        RETURNING *
                        """,
                        (user_id, article_url, article_title, media_source_name),
                    )
                    row = await cur.fetchone()
        except UniqueViolation as e:
            raise ConflictError(f"{user_id} already favorited {article_url}") from e
        return Favorite.model_validate(row)

    async def add_favorite(
        self,
        user_id: str,
        article_url: str,
        article_title: Optional[str] = None,
        media_source_name: Optional[str] = None,
    ) -> FavoriteResult:
        """Add a favorite; a second add of the same URL is reported, not raised."""
        try:
            favorite = await self.insert_favorite(user_id, article_url, article_title, media_source_name)
        except ConflictError:
            return FavoriteResult(success=False, error="Already favorited")

        logger.debug("User %s favorited %s", user_id, article_url)
        return FavoriteResult(success=True, favorite=favorite)

    async def remove_favorite(self, user_id: str, article_url: str) -> bool:
        """Remove a favorite. Returns False when there was nothing to remove."""
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    "DELETE FROM favorites WHERE user_id = %s AND article_url = %s",
                    (user_id, article_url),
                )
                return cur.rowcount > 0

    async def list_favorites(self, user_id: str, page: int = 1, limit: int = 20) -> FavoritePage:
        """Newest favorites first."""
        offset = (page - 1) * limit
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    "SELECT COUNT(*) AS total FROM favorites WHERE user_id = %s",
                    (user_id,),
                )
                total = (await cur.fetchone())["total"]

                await cur.execute(
                    """
                    SELECT * FROM favorites
                    WHERE user_id = %s
                    ORDER BY created_at DESC, id DESC
                    LIMIT %s OFFSET %s
                    """,
                    (user_id, limit, offset),
                )
                rows = await cur.fetchall()

        return FavoritePage(
            favorites=[Favorite.model_validate(row) for row in rows],
            total=total,
            page=page,
            limit=limit,
        )

    async def is_favorited(self, user_id: str, article_url: str) -> bool:
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    "SELECT 1 FROM favorites WHERE user_id = %s AND article_url = %s LIMIT 1",
                    (user_id, article_url),
                )
                return await cur.fetchone() is not None

    async def check_favorites(self, user_id: str, article_urls: Sequence[str]) -> Dict[str, bool]:
        """Favorite flag for each URL, in one query."""
        result = {url: False for url in article_urls}
        if not article_urls:
            return result

        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    "SELECT article_url FROM favorites WHERE user_id = %s AND article_url = ANY(%s)",
                    (user_id, list(article_urls)),
                )
                for row in await cur.fetchall():
                    result[row["article_url"]] = True
        return result
