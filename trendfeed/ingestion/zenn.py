"""Zenn articles API adapter."""

from typing import List, Optional

import httpx

from ..config import ZennConfig
from ..errors import UpstreamError
from ..models import ArticleInsert
from ..ranking import calculate_trend_score
from .base import get_json, make_client, parse_items, parse_timestamp
from .models import ZennArticle

ZENN_BASE_URL = "https://zenn.dev"


class ZennAdapter:
    """Collect ranked articles from Zenn.

    The list endpoint exposes likes only: no bookmarks, views, comments or
    tags. Tags would need one detail request per article, which is not made.
    """

    name = "zenn"
    mutable_fields = ("likes_count",)

    def __init__(
        self,
        config: ZennConfig,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.timeout = timeout
        self.transport = transport

    async def fetch_items(
        self,
        order: Optional[str] = None,
        count: Optional[int] = None,
    ) -> List[ZennArticle]:
        """Fetch articles in the given ranking order."""
        params = {
            "order": order or self.config.order,
            "count": count or self.config.count,
        }

        async with make_client(self.timeout, self.transport) as client:
            payload = await get_json(client, self.name, f"{self.config.api_base}/articles", params)

        if not isinstance(payload, dict):
            raise UpstreamError(self.name, "Expected an object with an articles list")

        return parse_items(self.name, ZennArticle, payload.get("articles") or [])

    def map_to_article(self, article: ZennArticle, media_source_id: int) -> ArticleInsert:
        """Convert a Zenn article into an article."""
        published_at = parse_timestamp(self.name, str(article.id), article.published_at)

        return ArticleInsert(
            external_id=str(article.id),
            media_source_id=media_source_id,
            title=article.title,
            url=f"{ZENN_BASE_URL}{article.path}",
            description=f"{article.emoji} {article.title}",
            body=None,
            thumbnail_url=None,
            likes_count=article.liked_count,
            trend_score=calculate_trend_score(
                likes=article.liked_count,
                bookmarks=0,
                comments=0,
                published_at=published_at,
            ),
            author_name=article.user.name or article.user.username,
            author_id=article.user.username,
            author_profile_url=f"{ZENN_BASE_URL}/{article.user.username}",
            author_avatar_url=article.user.avatar_small_url,
            published_at=published_at,
        )

    def extract_tags(self, article: ZennArticle) -> List[str]:
        """Always empty; the list API does not carry topics."""
        return []
