"""Qiita REST API adapter."""

import logging
from datetime import datetime
from typing import List, Optional

import httpx
import pendulum

from ..config import QiitaConfig
from ..errors import ConfigurationError, UpstreamError
from ..models import ArticleInsert
from ..ranking import calculate_trend_score
from .base import get_json, make_client, parse_items, parse_timestamp
from .models import QiitaItem

logger = logging.getLogger(__name__)

DESCRIPTION_LENGTH = 200


class QiitaAdapter:
    """Collect trending items from Qiita."""

    name = "qiita"
    mutable_fields = ("likes_count", "bookmarks_count", "comments_count")

    def __init__(
        self,
        config: QiitaConfig,
        access_token: Optional[str],
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.access_token = access_token
        self.timeout = timeout
        self.transport = transport

    def build_query(self, now: Optional[datetime] = None) -> str:
        """Structured query: created within the lookback window and enough stocks."""
        current = pendulum.instance(now) if now is not None else pendulum.now("UTC")
        since = current.subtract(days=self.config.lookback_days).format("YYYY-MM-DD")
        return f"created:>{since} stocks:>{self.config.min_stocks}"

    async def fetch_items(
        self,
        page: int = 1,
        per_page: Optional[int] = None,
        query: Optional[str] = None,
    ) -> List[QiitaItem]:
        """Fetch one page of items matching the query."""
        if not self.access_token:
            raise ConfigurationError("Qiita access token is not configured")

        params = {
            "page": page,
            "per_page": per_page or self.config.per_page,
            "query": query if query is not None else self.build_query(),
        }
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

        async with make_client(self.timeout, self.transport, headers) as client:
            payload = await get_json(client, self.name, f"{self.config.api_base}/items", params)

        if not isinstance(payload, list):
            raise UpstreamError(self.name, "Expected a list of items")

        items = parse_items(self.name, QiitaItem, payload)
        logger.debug("Qiita returned %d items for %r", len(items), params["query"])
        return items

    def map_to_article(self, item: QiitaItem, media_source_id: int) -> ArticleInsert:
        """Convert a Qiita item into an article."""
        published_at = parse_timestamp(self.name, item.id, item.created_at)

        return ArticleInsert(
            external_id=item.id,
            media_source_id=media_source_id,
            title=item.title,
            url=item.url,
            description=item.body[:DESCRIPTION_LENGTH],
            body=item.body,
            thumbnail_url=None,
            likes_count=item.likes_count,
            bookmarks_count=item.stocks_count,
            comments_count=item.comments_count,
            views_count=0,
            trend_score=calculate_trend_score(
                likes=item.likes_count,
                bookmarks=item.stocks_count,
                comments=item.comments_count,
                published_at=published_at,
            ),
            author_name=item.user.name or item.user.id,
            author_id=item.user.id,
            author_profile_url=f"https://qiita.com/{item.user.id}",
            author_avatar_url=item.user.profile_image_url,
            published_at=published_at,
        )

    def extract_tags(self, item: QiitaItem) -> List[str]:
        """Tag names attached to the item."""
        return [tag.name for tag in item.tags]
