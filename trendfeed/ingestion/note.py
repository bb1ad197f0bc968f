"""note.com search adapter.

Uses note's unofficial search API, which may change without notice.
"""

import asyncio
import logging
from typing import Dict, List, Optional

import httpx
import pendulum

from ..config import NoteConfig
from ..errors import UpstreamError
from ..models import ArticleInsert
from ..ranking import calculate_trend_score
from .base import get_json, make_client, parse_items, parse_timestamp
from .models import NoteArticle

logger = logging.getLogger(__name__)

NOTE_BASE_URL = "https://note.com"
MAX_RESULTS_PER_KEYWORD = 50
DESCRIPTION_LENGTH = 200


class NoteAdapter:
    """Collect free technology notes by keyword search."""

    name = "note"
    mutable_fields = ("likes_count", "comments_count")

    def __init__(
        self,
        config: NoteConfig,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.timeout = timeout
        self.transport = transport

    def _accept(self, article: NoteArticle, seen_ids: set) -> bool:
        """Keep unseen, free notes from authors not on the block list."""
        if str(article.id) in seen_ids or not article.is_free:
            return False
        urlname = article.user.urlname if article.user else None
        return (urlname or "") not in self.config.blocked_authors

    async def fetch_items(
        self,
        keywords: Optional[List[str]] = None,
        size: Optional[int] = None,
        start: int = 0,
    ) -> List[NoteArticle]:
        """
        Search each keyword in turn and merge the results.

        Queries are sequential with a fixed delay between them to stay under
        note's rate limit. A failing keyword is logged and skipped; the
        source only fails when every keyword failed.
        """
        keywords = (keywords or self.config.keywords)[: self.config.max_keywords]
        per_keyword = min(size or self.config.size, MAX_RESULTS_PER_KEYWORD)

        articles: List[NoteArticle] = []
        seen_ids: set = set()
        errors: Dict[str, str] = {}

        async with make_client(self.timeout, self.transport) as client:
            for index, keyword in enumerate(keywords):
                if index > 0 and self.config.request_delay > 0:
                    await asyncio.sleep(self.config.request_delay)

                params = {"q": keyword, "context": "note", "size": per_keyword, "start": start}
                try:
                    payload = await get_json(client, self.name, f"{self.config.api_base}/searches", params)
                except UpstreamError as e:
                    logger.warning("note search for %r failed: %s", keyword, e)
                    errors[keyword] = str(e)
                    continue

                data = payload.get("data") if isinstance(payload, dict) else None
                notes = (data or {}).get("notes") or {}
                for article in parse_items(self.name, NoteArticle, notes.get("contents") or []):
                    if self._accept(article, seen_ids):
                        seen_ids.add(str(article.id))
                        articles.append(article)

        if keywords and len(errors) == len(keywords):
            raise UpstreamError(self.name, f"All {len(keywords)} keyword searches failed")

        return articles

    def build_url(self, article: NoteArticle) -> str:
        """Use the note URL when present, otherwise build it from the author and key."""
        if article.note_url:
            return article.note_url
        urlname = (article.user.urlname if article.user else None) or "unknown"
        return f"{NOTE_BASE_URL}/{urlname}/n/{article.key or article.id}"

    def map_to_article(self, article: NoteArticle, media_source_id: int) -> ArticleInsert:
        """Convert a note into an article."""
        item_id = str(article.id)
        timestamp = article.publish_at or article.created_at
        published_at = (
            parse_timestamp(self.name, item_id, timestamp) if timestamp else pendulum.now("UTC")
        )
        likes = article.like_count or 0
        comments = article.comment_count or 0
        user = article.user

        return ArticleInsert(
            external_id=item_id,
            media_source_id=media_source_id,
            title=article.name or "無題",
            url=self.build_url(article),
            description=article.description or (article.name or "")[:DESCRIPTION_LENGTH],
            body=None,
            thumbnail_url=article.eyecatch,
            likes_count=likes,
            comments_count=comments,
            trend_score=calculate_trend_score(
                likes=likes,
                bookmarks=0,
                comments=comments,
                published_at=published_at,
            ),
            author_name=(user.nickname or user.name if user else None) or "匿名",
            author_id=(user.urlname if user else None) or str(user.id if user and user.id else article.id),
            author_profile_url=f"{NOTE_BASE_URL}/{user.urlname}" if user and user.urlname else None,
            author_avatar_url=user.user_profile_image_path if user else None,
            published_at=published_at,
        )

    def extract_tags(self, article: NoteArticle) -> List[str]:
        """Hashtags, given either as strings or as objects with a name."""
        tags = []
        for tag in article.hashtags or []:
            if isinstance(tag, str):
                tags.append(tag)
            elif isinstance(tag, dict) and tag.get("name"):
                tags.append(tag["name"])
        return tags
