"""Hatena Blog RSS adapter.

Collects company tech blogs hosted on Hatena Blog. Feeds carry no like,
bookmark or comment counts, so articles are ranked by freshness alone and
feed categories stand in for tags.
"""

import asyncio
import calendar
import logging
import re
from datetime import datetime
from typing import List, Optional
from urllib.parse import urlparse

import feedparser
import httpx
import pendulum

from ..config import HatenaConfig
from ..models import ArticleInsert
from ..ranking import calculate_recency_score
from .base import get_response, make_client
from .models import HatenaEntry

logger = logging.getLogger(__name__)

_AUTHOR_ID = re.compile(r"id:([a-zA-Z0-9_-]+)")
_HTML_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def strip_html(text: str) -> str:
    """Plain-text snippet of an HTML fragment."""
    text = _HTML_TAG.sub(" ", text or "")
    return _WHITESPACE.sub(" ", text).strip()


def entry_id_from_url(url: str) -> str:
    """Last non-empty path segment of the URL, or the URL itself."""
    parts = [p for p in url.split("/") if p]
    return parts[-1] if parts else url


def blog_origin(url: str) -> Optional[str]:
    """Scheme and host of an entry URL."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def parse_entry_date(entry) -> Optional[datetime]:
    """Publication date of a feed entry in UTC."""
    for field in ("published_parsed", "updated_parsed"):
        parsed = entry.get(field)
        if parsed:
            return pendulum.from_timestamp(calendar.timegm(parsed), tz="UTC")
    return None


class HatenaAdapter:
    """Collect entries from a fixed list of Hatena tech blog feeds."""

    name = "hatena"
    mutable_fields: tuple = ()

    def __init__(
        self,
        config: HatenaConfig,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.timeout = timeout
        self.transport = transport

    def author_name(self, content: str, url: str) -> str:
        """First ``id:xxx`` mention in the content, else the blog's known name, else its host."""
        match = _AUTHOR_ID.search(content or "")
        if match:
            return match.group(1)
        hostname = urlparse(url).hostname
        if not hostname:
            return "Unknown"
        return self.config.blog_names.get(hostname, hostname)

    def parse_feed(self, text: str, feed_url: str) -> List[HatenaEntry]:
        """Normalize feed entries, dropping those without link or title."""
        feed = feedparser.parse(text)
        if feed.bozo and not feed.entries:
            raise ValueError(f"Invalid feed: {feed.bozo_exception}")

        entries = []
        for entry in feed.entries:
            link = entry.get("link")
            title = entry.get("title")
            if not link or not title:
                continue

            content = ""
            if entry.get("content"):
                content = entry["content"][0].get("value", "")
            summary = entry.get("summary") or entry.get("description") or ""
            content = content or summary

            entries.append(
                HatenaEntry(
                    id=entry_id_from_url(link),
                    title=title,
                    url=link,
                    description=strip_html(summary) or strip_html(content),
                    content=content,
                    # Undated entries sort last but are stamped now.
                    published_at=parse_entry_date(entry) or pendulum.now("UTC"),
                    author_name=self.author_name(content, link),
                    author_url=blog_origin(link),
                    categories=[t.get("term") for t in entry.get("tags", []) if t.get("term")],
                )
            )
        logger.debug("Parsed %d entries from %s", len(entries), feed_url)
        return entries

    async def _fetch_feed(self, client: httpx.AsyncClient, feed_url: str) -> List[HatenaEntry]:
        """Fetch one feed; failures are logged and yield no entries."""
        try:
            response = await get_response(client, self.name, feed_url)
            return self.parse_feed(response.text, feed_url)
        except Exception as e:
            logger.warning("Failed to fetch %s: %s", feed_url, e)
            return []

    async def fetch_items(self, limit: Optional[int] = None) -> List[HatenaEntry]:
        """Fetch all feeds in parallel, newest first, truncated to the limit."""
        limit = limit or self.config.limit

        async with make_client(self.timeout, self.transport) as client:
            results = await asyncio.gather(
                *(self._fetch_feed(client, url) for url in self.config.feeds)
            )

        merged = [entry for entries in results for entry in entries]
        merged.sort(key=lambda e: e.published_at, reverse=True)
        logger.info("Hatena: fetched %d entries from %d feeds", len(merged), len(self.config.feeds))
        return merged[:limit]

    def map_to_article(self, entry: HatenaEntry, media_source_id: int) -> ArticleInsert:
        """Convert a feed entry into an article scored by recency."""
        return ArticleInsert(
            external_id=entry.id,
            media_source_id=media_source_id,
            title=entry.title,
            url=entry.url,
            description=entry.description,
            body=entry.content,
            trend_score=calculate_recency_score(entry.published_at),
            author_name=entry.author_name,
            author_id=entry.author_url or entry.author_name,
            author_profile_url=entry.author_url,
            published_at=entry.published_at,
        )

    def extract_tags(self, entry: HatenaEntry) -> List[str]:
        """Feed categories."""
        return list(entry.categories)
