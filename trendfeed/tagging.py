"""Tag name normalization and canonical tag resolution."""

import hashlib
import logging
import re
from typing import Dict, Iterable, List

from .models import TagInsert

logger = logging.getLogger(__name__)

_INVALID_SLUG_CHARS = re.compile(r"[^a-z0-9\-_]")
_REPEATED_HYPHENS = re.compile(r"-+")


def slugify(name: str) -> str:
    """
    Convert a free-text tag name into a URL-safe slug.

    Lowercases, replaces anything outside ``[a-z0-9-_]`` with ``-``,
    collapses repeated hyphens and trims them from both ends.
    """
    slug = _INVALID_SLUG_CHARS.sub("-", name.lower())
    slug = _REPEATED_HYPHENS.sub("-", slug)
    return slug.strip("-")


def tag_slug(name: str) -> str:
    """Slug used as the tag's identity.

    Names with no ASCII letters or digits (most Japanese tags) slugify to
    an empty string; they get a stable hash-based slug instead.
    """
    slug = slugify(name)
    if slug:
        return slug
    digest = hashlib.sha1(name.strip().lower().encode("utf-8")).hexdigest()
    return f"tag-{digest[:10]}"


class TagNormalizer:
    """Resolve tag names to canonical tag ids, creating tags on first sight."""

    def __init__(self, store) -> None:
        self.store = store

    def prepare(self, names: Iterable[str]) -> List[TagInsert]:
        """Drop blank names and keep the first name seen for each slug."""
        by_slug: Dict[str, TagInsert] = {}
        for raw in names:
            name = (raw or "").strip()
            if not name:
                continue
            slug = tag_slug(name)
            if slug not in by_slug:
                by_slug[slug] = TagInsert(name=name, display_name=name, slug=slug)
        return list(by_slug.values())

    async def resolve(self, names: Iterable[str]) -> List[int]:
        """Upsert each tag by slug and return the tag ids."""
        tag_ids = []
        for tag in self.prepare(names):
            tag_ids.append(await self.store.upsert_tag_by_slug(tag))
        return tag_ids

    async def attach(self, article_id: int, names: Iterable[str]) -> int:
        """Link an article to its tags. Tag failures are logged and skipped.

        Returns:
            Number of tags linked
        """
        linked = 0
        for tag in self.prepare(names):
            try:
                tag_id = await self.store.upsert_tag_by_slug(tag)
                await self.store.upsert_article_tag(article_id, tag_id)
                linked += 1
            except Exception as e:
                logger.warning("Failed to save tag %r for article %s: %s", tag.name, article_id, e)
        return linked
