"""Article models for collected posts."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import DBModel
from .source import MediaSource
from .tag import Tag

# Counters a source may report; the rest default to 0.
ENGAGEMENT_FIELDS = ("likes_count", "bookmarks_count", "comments_count", "views_count")


class ArticleInsert(BaseModel):
    """Article shape produced by a source adapter, ready to upsert."""

    external_id: str = Field(..., description="Source-native identifier")
    media_source_id: int = Field(..., description="Foreign key to media_sources table")
    title: str = Field(..., description="Article title")
    url: str = Field(..., description="Article URL, unique across the store")
    description: Optional[str] = Field(None, description="Short description")
    body: Optional[str] = Field(None, description="Article body if the source exposes it")
    thumbnail_url: Optional[str] = Field(None, description="Thumbnail image URL")
    likes_count: int = Field(0, ge=0)
    bookmarks_count: int = Field(0, ge=0)
    comments_count: int = Field(0, ge=0)
    views_count: int = Field(0, ge=0)
    trend_score: int = Field(0, ge=0, description="Recency-decayed engagement score")
    author_name: str = Field(..., description="Author display name")
    author_id: str = Field(..., description="Author identifier on the source")
    author_profile_url: Optional[str] = Field(None, description="Author profile URL")
    author_avatar_url: Optional[str] = Field(None, description="Author avatar URL")
    published_at: datetime = Field(..., description="Publication timestamp")


class Article(DBModel, ArticleInsert):
    """Stored article."""


class ArticleWithTags(Article):
    """Stored article joined with its media source and tags."""

    media_source: MediaSource
    tags: List[Tag] = Field(default_factory=list)
