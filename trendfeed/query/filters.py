"""Filter, sort and page models for article queries."""

import math
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

import pendulum
from pydantic import BaseModel, Field

from ..models import ArticleWithTags, MediaSource


class Period(str, Enum):
    """Publication time window, counted back from now."""

    DAY = "day"
    THREE_DAYS = "3days"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


class SortKey(str, Enum):
    """Descending sort orders."""

    TREND = "trend"
    LIKES = "likes"
    BOOKMARKS = "bookmarks"
    LATEST = "latest"


PERIOD_DURATIONS = {
    Period.DAY: timedelta(days=1),
    Period.THREE_DAYS: timedelta(days=3),
    Period.WEEK: timedelta(days=7),
    Period.MONTH: timedelta(days=30),
}


def period_start(period: Optional[Period], now: Optional[datetime] = None) -> Optional[datetime]:
    """Lower bound on published_at for a period; None for ``all`` or no period."""
    if period is None:
        return None
    duration = PERIOD_DURATIONS.get(Period(period))
    if duration is None:
        return None
    current = now if now is not None else pendulum.now("UTC")
    return current - duration


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed for ``total`` rows; 0 when there are none."""
    return math.ceil(total / limit) if total else 0


class ArticleFilters(BaseModel):
    """Filters accepted by both the persisted and the live feed."""

    page: int = Field(1, ge=1)
    limit: int = Field(12, ge=1, le=100)
    media_names: List[str] = Field(default_factory=list, description="Source names; empty means all active")
    period: Optional[Period] = Field(None, description="Unset means all for stored articles")
    tag_names: List[str] = Field(default_factory=list, description="Match any of these tags")
    search: str = Field("", description="Case-insensitive substring of title or description")
    sort: SortKey = SortKey.TREND

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class ArticleQuery(BaseModel):
    """Store-level query built from filters after tag resolution."""

    media_names: List[str] = Field(default_factory=list)
    since: Optional[datetime] = None
    search: str = ""
    article_ids: Optional[List[int]] = None
    sort: SortKey = SortKey.TREND
    limit: int = 12
    offset: int = 0


class ArticlePage(BaseModel):
    """One page of stored articles."""

    articles: List[ArticleWithTags] = Field(default_factory=list)
    total: int = 0
    total_pages: int = 0
    page: int = 1
    limit: int = 12


class LiveArticle(BaseModel):
    """Article fetched on demand, identified by its URL."""

    id: str
    external_id: str
    media_source: MediaSource
    title: str
    url: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    likes_count: int = 0
    bookmarks_count: int = 0
    comments_count: int = 0
    views_count: int = 0
    trend_score: int = 0
    author_name: str
    author_id: str
    author_profile_url: Optional[str] = None
    author_avatar_url: Optional[str] = None
    published_at: datetime
    tags: List[str] = Field(default_factory=list)


class LiveArticlePage(BaseModel):
    """One page of live articles."""

    articles: List[LiveArticle] = Field(default_factory=list)
    total: int = 0
    total_pages: int = 0
    page: int = 1
    limit: int = 12
