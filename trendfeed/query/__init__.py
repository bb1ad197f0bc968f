"""Article queries over stored and live data."""

from .engine import ArticleQueryEngine
from .filters import (
    ArticleFilters,
    ArticlePage,
    ArticleQuery,
    LiveArticle,
    LiveArticlePage,
    Period,
    SortKey,
    period_start,
    total_pages,
)
from .live import LiveAggregator, filter_live_articles

__all__ = [
    "ArticleFilters",
    "ArticlePage",
    "ArticleQuery",
    "ArticleQueryEngine",
    "LiveAggregator",
    "LiveArticle",
    "LiveArticlePage",
    "Period",
    "SortKey",
    "filter_live_articles",
    "period_start",
    "total_pages",
]
