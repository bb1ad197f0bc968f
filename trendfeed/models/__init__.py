"""Data models for trendfeed."""

from .article import ENGAGEMENT_FIELDS, Article, ArticleInsert, ArticleWithTags
from .crawl_log import CrawlLog, CrawlStatus
from .favorite import Favorite
from .source import MediaSource
from .tag import ArticleTag, Tag, TagInsert

__all__ = [
    "ENGAGEMENT_FIELDS",
    "Article",
    "ArticleInsert",
    "ArticleTag",
    "ArticleWithTags",
    "CrawlLog",
    "CrawlStatus",
    "Favorite",
    "MediaSource",
    "Tag",
    "TagInsert",
]
