"""Upstream platform adapters."""

from .base import SourceAdapter
from .hatena import HatenaAdapter
from .models import HatenaEntry, NoteArticle, QiitaItem, ZennArticle
from .note import NoteAdapter
from .qiita import QiitaAdapter
from .registry import build_adapters
from .zenn import ZennAdapter

__all__ = [
    "SourceAdapter",
    "HatenaAdapter",
    "NoteAdapter",
    "QiitaAdapter",
    "ZennAdapter",
    "HatenaEntry",
    "NoteArticle",
    "QiitaItem",
    "ZennArticle",
    "build_adapters",
]
