"""Build the adapter for each known media source."""

from typing import Dict, Optional

import httpx

from ..config import Config
from .base import SourceAdapter
from .hatena import HatenaAdapter
from .note import NoteAdapter
from .qiita import QiitaAdapter
from .zenn import ZennAdapter


def build_adapters(
    config: Config,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, SourceAdapter]:
    """Map media source names to configured adapters."""
    sources = config.config.sources
    timeout = config.config.collection.http_timeout

    adapters = [
        QiitaAdapter(sources.qiita, config.get_qiita_token(), timeout=timeout, transport=transport),
        ZennAdapter(sources.zenn, timeout=timeout, transport=transport),
        NoteAdapter(sources.note, timeout=timeout, transport=transport),
        HatenaAdapter(sources.hatena, timeout=timeout, transport=transport),
    ]
    return {adapter.name: adapter for adapter in adapters}
