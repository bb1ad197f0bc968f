"""Error types shared across collection and querying."""

from typing import Optional


class TrendFeedError(Exception):
    """Base class for all trendfeed errors."""


class UpstreamError(TrendFeedError):
    """An upstream platform returned a non-2xx status or an undecodable payload."""

    def __init__(
        self,
        source: str,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        self.source = source
        self.status_code = status_code
        super().__init__(f"{source}: {message}")


class MappingError(TrendFeedError):
    """A single upstream item could not be translated into an article."""

    def __init__(self, source: str, item_id: str, message: str) -> None:
        self.source = source
        self.item_id = item_id
        super().__init__(f"{source} item {item_id}: {message}")


class ConflictError(TrendFeedError):
    """A non-idempotent insert hit a unique constraint."""


class ConfigurationError(TrendFeedError):
    """A required credential or setting is missing."""


class NotFoundError(TrendFeedError):
    """A requested record does not exist."""
