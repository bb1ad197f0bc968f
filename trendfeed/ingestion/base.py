"""Source adapter interface and shared HTTP helpers."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Type, TypeVar

import httpx
import pendulum
from pydantic import BaseModel, ValidationError

from ..errors import MappingError, UpstreamError
from ..models import ArticleInsert

logger = logging.getLogger(__name__)

USER_AGENT = "trendfeed/1.0 (+https://github.com/trendfeed)"

ItemT = TypeVar("ItemT", bound=BaseModel)


class SourceAdapter(Protocol):
    """Capability shared by every upstream platform adapter."""

    name: str
    # Engagement counters the source reports; refreshed on re-collection.
    mutable_fields: Sequence[str]

    async def fetch_items(self, **params: Any) -> List[Any]:
        """Fetch raw items. Raises UpstreamError on a bad response."""
        ...

    def map_to_article(self, item: Any, media_source_id: int) -> ArticleInsert:
        """Translate one raw item. Raises MappingError on malformed items."""
        ...

    def extract_tags(self, item: Any) -> List[str]:
        """Tag names for one raw item, possibly empty."""
        ...


def make_client(
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.AsyncClient:
    """Create an async client with the shared user agent."""
    merged = {"User-Agent": USER_AGENT}
    if headers:
        merged.update(headers)
    return httpx.AsyncClient(
        timeout=timeout,
        transport=transport,
        headers=merged,
        follow_redirects=True,
    )


async def get_response(
    client: httpx.AsyncClient,
    source: str,
    url: str,
    params: Optional[Dict[str, Any]] = None,
) -> httpx.Response:
    """GET a URL, converting transport failures and non-2xx statuses to UpstreamError."""
    try:
        response = await client.get(url, params=params)
    except httpx.TimeoutException as e:
        raise UpstreamError(source, f"Request timed out: {url}") from e
    except httpx.HTTPError as e:
        raise UpstreamError(source, f"HTTP error: {e}") from e

    if not response.is_success:
        raise UpstreamError(
            source,
            f"API error: {response.status_code} {response.reason_phrase}",
            status_code=response.status_code,
        )
    return response


async def get_json(
    client: httpx.AsyncClient,
    source: str,
    url: str,
    params: Optional[Dict[str, Any]] = None,
) -> Any:
    """GET a URL and decode its JSON body."""
    response = await get_response(client, source, url, params)
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(source, f"Undecodable payload: {e}") from e


def parse_items(source: str, model: Type[ItemT], payload: Iterable[Any]) -> List[ItemT]:
    """Validate raw payload items, skipping and logging malformed ones."""
    items = []
    for raw in payload:
        try:
            items.append(model.model_validate(raw))
        except ValidationError as e:
            item_id = raw.get("id", "?") if isinstance(raw, dict) else "?"
            logger.warning("%s", MappingError(source, str(item_id), f"invalid item: {e.error_count()} errors"))
    return items


def parse_timestamp(source: str, item_id: str, value: Optional[str]) -> datetime:
    """Parse an upstream ISO-8601 timestamp."""
    if not value:
        raise MappingError(source, item_id, "missing timestamp")
    try:
        return pendulum.parse(value)
    except ValueError as e:
        raise MappingError(source, item_id, f"bad timestamp {value!r}") from e
