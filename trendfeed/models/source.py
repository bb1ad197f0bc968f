"""Media source model for upstream content platforms."""

from typing import Optional

from pydantic import Field

from .base import DBModel


class MediaSource(DBModel):
    """Upstream content platform."""

    name: str = Field(..., description="Unique machine name (qiita, zenn, note, hatena)")
    display_name: str = Field(..., description="Human readable name")
    base_url: str = Field(..., description="Platform base URL")
    api_endpoint: Optional[str] = Field(None, description="API or feed endpoint")
    icon_url: Optional[str] = Field(None, description="Icon path")
    is_active: bool = Field(True, description="Whether the source is collected and queried")
