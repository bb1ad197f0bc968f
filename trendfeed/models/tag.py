"""Tag models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .base import DBModel


class TagInsert(BaseModel):
    """Tag to insert if its slug is not yet known."""

    name: str
    display_name: str
    slug: str


class Tag(DBModel):
    """Canonical tag."""

    name: str = Field(..., description="Tag name as first seen")
    display_name: str = Field(..., description="Tag display name")
    slug: str = Field(..., description="URL-safe unique slug")
    color: Optional[str] = Field(None, description="Display color")
    icon_url: Optional[str] = Field(None, description="Icon URL")
    article_count: Optional[int] = Field(None, description="Article count, set by tag listings")


class ArticleTag(BaseModel):
    """Association between an article and a tag."""

    article_id: int
    tag_id: int
    created_at: Optional[datetime] = None
