"""Favorite model."""

from typing import Optional

from pydantic import Field

from .base import DBModel


class Favorite(DBModel):
    """A user's favorite, keyed by article URL."""

    user_id: str = Field(..., description="User identifier")
    article_url: str = Field(..., description="Favorited article URL")
    article_title: Optional[str] = Field(None, description="Title at time of favoriting")
    media_source_name: Optional[str] = Field(None, description="Source name at time of favoriting")
