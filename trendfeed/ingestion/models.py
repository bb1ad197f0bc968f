"""Raw upstream payload models, one set per platform."""

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field


class QiitaUser(BaseModel):
    """Author block of a Qiita item."""

    id: str
    name: Optional[str] = None
    profile_image_url: Optional[str] = None


class QiitaTag(BaseModel):
    """Tag block of a Qiita item."""

    name: str


class QiitaItem(BaseModel):
    """Item from Qiita's /items endpoint."""

    id: str
    title: str
    url: str
    body: str = ""
    likes_count: int = 0
    stocks_count: int = 0
    comments_count: int = 0
    tags: List[QiitaTag] = Field(default_factory=list)
    user: QiitaUser
    created_at: str
    updated_at: Optional[str] = None


class ZennUser(BaseModel):
    """Author block of a Zenn article."""

    username: str
    name: Optional[str] = None
    avatar_small_url: Optional[str] = None


class ZennArticle(BaseModel):
    """Article from Zenn's /articles endpoint. The list API carries no tags."""

    id: int
    title: str
    slug: Optional[str] = None
    emoji: str = ""
    liked_count: int = 0
    article_type: Optional[str] = None
    published_at: str
    path: str
    user: ZennUser


class NoteUser(BaseModel):
    """Author block of a note search result."""

    id: Optional[Union[int, str]] = None
    urlname: Optional[str] = None
    nickname: Optional[str] = None
    name: Optional[str] = None
    user_profile_image_path: Optional[str] = None


class NoteArticle(BaseModel):
    """Note from note.com's unofficial search API."""

    id: Union[int, str]
    key: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    eyecatch: Optional[str] = None
    note_url: Optional[str] = Field(None, alias="noteUrl")
    price: Optional[int] = None
    like_count: Optional[int] = None
    comment_count: Optional[int] = None
    publish_at: Optional[str] = None
    created_at: Optional[str] = None
    hashtags: Optional[List[Any]] = None
    user: Optional[NoteUser] = None

    @property
    def is_free(self) -> bool:
        return not self.price


class HatenaEntry(BaseModel):
    """Entry normalized from a Hatena Blog RSS feed."""

    id: str = Field(..., description="Last path segment of the entry URL")
    title: str
    url: str
    description: str = ""
    content: str = ""
    published_at: datetime
    author_name: str
    author_url: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
