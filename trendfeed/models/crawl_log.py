"""Crawl log models for auditing collection runs."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import DBModel


class CrawlStatus(str, Enum):
    """Outcome of collecting from one source."""

    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"


class CrawlLog(DBModel):
    """One row per source per collection cycle. Never updated."""

    media_source_id: int = Field(..., description="Foreign key to media_sources table")
    status: CrawlStatus = Field(..., description="Collection outcome")
    articles_collected: int = Field(0, description="Articles stored during the run")
    error_message: Optional[str] = Field(None, description="Error message if failed")
    started_at: datetime = Field(..., description="When collection started")
    completed_at: Optional[datetime] = Field(None, description="When collection finished")
