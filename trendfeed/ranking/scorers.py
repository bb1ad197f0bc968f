"""Trend scoring for collected articles."""

import math
from datetime import datetime
from typing import Optional

import pendulum

LIKE_WEIGHT = 2
BOOKMARK_WEIGHT = 3
COMMENT_WEIGHT = 1
HOURLY_DECAY = 0.1

# Feeds without engagement counters rank on freshness alone.
RECENCY_BASE = 100
RECENCY_HOURLY_DECAY = 0.5


def _as_utc(value: datetime) -> pendulum.DateTime:
    """Convert a datetime to an aware UTC pendulum instance; naive means UTC."""
    if value.tzinfo is None:
        return pendulum.instance(value, tz="UTC")
    return pendulum.instance(value).in_timezone("UTC")


def hours_since(published_at: datetime, now: Optional[datetime] = None) -> float:
    """Hours elapsed between publication and now (negative for future dates)."""
    current = _as_utc(now) if now is not None else pendulum.now("UTC")
    return (current - _as_utc(published_at)).total_seconds() / 3600


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, like JavaScript's Math.round."""
    return math.floor(value + 0.5)


def calculate_trend_score(
    likes: int,
    bookmarks: int,
    comments: int,
    published_at: datetime,
    now: Optional[datetime] = None,
) -> int:
    """
    Score an article by engagement with a mild linear time decay.

    Bookmarks weigh more than likes; every hour since publication costs 0.1.

    Returns:
        Non-negative integer score
    """
    score = (
        likes * LIKE_WEIGHT
        + bookmarks * BOOKMARK_WEIGHT
        + comments * COMMENT_WEIGHT
        - hours_since(published_at, now) * HOURLY_DECAY
    )
    return max(0, round_half_up(score))


def calculate_recency_score(
    published_at: datetime,
    now: Optional[datetime] = None,
) -> int:
    """Score by freshness only: 100 minus half a point per hour, floored at 0."""
    score = RECENCY_BASE - hours_since(published_at, now) * RECENCY_HOURLY_DECAY
    return max(0, math.floor(score))
