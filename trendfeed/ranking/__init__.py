"""Article trend scoring."""

from .scorers import (
    calculate_recency_score,
    calculate_trend_score,
    hours_since,
    round_half_up,
)

__all__ = [
    "calculate_recency_score",
    "calculate_trend_score",
    "hours_since",
    "round_half_up",
]
