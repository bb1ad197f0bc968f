"""Trend analysis over collected articles."""

from .llm_provider import LLMProvider, MockLLMProvider, OpenAIProvider
from .summarizer import (
    MAX_ARTICLES,
    ContentRecommendation,
    TrendAnalyzer,
    TrendInputArticle,
    TrendSummary,
    build_provider,
    build_trend_batch,
)

__all__ = [
    "MAX_ARTICLES",
    "LLMProvider",
    "OpenAIProvider",
    "MockLLMProvider",
    "ContentRecommendation",
    "TrendAnalyzer",
    "TrendInputArticle",
    "TrendSummary",
    "build_provider",
    "build_trend_batch",
]
