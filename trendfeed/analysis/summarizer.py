"""Trend summaries of the current article feed."""

import json
import logging
import re
from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional

import pendulum
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config import Config
from ..errors import ConfigurationError, UpstreamError
from ..query.filters import LiveArticle
from .llm_provider import LLMProvider, MockLLMProvider, OpenAIProvider

logger = logging.getLogger(__name__)

MAX_ARTICLES = 100
TOP_TAGS = 20
DESCRIPTION_PREVIEW = 150

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class TrendInputArticle(BaseModel):
    """Article fields the analysis looks at."""

    title: str
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    trend_score: int = 0
    likes_count: int = 0
    bookmarks_count: int = 0
    url: Optional[str] = None
    media_source_name: Optional[str] = None


class ContentRecommendation(BaseModel):
    """Suggested educational content derived from the trends."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = ""
    keywords: List[str] = Field(default_factory=list)
    target_audience: str = Field("", alias="targetAudience")


class TrendSummary(BaseModel):
    """Result of one trend analysis."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str = ""
    emerging_topics: List[str] = Field(default_factory=list, alias="emergingTopics")
    content_recommendations: List[ContentRecommendation] = Field(
        default_factory=list, alias="contentRecommendations"
    )
    analyzed_at: datetime = Field(default_factory=lambda: pendulum.now("UTC"))


def build_trend_batch(articles: Iterable[LiveArticle]) -> List[TrendInputArticle]:
    """Project live articles onto the analysis input."""
    return [
        TrendInputArticle(
            title=a.title,
            description=a.description,
            tags=list(a.tags),
            trend_score=a.trend_score,
            likes_count=a.likes_count,
            bookmarks_count=a.bookmarks_count,
            url=a.url,
            media_source_name=a.media_source.display_name,
        )
        for a in articles
    ]


def build_provider(config: Config) -> LLMProvider:
    """Create the configured LLM provider."""
    llm_config = config.get_llm_config()
    provider = llm_config.get("provider")

    if provider == "mock":
        return MockLLMProvider()
    if provider != "openai":
        raise ConfigurationError(f"Unknown LLM provider: {provider}")

    api_key = llm_config.get("api_key")
    if not api_key:
        raise ConfigurationError(f"{llm_config.get('api_key_env') or 'LLM API key'} is not set")

    return OpenAIProvider(
        api_key=api_key,
        model=llm_config.get("model", "gpt-4o-mini"),
        base_url=llm_config.get("base_url"),
    )


class TrendAnalyzer:
    """Summarize what the current articles say about technology trends."""

    def __init__(self, llm_provider: LLMProvider) -> None:
        self.llm_provider = llm_provider

    def _format_article(self, index: int, article: TrendInputArticle) -> str:
        tags = f"[{', '.join(article.tags)}]" if article.tags else ""
        lines = [f"{index}. {article.title}"]
        if article.description:
            lines.append(f"   Description: {article.description[:DESCRIPTION_PREVIEW]}")
        lines.append(f"   Tags: {tags}")
        lines.append(
            f"   Engagement: likes={article.likes_count} "
            f"bookmarks={article.bookmarks_count} score={article.trend_score}"
        )
        return "\n".join(lines)

    def build_prompt(self, articles: List[TrendInputArticle]) -> str:
        """Prompt with aggregate statistics followed by the article list."""
        total_likes = sum(a.likes_count for a in articles)
        total_bookmarks = sum(a.bookmarks_count for a in articles)
        avg_score = sum(a.trend_score for a in articles) / len(articles)

        tag_frequency = Counter(tag for a in articles for tag in a.tags)
        top_tags = ", ".join(f"{tag}({count})" for tag, count in tag_frequency.most_common(TOP_TAGS))

        articles_text = "\n\n".join(
            self._format_article(i, a) for i, a in enumerate(articles, start=1)
        )

        return f"""You are an expert in technology trend analysis. Analyze the following technical articles and identify the current technology trends.

Dataset:
- Articles: {len(articles)}
- Total likes: {total_likes}
- Total bookmarks: {total_bookmarks}
- Average trend score: {round(avg_score)}
- Top tags (up to {TOP_TAGS}): {top_tags}

Articles:
{articles_text}

Instructions:
1. Weigh titles, descriptions, tags and engagement together
2. Look past keyword frequency to what readers are actually engaging with
3. Identify emerging technologies and fast-growing areas
4. Recommend educational content topics for engineers based on the trends

Return JSON in this format:
{{
  "summary": "Overall trend summary (3-5 sentences)",
  "emergingTopics": ["topic 1", "topic 2", "..."],
  "contentRecommendations": [
    {{
      "title": "Content title",
      "description": "Why this topic matters now and what it would cover (2-3 sentences)",
      "keywords": ["keyword 1", "keyword 2"],
      "targetAudience": "Intended audience"
    }}
  ]
}}

Return only JSON."""

    def parse_response(self, text: str) -> TrendSummary:
        """Extract the JSON object from model output."""
        match = _JSON_OBJECT.search(text or "")
        if not match:
            raise UpstreamError("llm", "Analysis response contained no JSON object")
        try:
            return TrendSummary.model_validate(json.loads(match.group(0)))
        except (ValueError, ValidationError) as e:
            raise UpstreamError("llm", f"Unparseable analysis response: {e}") from e

    def analyze(self, articles: List[TrendInputArticle]) -> TrendSummary:
        """
        Analyze up to the first 100 articles.

        Returns:
            Trend summary; empty when there are no articles
        """
        sample = articles[:MAX_ARTICLES]
        if not sample:
            return TrendSummary()

        logger.info("Analyzing trends across %d articles", len(sample))
        text = self.llm_provider.analyze_trends(self.build_prompt(sample))
        return self.parse_response(text)
