from datetime import timedelta

import httpx
import openai
import pytest
from conftest import NOW, make_sources

from trendfeed.analysis import (
    MockLLMProvider,
    OpenAIProvider,
    TrendAnalyzer,
    TrendInputArticle,
    build_provider,
    build_trend_batch,
)
from trendfeed.config import Config, ConfigModel
from trendfeed.errors import ConfigurationError, UpstreamError
from trendfeed.query import LiveArticle


def article(i, tags=("Python",)):
    return TrendInputArticle(
        title=f"Article {i}",
        description="About things",
        tags=list(tags),
        trend_score=10,
        likes_count=2,
        bookmarks_count=1,
    )


def test_empty_input_short_circuits():
    provider = MockLLMProvider()
    summary = TrendAnalyzer(provider).analyze([])

    assert summary.summary == ""
    assert provider.calls == []


def test_analyze_parses_provider_json():
    provider = MockLLMProvider(
        {
            "summary": "AI tooling dominates",
            "emergingTopics": ["MCP", "Agents"],
            "contentRecommendations": [
                {"title": "Build an agent", "description": "d", "keywords": ["ai"], "targetAudience": "Backend devs"}
            ],
        }
    )

    summary = TrendAnalyzer(provider).analyze([article(1), article(2, tags=("Python", "AI"))])

    assert summary.summary == "AI tooling dominates"
    assert summary.emerging_topics == ["MCP", "Agents"]
    assert summary.content_recommendations[0].target_audience == "Backend devs"
    prompt = provider.calls[0]
    assert "Articles: 2" in prompt
    assert "Total likes: 4" in prompt
    assert "Python(2), AI(1)" in prompt


def test_input_is_capped_at_100_articles():
    provider = MockLLMProvider()
    TrendAnalyzer(provider).analyze([article(i) for i in range(150)])
    assert "Articles: 100" in provider.calls[0]
    assert "Article 99\n" in provider.calls[0]
    assert "Article 100\n" not in provider.calls[0]


def test_response_wrapped_in_code_fence():
    summary = TrendAnalyzer(MockLLMProvider()).parse_response('```json\n{"summary": "ok"}\n```')
    assert summary.summary == "ok"


def test_unparseable_response():
    with pytest.raises(UpstreamError):
        TrendAnalyzer(MockLLMProvider()).parse_response("no json here")


def test_build_trend_batch():
    [source] = make_sources(("zenn",))
    live = LiveArticle(
        id="https://zenn.dev/a",
        external_id="1",
        media_source=source,
        title="T",
        url="https://zenn.dev/a",
        trend_score=5,
        author_name="a",
        author_id="a",
        published_at=NOW - timedelta(hours=1),
        tags=["Go"],
    )

    [item] = build_trend_batch([live])

    assert item.media_source_name == "Zenn"
    assert item.tags == ["Go"]
    assert item.url == "https://zenn.dev/a"


def test_missing_api_key_is_configuration_error(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        build_provider(Config(model=ConfigModel()))


def test_mock_provider_selected_by_config():
    config = Config(model=ConfigModel(llm={"provider": "mock"}))
    assert isinstance(build_provider(config), MockLLMProvider)


class FakeCompletions:
    def __init__(self, failures):
        self.failures = list(failures)
        self.calls = 0

    def create(self, **kwargs):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)

        class Message:
            content = '{"summary": "recovered"}'

        class Choice:
            message = Message()

        class Response:
            choices = [Choice()]
            usage = None

        return Response()


class FakeClient:
    def __init__(self, failures):
        self.completions = FakeCompletions(failures)
        self.chat = self


def status_error(code):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(code, request=request)
    return openai.APIStatusError("overloaded" if code == 503 else "bad request", response=response, body=None)


def test_openai_provider_retries_overload():
    client = FakeClient([status_error(503), status_error(503)])
    provider = OpenAIProvider(api_key="k", client=client, base_delay=0)

    assert provider.analyze_trends("prompt") == '{"summary": "recovered"}'
    assert client.completions.calls == 3


def test_openai_provider_gives_up_after_three_attempts():
    client = FakeClient([status_error(503)] * 3)
    provider = OpenAIProvider(api_key="k", client=client, base_delay=0)

    with pytest.raises(openai.APIStatusError):
        provider.analyze_trends("prompt")
    assert client.completions.calls == 3


def test_openai_provider_does_not_retry_other_errors():
    client = FakeClient([status_error(400)])
    provider = OpenAIProvider(api_key="k", client=client, base_delay=0)

    with pytest.raises(openai.APIStatusError):
        provider.analyze_trends("prompt")
    assert client.completions.calls == 1
