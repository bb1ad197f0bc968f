"""LLM provider interface and implementations."""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import openai
from openai import OpenAI

logger = logging.getLogger(__name__)

OVERLOAD_STATUS_CODES = (503, 529)


def is_overloaded(error: Exception) -> bool:
    """Whether an API error means the model is temporarily overloaded."""
    if isinstance(error, openai.APIStatusError) and error.status_code in OVERLOAD_STATUS_CODES:
        return True
    message = str(error)
    return "503" in message or "Service Unavailable" in message or "overloaded" in message


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def analyze_trends(self, prompt: str) -> str:
        """
        Run a trend analysis prompt.

        Args:
            prompt: Full analysis prompt

        Returns:
            Raw model output, expected to contain a JSON object
        """
        pass

    @abstractmethod
    def get_usage_stats(self) -> Dict:
        """Get usage statistics."""
        pass


class OpenAIProvider(LLMProvider):
    """OpenAI implementation of LLM provider."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        max_retries: int = 3,
        base_delay: float = 1.0,
        client: Optional[OpenAI] = None,
    ) -> None:
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Model name to use
            base_url: Custom base URL (for testing)
            max_retries: Attempts made when the model is overloaded
            base_delay: First backoff delay in seconds, doubled per attempt
        """
        # Retries are handled here so that only overload errors are retried.
        self.client = client or OpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        self.model = model
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.total_tokens = 0
        self.api_calls = 0

    def _complete(self, prompt: str) -> str:
        self.api_calls += 1
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.4,
            response_format={"type": "json_object"},
        )

        if response.usage:
            self.total_tokens += response.usage.total_tokens

        return (response.choices[0].message.content or "").strip()

    def analyze_trends(self, prompt: str) -> str:
        """Run the prompt, backing off exponentially while the model is overloaded."""
        for attempt in range(self.max_retries):
            try:
                return self._complete(prompt)
            except openai.OpenAIError as e:
                if not is_overloaded(e) or attempt == self.max_retries - 1:
                    raise
                delay = self.base_delay * (2 ** attempt)
                logger.warning(
                    "Model overloaded, retrying in %.1fs (attempt %d/%d)",
                    delay,
                    attempt + 1,
                    self.max_retries,
                )
                time.sleep(delay)
        raise RuntimeError("Max retries exceeded")

    def get_usage_stats(self) -> Dict:
        """Get usage statistics."""
        return {
            "total_tokens": self.total_tokens,
            "api_calls": self.api_calls,
            "model": self.model,
        }


class MockLLMProvider(LLMProvider):
    """Mock LLM provider for testing."""

    def __init__(self, response: Optional[Dict] = None) -> None:
        """Initialize mock provider."""
        self.calls: List[str] = []
        self.response = response

    def analyze_trends(self, prompt: str) -> str:
        """Mock trend analysis."""
        self.calls.append(prompt)

        if self.response is not None:
            return json.dumps(self.response, ensure_ascii=False)

        return json.dumps(
            {
                "summary": "Mock trend summary",
                "emergingTopics": ["Mock topic"],
                "contentRecommendations": [
                    {
                        "title": "Mock recommendation",
                        "description": "Mock description",
                        "keywords": ["mock"],
                        "targetAudience": "Developers",
                    }
                ],
            }
        )

    def get_usage_stats(self) -> Dict:
        """Get mock usage statistics."""
        return {
            "total_tokens": len(self.calls) * 100,
            "api_calls": len(self.calls),
            "model": "mock",
        }
