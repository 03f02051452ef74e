"""Shared test fixtures."""

from __future__ import annotations

import itertools
import json
from unittest.mock import AsyncMock

import pytest

from review_suggest.categories import load_catalog
from review_suggest.clients.llm_client import LLMClient, LLMResponse
from review_suggest.config import AppConfig, GeneratorConfig
from review_suggest.generation.dedup import FingerprintCache
from review_suggest.generation.fallback import FallbackLibrary
from review_suggest.generation.generator import SuggestionGenerator
from review_suggest.generation.rate_limiter import RateLimiter
from review_suggest.models.request import GenerationRequest
from review_suggest.service import ReviewSuggestionService

MODEL = "claude-haiku-4-5-20251001"


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 10_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(reviews: list[str] | str, input_tokens: int = 100, output_tokens: int = 50) -> LLMResponse:
    text = reviews if isinstance(reviews, str) else json.dumps(reviews)
    return LLMResponse(text=text, model=MODEL, input_tokens=input_tokens, output_tokens=output_tokens)


def unique_reviews():
    """side_effect for LLMClient.generate returning ten never-seen reviews per call."""
    counter = itertools.count(1)

    async def _generate(*args, **kwargs) -> LLMResponse:
        batch = next(counter)
        return make_response(
            [f"Visit number {batch}-{i} was wonderful, the staff went above and beyond." for i in range(10)]
        )

    return _generate


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def generator_config() -> GeneratorConfig:
    return GeneratorConfig(max_attempts=3, overall_timeout=5.0, backoff_multiplier=0, backoff_max=0)


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Mock LLM client producing fresh reviews on every call."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(side_effect=unique_reviews())
    return client


@pytest.fixture
def sample_request() -> GenerationRequest:
    return GenerationRequest(
        business_name="Bright Smile Dental",
        business_category="healthcare",
        count=3,
    )


@pytest.fixture
def make_service(catalog, clock, generator_config):
    """Factory for isolated services sharing the fake clock."""

    def _make(
        llm: LLMClient | None = None,
        max_per_minute: int = 10,
        max_per_hour: int = 100,
        config: GeneratorConfig | None = None,
    ) -> ReviewSuggestionService:
        gen_config = config or generator_config
        generator = SuggestionGenerator(
            llm=llm,
            catalog=catalog,
            dedup=FingerprintCache(max_entries=20, clock=clock),
            rate_limiter=RateLimiter(max_per_minute, max_per_hour, clock=clock),
            config=gen_config,
        )
        return ReviewSuggestionService(
            generator,
            FallbackLibrary(catalog),
            config=AppConfig(generator=gen_config),
        )

    return _make
