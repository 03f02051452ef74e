"""Tests for ReviewSuggestionService, the never-failing caller-facing layer."""

from __future__ import annotations

import asyncio
import sqlite3
from unittest.mock import ANY, AsyncMock, MagicMock, patch

import pytest

from review_suggest.clients.llm_client import LLMClient
from review_suggest.config import AppConfig, GeneratorConfig, LogConfig, RateLimitConfig
from review_suggest.exceptions import UpstreamTimeout
from review_suggest.logging.usage_store import GenerationLogStore
from review_suggest.models.request import GenerationRequest
from review_suggest.models.result import SuggestionSource
from review_suggest.service import build_service

from conftest import make_response


def _request(name: str = "Bright Smile Dental", category: str = "healthcare", count: int = 3):
    return GenerationRequest(business_name=name, business_category=category, count=count)


class TestFallbackScenarios:
    async def test_no_credential_serves_category_pool(self, make_service, catalog):
        service = make_service(llm=None)

        result = await service.generate(_request())

        assert result.source is SuggestionSource.FALLBACK
        assert result.reason == "UpstreamUnavailable"
        assert len(result.suggestions) == 3
        assert all(s.strip() for s in result.suggestions)
        assert set(result.suggestions) <= set(catalog.get("medical").suggestions)
        assert result.category == "medical"

    async def test_eleventh_call_in_a_minute_is_fallback(self, make_service, mock_llm_client):
        service = make_service(llm=mock_llm_client, max_per_minute=10)

        results = [await service.generate(_request()) for _ in range(11)]

        assert all(r.source is SuggestionSource.LIVE for r in results[:10])
        assert results[10].source is SuggestionSource.FALLBACK
        assert results[10].reason == "RateLimited"
        assert mock_llm_client.generate.await_count == 10

    async def test_gate_reopens_after_window(self, make_service, mock_llm_client, clock):
        service = make_service(llm=mock_llm_client, max_per_minute=1)
        await service.generate(_request())
        assert (await service.generate(_request())).is_fallback
        clock.advance(60)
        assert not (await service.generate(_request())).is_fallback

    async def test_timeouts_on_every_attempt_resolve_to_fallback(self, make_service):
        llm = AsyncMock(spec=LLMClient)
        llm.generate = AsyncMock(side_effect=UpstreamTimeout("request timed out"))
        service = make_service(llm=llm)

        result = await service.generate(_request())

        assert result.source is SuggestionSource.FALLBACK
        assert result.reason == "UpstreamTimeout"
        assert result.attempts == 0
        assert llm.generate.await_count == 3
        assert len(result.suggestions) == 3

    async def test_overall_timeout_abandons_call(self, make_service):
        async def _hang(*args, **kwargs):
            await asyncio.sleep(10)

        llm = AsyncMock(spec=LLMClient)
        llm.generate = AsyncMock(side_effect=_hang)
        service = make_service(
            llm=llm,
            config=GeneratorConfig(overall_timeout=0.05, backoff_multiplier=0, backoff_max=0),
        )

        result = await service.generate(_request())

        assert result.is_fallback
        assert result.reason == "UpstreamTimeout"

    async def test_unexpected_error_never_escapes(self, make_service):
        llm = AsyncMock(spec=LLMClient)
        llm.generate = AsyncMock(side_effect=RuntimeError("bug"))
        service = make_service(llm=llm)

        result = await service.generate(_request())

        assert result.is_fallback
        assert result.reason == "UnexpectedError"

    async def test_unknown_category_uses_default_pool(self, make_service, catalog):
        service = make_service(llm=None)
        result = await service.generate(_request(category="lunar tourism", count=5))
        assert result.category == "general"
        assert sorted(result.suggestions) == sorted(catalog.default.suggestions)


class TestLiveGeneration:
    async def test_live_result_diagnostics(self, make_service, mock_llm_client):
        service = make_service(llm=mock_llm_client)

        result = await service.generate(_request())

        assert result.source is SuggestionSource.LIVE
        assert result.reason is None
        assert result.attempts == 1
        assert result.model == "claude-haiku-4-5-20251001"
        assert len(result.suggestions) == 3
        assert result.elapsed_seconds >= 0

    async def test_repeated_calls_never_repeat(self, make_service):
        """Upstream keeps proposing a shared pool; the cache keeps each call fresh."""
        pool = [f"Review {i}: the team was kind, quick and thorough with every question." for i in range(12)]
        offset = {"n": 0}

        async def _generate(*args, **kwargs):
            start = offset["n"]
            offset["n"] += 1
            return make_response(pool[start : start + 4])

        llm = AsyncMock(spec=LLMClient)
        llm.generate = AsyncMock(side_effect=_generate)
        service = make_service(llm=llm)

        seen: list[str] = []
        for _ in range(3):
            result = await service.generate(_request())
            assert result.source is SuggestionSource.LIVE
            assert not set(result.suggestions) & set(seen)
            seen.extend(result.suggestions)

    async def test_returned_suggestions_are_recorded(self, make_service, mock_llm_client):
        service = make_service(llm=mock_llm_client)
        request = _request()
        result = await service.generate(request)
        dedup = service.generator.dedup
        assert all(dedup.is_duplicate(s, request.business_key) for s in result.suggestions)

    async def test_fallback_suggestions_are_recorded(self, make_service):
        service = make_service(llm=None)
        request = _request()
        result = await service.generate(request)
        assert service.status()["cache_size"] == len(result.suggestions)


class TestGenerateReviews:
    async def test_defaults(self, make_service):
        service = make_service(llm=None)
        reviews = await service.generate_reviews("Bright Smile Dental", "healthcare")
        assert len(reviews) == 3
        assert all(isinstance(r, str) and r for r in reviews)

    async def test_options(self, make_service, mock_llm_client):
        service = make_service(llm=mock_llm_client)
        reviews = await service.generate_reviews(
            "Cafe Luna",
            "restaurant",
            {"numberOfReviews": 2, "tone": "casual", "language": "Spanish"},
        )
        assert len(reviews) == 2
        prompt = mock_llm_client.generate.call_args.kwargs["prompt"]
        assert "Language: Spanish" in prompt
        assert "conversational" in prompt

    async def test_count_above_ten_resolves(self, make_service):
        service = make_service(llm=None)
        reviews = await service.generate_reviews("Cafe Luna", "restaurant", {"numberOfReviews": 12})
        assert len(reviews) == 12
        assert all(reviews)

    async def test_count_above_ten_live(self, make_service, mock_llm_client):
        service = make_service(llm=mock_llm_client)
        reviews = await service.generate_reviews("Cafe Luna", "restaurant", {"numberOfReviews": 12})
        assert len(reviews) == 12
        assert len(set(reviews)) == 12


class TestStatus:
    async def test_status_and_clear(self, make_service, mock_llm_client):
        service = make_service(llm=mock_llm_client)
        await service.generate(_request())

        status = service.status()
        assert status["enabled"] is True
        assert status["rate_limit"] == {"per_minute": 9, "per_hour": 99}
        assert status["cache_size"] == 3

        service.clear_cache()
        assert service.status()["cache_size"] == 0

    def test_disabled_without_client(self, make_service):
        assert make_service(llm=None).status()["enabled"] is False


class TestBuildService:
    def test_without_key_is_fallback_only(self):
        with patch("review_suggest.service.LLMClient") as mock_cls:
            service = build_service(AppConfig(), api_key=None)
        mock_cls.assert_not_called()
        assert service.generator.llm is None

    def test_with_key_disables_sdk_retries(self):
        with patch("review_suggest.service.LLMClient") as mock_cls:
            build_service(AppConfig(), api_key="secret")
        mock_cls.assert_called_once_with(api_key="secret", timeout=10.0, max_retries=0)

    def test_instances_are_independent(self):
        config = AppConfig(rate_limit=RateLimitConfig(max_per_minute=5))
        a = build_service(config)
        b = build_service(config)
        a.generator.rate_limiter.record_attempt()
        assert a.status()["rate_limit"]["per_minute"] == 4
        assert b.status()["rate_limit"]["per_minute"] == 5

    async def test_generation_log_written(self, tmp_path):
        db_path = tmp_path / "generations.db"
        config = AppConfig(log=LogConfig(enabled=True, db_path=str(db_path)))
        service = build_service(config)

        await service.generate(_request())

        logs = GenerationLogStore(db_path).get_logs()
        assert len(logs) == 1
        assert logs[0].source == "fallback"
        assert logs[0].reason == "UpstreamUnavailable"
        assert logs[0].suggestion_count == 3


@pytest.mark.parametrize("count", [1, 2, 5])
async def test_fallback_count_matches_request(make_service, count):
    service = make_service(llm=None)
    result = await service.generate(_request(category="salon", count=count))
    assert len(result.suggestions) == count


class TestGenerationLogWrites:
    async def test_log_write_runs_off_the_event_loop(self, make_service, tmp_path):
        service = make_service(llm=None)
        service.log_store = GenerationLogStore(tmp_path / "generations.db")

        with patch("review_suggest.service.asyncio.to_thread", wraps=asyncio.to_thread) as to_thread:
            await service.generate(_request())

        to_thread.assert_called_once_with(service.log_store.save_log, ANY)
        assert len(service.log_store.get_logs()) == 1

    async def test_log_write_failure_does_not_escape(self, make_service):
        service = make_service(llm=None)
        service.log_store = MagicMock(spec=GenerationLogStore)
        service.log_store.save_log.side_effect = sqlite3.OperationalError("database is locked")

        result = await service.generate(_request())

        assert result.is_fallback
        assert len(result.suggestions) == 3
