"""Caller-facing review-suggestion service.

``ReviewSuggestionService.generate`` never raises for upstream trouble: a
missing credential, a closed rate-limit gate, upstream errors, unparseable
output and the overall timeout all end in suggestions from the fallback
library. Which path served each request is logged for operators.
"""

from __future__ import annotations

import asyncio
import logging
import time

from review_suggest.categories import CategoryCatalog, load_catalog
from review_suggest.clients.llm_client import LLMClient
from review_suggest.config import AppConfig
from review_suggest.exceptions import FallbackError
from review_suggest.generation.dedup import FingerprintCache
from review_suggest.generation.fallback import FallbackLibrary
from review_suggest.generation.generator import SuggestionGenerator
from review_suggest.generation.rate_limiter import RateLimiter
from review_suggest.logging.cost_calculator import calculate_cost
from review_suggest.logging.models import GenerationLog
from review_suggest.logging.usage_store import GenerationLogStore
from review_suggest.models.request import GenerationRequest
from review_suggest.models.result import SuggestionResult, SuggestionSource

logger = logging.getLogger(__name__)


class ReviewSuggestionService:
    """Generate review suggestions, degrading silently to static content."""

    def __init__(
        self,
        generator: SuggestionGenerator,
        fallback: FallbackLibrary,
        config: AppConfig | None = None,
        log_store: GenerationLogStore | None = None,
    ):
        self.generator = generator
        self.fallback = fallback
        self.config = config or AppConfig()
        self.log_store = log_store

    @property
    def catalog(self) -> CategoryCatalog:
        return self.generator.catalog

    async def generate(self, request: GenerationRequest) -> SuggestionResult:
        """Return at least one suggestion for ``request``; never raises."""
        start = time.monotonic()
        category = self.catalog.resolve(request.business_category)
        reason: str | None = None
        outcome = None

        try:
            outcome = await asyncio.wait_for(
                self.generator.generate(request),
                timeout=self.config.generator.overall_timeout,
            )
        except FallbackError as exc:
            reason = exc.reason_name
        except asyncio.TimeoutError:
            logger.warning(
                "Generation for %s exceeded %.1fs",
                request.business_key,
                self.config.generator.overall_timeout,
            )
            reason = "UpstreamTimeout"
        except Exception:
            logger.exception("Unexpected error generating suggestions for %s", request.business_key)
            reason = "UnexpectedError"

        if outcome is not None and outcome.suggestions:
            result = SuggestionResult(
                suggestions=outcome.suggestions,
                source=SuggestionSource.LIVE,
                business_key=request.business_key,
                category=category.id,
                attempts=outcome.attempts,
                model=outcome.model,
                input_tokens=outcome.input_tokens,
                output_tokens=outcome.output_tokens,
            )
        else:
            result = SuggestionResult(
                suggestions=self.fallback.pick(
                    request.business_category, request.count, business_key=request.business_key
                ),
                source=SuggestionSource.FALLBACK,
                business_key=request.business_key,
                category=category.id,
                reason=reason or "EmptyResult",
                attempts=outcome.attempts if outcome is not None else 0,
            )

        for suggestion in result.suggestions:
            self.generator.dedup.record(suggestion, request.business_key)
        result.elapsed_seconds = time.monotonic() - start

        logger.info(
            "Served %d %s suggestions for %s (reason=%s, attempts=%d, %.2fs)",
            len(result.suggestions),
            result.source.value,
            result.business_key,
            result.reason,
            result.attempts,
            result.elapsed_seconds,
        )
        await self._save_log(result)
        return result

    async def generate_reviews(
        self,
        business_name: str,
        business_category: str,
        options: dict | None = None,
    ) -> list[str]:
        """Suggestion strings for a business.

        ``options`` may hold ``numberOfReviews``, ``tone`` and ``language``;
        unset options take the configured defaults.
        """
        options = options or {}
        defaults = self.config.generator
        request = GenerationRequest(
            business_name=business_name,
            business_category=business_category,
            count=options.get("numberOfReviews", defaults.default_count),
            tone=options.get("tone", defaults.default_tone),
            language=options.get("language", defaults.default_language),
        )
        result = await self.generate(request)
        return result.suggestions

    def status(self) -> dict:
        return {
            "enabled": self.generator.enabled,
            "rate_limit": self.generator.rate_limiter.remaining(),
            "cache_size": self.generator.dedup.size(),
        }

    def clear_cache(self) -> None:
        self.generator.dedup.clear()
        logger.info("Suggestion fingerprint cache cleared")

    async def _save_log(self, result: SuggestionResult) -> None:
        if self.log_store is None:
            return
        cost = 0.0
        if result.model:
            cost = calculate_cost([(result.model, result.input_tokens, result.output_tokens)])
        log = GenerationLog(
            business_key=result.business_key,
            category=result.category,
            source=result.source.value,
            reason=result.reason,
            attempts=result.attempts,
            suggestion_count=len(result.suggestions),
            elapsed_seconds=result.elapsed_seconds,
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
            estimated_cost_usd=cost,
        )
        try:
            await asyncio.to_thread(self.log_store.save_log, log)
        except Exception:
            logger.exception("Failed to persist generation log")


def build_service(
    config: AppConfig | None = None,
    api_key: str | None = None,
    catalog: CategoryCatalog | None = None,
) -> ReviewSuggestionService:
    """Wire an independent service instance.

    Without ``api_key`` the service runs fallback-only. Every instance owns
    its rate limiter and fingerprint cache.
    """
    config = config or AppConfig()
    catalog = catalog or load_catalog()
    llm = None
    if api_key:
        llm = LLMClient(api_key=api_key, timeout=config.llm.timeout, max_retries=0)
    else:
        logger.warning("No API key configured, serving fallback suggestions only")

    generator = SuggestionGenerator(
        llm=llm,
        catalog=catalog,
        dedup=FingerprintCache(
            max_entries=config.dedup.max_entries_per_key,
            fingerprint_length=config.dedup.fingerprint_length,
            ttl_seconds=config.rate_limit.cache_duration_seconds,
        ),
        rate_limiter=RateLimiter(
            max_per_minute=config.rate_limit.max_per_minute,
            max_per_hour=config.rate_limit.max_per_hour,
        ),
        llm_config=config.llm,
        config=config.generator,
    )
    log_store = None
    if config.log.enabled:
        log_store = GenerationLogStore(config.log.resolved_db_path)
    return ReviewSuggestionService(
        generator,
        FallbackLibrary(catalog),
        config=config,
        log_store=log_store,
    )
