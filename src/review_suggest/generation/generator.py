"""Live review-suggestion generation with retries and deduplication."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from review_suggest.categories import CategoryCatalog
from review_suggest.clients.llm_client import LLMClient
from review_suggest.config import GeneratorConfig, LLMConfig
from review_suggest.exceptions import (
    RETRYABLE_ERRORS,
    DuplicateSuggestions,
    FallbackError,
    GenerationError,
    RateLimited,
    UpstreamUnavailable,
)
from review_suggest.generation.dedup import FingerprintCache
from review_suggest.generation.parser import parse_suggestions
from review_suggest.generation.prompts import SYSTEM_PROMPT, build_prompt
from review_suggest.generation.rate_limiter import RateLimiter
from review_suggest.models.request import GenerationRequest

logger = logging.getLogger(__name__)


@dataclass
class GenerationOutcome:
    """Live suggestions plus the bookkeeping of how they were obtained."""

    suggestions: list[str]
    attempts: int
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    exhausted: bool = False  # retry budget ran out; may contain repeats


@dataclass
class _Batch:
    accepted: list[str] = field(default_factory=list)
    repeats: list[str] = field(default_factory=list)
    fingerprints: set[str] = field(default_factory=set)
    attempts: int = 0
    input_tokens: int = 0
    output_tokens: int = 0


class SuggestionGenerator:
    """Generate fresh suggestions for one business through the upstream LLM.

    Each attempt passes the rate-limit gate, asks for the suggestions still
    missing and drops candidates the dedup cache has already seen for the
    business key. Attempts are sequential and bounded by ``max_attempts``.
    """

    def __init__(
        self,
        llm: LLMClient | None,
        catalog: CategoryCatalog,
        dedup: FingerprintCache,
        rate_limiter: RateLimiter,
        llm_config: LLMConfig | None = None,
        config: GeneratorConfig | None = None,
    ):
        self.llm = llm
        self.catalog = catalog
        self.dedup = dedup
        self.rate_limiter = rate_limiter
        self.llm_config = llm_config or LLMConfig()
        self.config = config or GeneratorConfig()

    @property
    def enabled(self) -> bool:
        return self.llm is not None

    async def generate(self, request: GenerationRequest) -> GenerationOutcome:
        """Return live suggestions for ``request``.

        Raises:
            FallbackError: No usable live suggestion could be produced.
        """
        if self.llm is None:
            raise FallbackError(UpstreamUnavailable("no API credential configured"))

        batch = _Batch()
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_exponential(
                multiplier=self.config.backoff_multiplier,
                max=self.config.backoff_max,
            ),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await self._attempt(request, batch)
        except GenerationError as exc:
            if not (batch.accepted or batch.repeats):
                raise FallbackError(exc) from exc
            logger.info(
                "Returning %d suggestions for %s after %s on attempt %d",
                len(batch.accepted),
                request.business_key,
                type(exc).__name__,
                batch.attempts,
            )
            return self._outcome(request, batch, exhausted=True)

        return self._outcome(request, batch)

    async def _attempt(self, request: GenerationRequest, batch: _Batch) -> None:
        if not self.rate_limiter.can_proceed():
            raise RateLimited("request ceiling reached")
        self.rate_limiter.record_attempt()
        batch.attempts += 1

        key = request.business_key
        needed = request.count - len(batch.accepted)
        category = self.catalog.resolve(request.business_category)
        prompt = build_prompt(
            request,
            category,
            unrelated=self.catalog.unrelated_to(category),
            count=needed,
            avoid=self.dedup.recent(key, limit=self.config.avoid_recent) + batch.accepted,
        )

        try:
            response = await self.llm.generate(
                prompt=prompt,
                system=SYSTEM_PROMPT,
                model=self.llm_config.model,
                temperature=self.llm_config.temperature,
                max_tokens=self.llm_config.max_tokens,
            )
            batch.input_tokens += response.input_tokens
            batch.output_tokens += response.output_tokens
            candidates = parse_suggestions(response.text)
        except GenerationError as exc:
            logger.warning("Attempt %d for %s failed: %s", batch.attempts, key, exc)
            raise

        for candidate in candidates:
            if len(batch.accepted) >= request.count:
                break
            fp = self.dedup.fingerprint(candidate)
            if fp in batch.fingerprints:
                continue
            batch.fingerprints.add(fp)
            if self.dedup.is_duplicate(candidate, key):
                logger.debug("Rejected duplicate suggestion for %s", key)
                batch.repeats.append(candidate)
            else:
                batch.accepted.append(candidate)

        if len(batch.accepted) < request.count:
            raise DuplicateSuggestions(
                f"{len(batch.accepted)} of {request.count} novel suggestions after "
                f"attempt {batch.attempts}"
            )

    def _outcome(
        self, request: GenerationRequest, batch: _Batch, exhausted: bool = False
    ) -> GenerationOutcome:
        suggestions = list(batch.accepted)
        if exhausted:
            # Availability over novelty: top up with already-seen suggestions.
            missing = request.count - len(suggestions)
            suggestions += batch.repeats[:missing]
        return GenerationOutcome(
            suggestions=suggestions,
            attempts=batch.attempts,
            model=self.llm_config.model,
            input_tokens=batch.input_tokens,
            output_tokens=batch.output_tokens,
            exhausted=exhausted,
        )
