"""AI review suggestions with deduplication, rate limiting and static fallback."""

from review_suggest.models.request import GenerationRequest, Tone
from review_suggest.models.result import SuggestionResult, SuggestionSource
from review_suggest.service import ReviewSuggestionService, build_service

__version__ = "0.1.0"

__all__ = [
    "GenerationRequest",
    "ReviewSuggestionService",
    "SuggestionResult",
    "SuggestionSource",
    "Tone",
    "build_service",
]
