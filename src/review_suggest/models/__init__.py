"""Data models for review-suggestion generation."""

from review_suggest.models.category import BusinessCategory
from review_suggest.models.request import GenerationRequest, Tone
from review_suggest.models.result import SuggestionResult, SuggestionSource

__all__ = [
    "BusinessCategory",
    "GenerationRequest",
    "SuggestionResult",
    "SuggestionSource",
    "Tone",
]
