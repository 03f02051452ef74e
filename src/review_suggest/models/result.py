"""Pydantic models for review-suggestion results."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class SuggestionSource(str, Enum):
    LIVE = "live"
    FALLBACK = "fallback"


class SuggestionResult(BaseModel):
    """Suggestions handed back to the caller plus operator diagnostics."""

    suggestions: list[str]
    source: SuggestionSource
    business_key: str
    category: str                 # resolved catalog id
    reason: str | None = None     # error class name when source is fallback
    attempts: int = 0             # upstream calls made
    model: str | None = None
    input_tokens: int = 0
    output_tokens: int = 0
    elapsed_seconds: float = 0.0

    @property
    def is_fallback(self) -> bool:
        return self.source is SuggestionSource.FALLBACK
