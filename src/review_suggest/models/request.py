"""Pydantic models for review-suggestion requests."""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    ENTHUSIASTIC = "enthusiastic"


class GenerationRequest(BaseModel):
    """A single request for review suggestions for one business."""

    business_name: str = Field(min_length=1)
    business_category: str = "general"
    tone: Tone = Tone.PROFESSIONAL
    language: str = "English"
    count: int = Field(default=3, ge=1)

    @field_validator("business_name", "business_category", "language", mode="before")
    @classmethod
    def _strip(cls, value):
        # before length checks, so whitespace-only names are rejected
        return value.strip() if isinstance(value, str) else value

    @property
    def business_key(self) -> str:
        """Scope for deduplication and fallback rotation (name + category)."""
        return f"{_normalize(self.business_name)}::{_normalize(self.business_category)}"


def _normalize(value: str) -> str:
    return re.sub(r"\s+", " ", value.strip().lower())
