"""Generation log data models."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class GenerationLog(BaseModel):
    """One served suggestion request."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=datetime.now)
    business_key: str
    category: str
    source: str  # "live" | "fallback"
    reason: str | None = None  # e.g. "RateLimited", "UpstreamTimeout"
    attempts: int = 0
    suggestion_count: int = 0
    elapsed_seconds: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0
    estimated_cost_usd: float = 0.0
