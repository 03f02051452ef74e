"""Pydantic model for a business category and its fallback pool."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BusinessCategory(BaseModel):
    id: str
    name: str
    aliases: list[str] = []
    keywords: list[str] = []      # hints embedded in the prompt
    suggestions: list[str] = Field(min_length=1)  # static fallback pool
