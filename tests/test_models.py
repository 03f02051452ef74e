"""Tests for request and result models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from review_suggest.models.request import GenerationRequest, Tone
from review_suggest.models.result import SuggestionResult, SuggestionSource


class TestGenerationRequest:
    def test_defaults(self):
        request = GenerationRequest(business_name="Cafe Luna")
        assert request.tone is Tone.PROFESSIONAL
        assert request.language == "English"
        assert request.count == 3
        assert request.business_category == "general"

    def test_tone_from_string(self):
        request = GenerationRequest(business_name="Cafe Luna", tone="enthusiastic")
        assert request.tone is Tone.ENTHUSIASTIC

    def test_business_key_normalized(self):
        a = GenerationRequest(business_name="  Cafe   Luna ", business_category="Restaurant")
        b = GenerationRequest(business_name="cafe luna", business_category="restaurant")
        assert a.business_key == b.business_key == "cafe luna::restaurant"

    def test_business_key_includes_category(self):
        a = GenerationRequest(business_name="Acme", business_category="retail")
        b = GenerationRequest(business_name="Acme", business_category="hotel")
        assert a.business_key != b.business_key

    @pytest.mark.parametrize("count", [0, -1])
    def test_count_out_of_range(self, count):
        with pytest.raises(ValidationError):
            GenerationRequest(business_name="Acme", count=count)

    def test_large_count_accepted(self):
        assert GenerationRequest(business_name="Acme", count=12).count == 12

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            GenerationRequest(business_name="")

    @pytest.mark.parametrize("name", ["   ", "\t\n"])
    def test_whitespace_only_name_rejected(self, name):
        with pytest.raises(ValidationError):
            GenerationRequest(business_name=name)

    def test_unknown_tone_rejected(self):
        with pytest.raises(ValidationError):
            GenerationRequest(business_name="Acme", tone="sarcastic")


class TestSuggestionResult:
    def test_is_fallback(self):
        result = SuggestionResult(
            suggestions=["Great service and lovely people."],
            source=SuggestionSource.FALLBACK,
            business_key="acme::general",
            category="general",
            reason="RateLimited",
        )
        assert result.is_fallback
        assert result.source.value == "fallback"

    def test_live_defaults(self):
        result = SuggestionResult(
            suggestions=["Great service and lovely people."],
            source="live",
            business_key="acme::general",
            category="general",
        )
        assert not result.is_fallback
        assert result.reason is None
        assert result.attempts == 0
