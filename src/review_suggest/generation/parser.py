"""Turn raw upstream text into a list of review suggestions."""

from __future__ import annotations

import logging
import re

from review_suggest.exceptions import EmptyResult, MalformedResponse
from review_suggest.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

MIN_LENGTH = 20
MAX_LENGTH = 500

_LIST_KEYS = ("reviews", "suggestions", "items", "results")
_TEXT_KEYS = ("text", "review", "suggestion", "content")
_BULLET = re.compile(r"^(?:\d+[.)]|[-*•>#]+)\s*")


def is_valid_suggestion(text: str) -> bool:
    return MIN_LENGTH <= len(text) <= MAX_LENGTH


def parse_suggestions(text: str) -> list[str]:
    """Extract suggestions, structured output first, line heuristics second.

    Raises:
        MalformedResponse: Nothing could be extracted at all.
        EmptyResult: Something was extracted but no entry passed the length filter.
    """
    if not text or not text.strip():
        raise MalformedResponse("empty response body")

    try:
        items = _from_structured(extract_json(text))
        logger.debug("Parsed %d structured suggestions", len(items))
    except ValueError:
        items = extract_lines(text)
        logger.debug("Structured parse failed, extracted %d lines", len(items))
        if not items:
            raise MalformedResponse(f"unparseable response: {text[:120]!r}") from None

    cleaned = [_clean(item) for item in items]
    valid = [s for s in cleaned if is_valid_suggestion(s)]
    if not valid:
        raise EmptyResult(f"no suggestion of {MIN_LENGTH}-{MAX_LENGTH} characters in response")
    return valid


def _from_structured(data) -> list[str]:
    if isinstance(data, str):
        return [data]
    if isinstance(data, dict):
        for key in _LIST_KEYS:
            if isinstance(data.get(key), list):
                return _from_structured(data[key])
        text = _text_of(data)
        if text is None:
            raise ValueError("JSON object holds no suggestion text")
        return [text]
    if isinstance(data, list):
        result = []
        for item in data:
            if isinstance(item, str):
                result.append(item)
            elif isinstance(item, dict):
                text = _text_of(item)
                if text is not None:
                    result.append(text)
        return result
    raise ValueError(f"unexpected JSON type {type(data).__name__}")


def _text_of(item: dict) -> str | None:
    for key in _TEXT_KEYS:
        if isinstance(item.get(key), str):
            return item[key]
    return None


def extract_lines(text: str) -> list[str]:
    """Line-based fallback: one suggestion per non-structural line."""
    lines = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith(("```", "{", "}", "[", "]")):
            continue
        line = _BULLET.sub("", line)
        line = _clean(line)
        if line.endswith(":"):
            # "Here are three reviews:" style preamble
            continue
        if line:
            lines.append(line)
    return lines


def _clean(text: str) -> str:
    text = text.strip().rstrip(",").strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1].strip()
    return re.sub(r"\s+", " ", text)
