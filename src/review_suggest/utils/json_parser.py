"""Utility to extract JSON from LLM responses."""

from __future__ import annotations

import json


def extract_json(text: str) -> dict | list | str:
    """Extract JSON from an LLM response, preferring arrays.

    Tries in order:
    1. Direct json.loads on the full text
    2. Strip fenced code block markers and parse
    3. First '[' to last ']' (JSON array)
    4. First '{' to last '}' (JSON object)
    5. Repair a truncated array of strings (cut at the last complete string)
    """
    text = (text or "").strip()

    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    stripped = _strip_code_fences(text)
    if stripped != text:
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass
        text = stripped

    for opener, closer in (("[", "]"), ("{", "}")):
        result = _extract_between(text, opener, closer)
        if result is not None:
            return result

    result = _repair_truncated_array(text)
    if result is not None:
        return result

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")


def _strip_code_fences(text: str) -> str:
    """Remove markdown code fence markers from text."""
    lines = text.split("\n")

    # Drop any preamble before the opening fence (```json, ```, etc.)
    for i, line in enumerate(lines):
        if line.strip().startswith("```"):
            lines = lines[i + 1 :]
            break
    else:
        return text

    for i, line in enumerate(lines):
        if line.strip().startswith("```"):
            lines = lines[:i]
            break

    return "\n".join(lines).strip()


def _extract_between(text: str, opener: str, closer: str) -> dict | list | None:
    start = text.find(opener)
    end = text.rfind(closer)
    if start != -1 and end > start:
        try:
            return json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            pass
    return None


def _repair_truncated_array(text: str) -> list | None:
    """Close an array cut off by the token limit after its last full string."""
    start = text.find("[")
    if start == -1:
        return None

    candidate = text[start:]
    # Walk back over closing quotes until the prefix parses as an array.
    end = len(candidate)
    while True:
        end = candidate.rfind('"', 0, end)
        if end <= 0:
            return None
        try:
            result = json.loads(candidate[: end + 1] + "]")
        except json.JSONDecodeError:
            continue
        return result if isinstance(result, list) else None
