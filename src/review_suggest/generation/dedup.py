"""In-memory fingerprint cache that keeps suggestions from repeating."""

from __future__ import annotations

import hashlib
import logging
import time
from collections import OrderedDict
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_FINGERPRINT_LENGTH = 60
DEFAULT_MAX_ENTRIES = 20


def fingerprint(text: str, length: int = DEFAULT_FINGERPRINT_LENGTH) -> str:
    """Normalized, truncated hash of a suggestion.

    Lower-cases, drops everything but letters and digits, keeps the first
    ``length`` characters and hashes them. Catches exact repeats and
    variants that differ only in case, spacing, punctuation or tail.
    """
    normalized = "".join(ch for ch in text.strip().lower() if ch.isalnum())[:length]
    return hashlib.sha1(normalized.encode("utf-8")).hexdigest()[:16]


class FingerprintCache:
    """Per-business-key FIFO of recently shown suggestion fingerprints.

    Each key holds at most ``max_entries`` fingerprints; the oldest is evicted
    first. Entries older than ``ttl_seconds`` no longer count as duplicates.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        fingerprint_length: int = DEFAULT_FINGERPRINT_LENGTH,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries
        self.fingerprint_length = fingerprint_length
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # key -> fingerprint -> (text, recorded_at)
        self._entries: dict[str, OrderedDict[str, tuple[str, float]]] = {}

    def fingerprint(self, text: str) -> str:
        return fingerprint(text, self.fingerprint_length)

    def is_duplicate(self, candidate: str, business_key: str) -> bool:
        entries = self._entries.get(business_key)
        if not entries:
            return False
        hit = entries.get(self.fingerprint(candidate))
        return hit is not None and not self._expired(hit[1])

    def record(self, candidate: str, business_key: str) -> None:
        entries = self._entries.setdefault(business_key, OrderedDict())
        fp = self.fingerprint(candidate)
        entries.pop(fp, None)
        entries[fp] = (candidate, self._clock())
        while len(entries) > self.max_entries:
            entries.popitem(last=False)

    def recent(self, business_key: str, limit: int | None = None) -> list[str]:
        """Texts still retained for a key, newest first."""
        entries = self._entries.get(business_key)
        if not entries:
            return []
        texts = [text for text, at in reversed(entries.values()) if not self._expired(at)]
        return texts if limit is None else texts[:limit]

    def size(self) -> int:
        return sum(len(e) for e in self._entries.values())

    def clear(self) -> None:
        self._entries.clear()

    def _expired(self, recorded_at: float) -> bool:
        return self.ttl_seconds is not None and self._clock() - recorded_at > self.ttl_seconds
