"""Static fallback suggestions, rotated per business key."""

from __future__ import annotations

import logging

from review_suggest.categories import CategoryCatalog

logger = logging.getLogger(__name__)


class FallbackLibrary:
    """Category-keyed pools of pre-written suggestions.

    Each business key keeps a cursor into its pool that advances by the
    number of suggestions handed out, so consecutive calls start where the
    previous one stopped and the same text is never shown twice in a row
    while the pool holds more than one entry.
    """

    def __init__(self, catalog: CategoryCatalog):
        self.catalog = catalog
        self._cursors: dict[str, int] = {}
        self._last: dict[str, str] = {}

    def pool(self, category: str | None) -> list[str]:
        return list(self.catalog.resolve(category).suggestions)

    def pick(self, category: str | None, count: int, business_key: str | None = None) -> list[str]:
        if count < 1:
            return []
        resolved = self.catalog.resolve(category)
        pool = list(resolved.suggestions)
        if count > len(pool) and resolved.id != self.catalog.default_id:
            pool += [s for s in self.catalog.default.suggestions if s not in pool]

        key = business_key or resolved.id
        start = self._cursors.get(key, 0) % len(pool)
        if len(pool) > 1 and pool[start] == self._last.get(key):
            start = (start + 1) % len(pool)
        next_start = start + count
        if len(pool) > 1 and next_start % len(pool) == start:
            # count is a multiple of the pool size; shift so the order changes
            next_start += 1
        self._cursors[key] = next_start
        picks = [pool[(start + i) % len(pool)] for i in range(count)]
        self._last[key] = picks[-1]
        logger.debug("Fallback pick for %s: %d from %s pool", key, len(picks), resolved.id)
        return picks
