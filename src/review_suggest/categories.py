"""Business category catalog loaded from the packaged categories.yaml."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import yaml

from review_suggest.models.category import BusinessCategory

logger = logging.getLogger(__name__)

CATALOG_PATH = Path(__file__).parent / "data" / "categories.yaml"


def normalize_category(name: str) -> str:
    """Lower-case and drop everything but letters and digits."""
    return re.sub(r"[\W_]+", "", name.lower())


class CategoryCatalog:
    """Read-only lookup of business categories by id, name or alias."""

    def __init__(self, categories: list[BusinessCategory], default_id: str = "general"):
        self._by_id = {c.id: c for c in categories}
        if default_id not in self._by_id:
            raise ValueError(f"default category {default_id!r} is not defined")
        self.default_id = default_id
        self._index: dict[str, str] = {}
        for c in categories:
            for label in (c.id, c.name, *c.aliases):
                self._index.setdefault(normalize_category(label), c.id)

    @property
    def default(self) -> BusinessCategory:
        return self._by_id[self.default_id]

    def get(self, category_id: str) -> BusinessCategory | None:
        return self._by_id.get(category_id)

    def all(self) -> list[BusinessCategory]:
        return list(self._by_id.values())

    def resolve(self, name: str | None) -> BusinessCategory:
        """Map a free-form category label to a catalog entry.

        Unknown or empty labels resolve to the default category.
        """
        key = normalize_category(name or "")
        category_id = self._index.get(key)
        if category_id is None:
            logger.debug("Unknown category %r, using %s", name, self.default_id)
            return self.default
        return self._by_id[category_id]

    def unrelated_to(self, category: BusinessCategory) -> list[str]:
        """Display names of every other specific category."""
        return [
            c.name
            for c in self._by_id.values()
            if c.id not in (category.id, self.default_id)
        ]


def load_catalog(path: str | Path | None = None) -> CategoryCatalog:
    """Load the category catalog from YAML."""
    p = Path(path) if path is not None else CATALOG_PATH
    with open(p, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    categories = [BusinessCategory(**item) for item in data.get("categories", [])]
    return CategoryCatalog(categories, default_id=data.get("default", "general"))
