"""Static category catalog.

The catalog is loaded once (from the bundled YAML file, or a file named by
settings) and never mutated afterwards, so it is safe to share between
concurrently handled requests.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Iterator

import yaml

from pocketbook.categorization.models import Category, CategoryGroup
from pocketbook.core.exceptions import GroupNotFoundError, UnknownCategoryError

logger = logging.getLogger(__name__)

BUNDLED_CATALOG = "categories.yaml"


def _sort_key(name: str) -> tuple[str, str]:
    return (name.casefold(), name)


class CategoryCatalog:
    """Ordered, read-only set of categories indexed by id, name and group."""

    def __init__(self, categories: Iterable[Category]):
        self._categories: tuple[Category, ...] = tuple(categories)
        self._by_id: dict[str, Category] = {}
        self._by_name: dict[str, Category] = {}
        groups: dict[str, list[Category]] = {}

        for category in self._categories:
            if category.id in self._by_id:
                raise ValueError(f"Duplicate category id in catalog: {category.id}")
            self._by_id[category.id] = category
            # First spelling wins if two groups reuse a name.
            self._by_name.setdefault(category.name.strip().casefold(), category)
            groups.setdefault(category.group.name, []).append(category)

        self._groups: dict[str, tuple[Category, ...]] = {
            name: tuple(sorted(members, key=lambda c: _sort_key(c.name)))
            for name, members in sorted(groups.items(), key=lambda item: _sort_key(item[0]))
        }

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "CategoryCatalog":
        """Build a catalog from the parsed YAML structure.

        Expected shape::

            groups:
              - id: ...
                name: ...
                categories:
                  - {id: ..., name: ...}
        """
        categories: list[Category] = []
        for group_data in data.get("groups") or []:
            group = CategoryGroup(id=str(group_data["id"]), name=str(group_data["name"]))
            for item in group_data.get("categories") or []:
                categories.append(Category(id=str(item["id"]), name=str(item["name"]), group=group))
        return cls(categories)

    @classmethod
    def from_yaml(cls, path: Path) -> "CategoryCatalog":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        catalog = cls.from_mapping(data)
        logger.info(
            "Loaded category catalog",
            extra={"path": str(path), "categories": len(catalog), "groups": len(catalog.group_names())},
        )
        return catalog

    def __len__(self) -> int:
        return len(self._categories)

    def __iter__(self) -> Iterator[Category]:
        return iter(self._categories)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id

    def all_categories(self) -> tuple[Category, ...]:
        """All categories in catalog order."""
        return self._categories

    def group_names(self) -> list[str]:
        """Group names, sorted alphabetically."""
        return list(self._groups)

    def categories_by_group(self, group_name: str) -> tuple[Category, ...]:
        """Categories of one group, sorted alphabetically by name.

        Raises:
            GroupNotFoundError: If the group name is not in the catalog
        """
        try:
            return self._groups[group_name]
        except KeyError:
            raise GroupNotFoundError(details={"group_name": group_name})

    def grouped(self) -> dict[str, list[Category]]:
        """Group name -> categories; both levels sorted alphabetically."""
        return {name: list(members) for name, members in self._groups.items()}

    def get(self, category_id: str) -> Category | None:
        return self._by_id.get(category_id)

    def require(self, category_id: str) -> Category:
        """Look up a category by id.

        Raises:
            UnknownCategoryError: If the id is not in the catalog
        """
        category = self._by_id.get(category_id)
        if category is None:
            raise UnknownCategoryError(details={"category_id": category_id})
        return category

    def find_by_name(self, name: str | None) -> Category | None:
        """Case-insensitive lookup by display name."""
        if not name:
            return None
        return self._by_name.get(name.strip().casefold())


@lru_cache
def load_default_catalog() -> CategoryCatalog:
    """Load the catalog bundled with the package (cached)."""
    source = resources.files("pocketbook.categorization").joinpath("data").joinpath(BUNDLED_CATALOG)
    with source.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return CategoryCatalog.from_mapping(data)


def load_catalog(path: Path | None = None) -> CategoryCatalog:
    """Load the catalog from path, or the bundled one when path is None."""
    if path is None:
        return load_default_catalog()
    return CategoryCatalog.from_yaml(path)
