"""Domain types for merchant categorization."""

import math
from dataclasses import dataclass, replace
from enum import Enum


class CategorizationMethod(str, Enum):
    """How a categorization result was produced."""

    AUTOMATIC = "automatic"
    MANUAL = "manual"
    HYBRID = "hybrid"
    CACHED = "cached"


@dataclass(frozen=True)
class CategoryGroup:
    id: str
    name: str


@dataclass(frozen=True)
class Category:
    """A catalog entry. Immutable once loaded."""

    id: str
    name: str
    group: CategoryGroup


@dataclass(frozen=True)
class CategorizationResult:
    """Outcome of categorizing one merchant."""

    category_id: str
    category_name: str
    group_id: str
    group_name: str
    confidence: float
    method: CategorizationMethod

    @classmethod
    def from_category(
        cls, category: Category, confidence: float | None, method: CategorizationMethod
    ) -> "CategorizationResult":
        return cls(
            category_id=category.id,
            category_name=category.name,
            group_id=category.group.id,
            group_name=category.group.name,
            confidence=clamp_score(confidence),
            method=method,
        )

    def with_method(self, method: CategorizationMethod) -> "CategorizationResult":
        return replace(self, method=method)


@dataclass(frozen=True)
class CategorySuggestion:
    """A candidate category with a relevance score. Never persisted."""

    category_id: str
    category_name: str
    group_id: str
    group_name: str
    score: float
    reason: str = ""

    @classmethod
    def from_category(
        cls, category: Category, score: float | None, reason: str = ""
    ) -> "CategorySuggestion":
        return cls(
            category_id=category.id,
            category_name=category.name,
            group_id=category.group.id,
            group_name=category.group.name,
            score=clamp_score(score),
            reason=reason,
        )


def clamp_score(value: float | None) -> float:
    """Clamp a model-reported score into [0.0, 1.0]; missing or non-finite scores become 0.0."""
    if value is None:
        return 0.0
    value = float(value)
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(1.0, value))
