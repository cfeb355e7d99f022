"""Prompt construction and response parsing for the automatic strategy.

The model is asked for bare JSON, but replies often wrap it in prose or
code fences. Parsing therefore cuts from the first opening brace/bracket
to the last closing one before decoding, and every category name that
comes back is matched against the catalog (case-insensitively) before it
is trusted.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ValidationError

from pocketbook.categorization.catalog import CategoryCatalog
from pocketbook.categorization.models import (
    CategorizationMethod,
    CategorizationResult,
    CategorySuggestion,
)

logger = logging.getLogger(__name__)

PREAMBLE = "You are a financial transaction categorization expert for New Zealand."


class ModelCategoryReply(BaseModel):
    """Single-category reply."""

    category: str | None = None
    group: str | None = None
    confidence: float | None = None
    reason: str | None = None


class ModelSuggestionReply(BaseModel):
    """One entry of a suggestions reply."""

    category: str | None = None
    group: str | None = None
    score: float | None = None
    reason: str | None = None


def _catalog_json(catalog: CategoryCatalog) -> str:
    grouped = {
        group: [category.name for category in categories]
        for group, categories in catalog.grouped().items()
    }
    return json.dumps(grouped, indent=2)


def _transaction_lines(
    merchant_name: str, description: str | None, amount: Decimal | float | None
) -> list[str]:
    lines = [f"Merchant: {merchant_name}"]
    if description and description.strip():
        lines.append(f"Description: {description.strip()}")
    if amount is not None:
        lines.append(f"Amount: ${Decimal(str(amount)):.2f}")
    return lines


def build_category_prompt(
    merchant_name: str,
    description: str | None,
    amount: Decimal | float | None,
    catalog: CategoryCatalog,
) -> str:
    """Prompt asking for exactly one category as a JSON object."""
    lines = [
        PREAMBLE,
        "Analyze the following transaction and categorize it into ONE of the available categories.",
        "",
        *_transaction_lines(merchant_name, description, amount),
        "",
        "Available categories grouped by type:",
        _catalog_json(catalog),
        "",
        "IMPORTANT: Respond ONLY with a JSON object in this exact format:",
        "{",
        '  "category": "exact category name from the list",',
        '  "group": "group name that contains this category",',
        '  "confidence": 0.95,',
        '  "reason": "brief explanation"',
        "}",
        "",
        "Do NOT include any other text outside the JSON object.",
    ]
    return "\n".join(lines) + "\n"


def build_suggestions_prompt(
    merchant_name: str,
    description: str | None,
    amount: Decimal | float | None,
    catalog: CategoryCatalog,
    max_count: int,
) -> str:
    """Prompt asking for a ranked JSON array of up to max_count categories."""
    lines = [
        PREAMBLE,
        f"Analyze the following transaction and suggest the top {max_count} most likely categories.",
        "",
        *_transaction_lines(merchant_name, description, amount),
        "",
        "Available categories grouped by type:",
        _catalog_json(catalog),
        "",
        f"IMPORTANT: Respond ONLY with a JSON array of the top {max_count} suggestions in this exact format:",
        "[",
        "  {",
        '    "category": "exact category name from the list",',
        '    "group": "group name that contains this category",',
        '    "score": 0.95,',
        '    "reason": "brief explanation"',
        "  }",
        "]",
        "",
        "Order suggestions from most likely to least likely. "
        "Do NOT include any other text outside the JSON array.",
    ]
    return "\n".join(lines) + "\n"


def _slice_between(text: str, opening: str, closing: str) -> str | None:
    start = text.find(opening)
    end = text.rfind(closing)
    if start == -1 or end == -1 or end < start:
        return None
    return text[start : end + 1]


def _lower_keys(item: Any) -> Any:
    if isinstance(item, dict):
        return {str(key).lower(): value for key, value in item.items()}
    return item


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Decode the outermost {...} in text, or None."""
    fragment = _slice_between(text or "", "{", "}")
    if fragment is None:
        return None
    try:
        decoded = json.loads(fragment)
    except json.JSONDecodeError:
        return None
    return _lower_keys(decoded) if isinstance(decoded, dict) else None


def extract_json_array(text: str) -> list[Any] | None:
    """Decode the outermost [...] in text, or None."""
    fragment = _slice_between(text or "", "[", "]")
    if fragment is None:
        return None
    try:
        decoded = json.loads(fragment)
    except json.JSONDecodeError:
        return None
    return [_lower_keys(item) for item in decoded] if isinstance(decoded, list) else None


def parse_category_response(
    response: str, catalog: CategoryCatalog
) -> CategorizationResult | None:
    """Turn a single-category reply into a result, or None if unusable."""
    payload = extract_json_object(response)
    if payload is None:
        logger.warning("No JSON object found in categorization response")
        return None

    try:
        reply = ModelCategoryReply.model_validate(payload)
    except ValidationError:
        logger.warning("Categorization response did not match the expected shape")
        return None

    category = catalog.find_by_name(reply.category)
    if category is None:
        logger.warning(
            "Suggested category not in catalog", extra={"suggested_category": reply.category}
        )
        return None

    return CategorizationResult.from_category(
        category, confidence=reply.confidence, method=CategorizationMethod.AUTOMATIC
    )


def parse_suggestions_response(
    response: str, catalog: CategoryCatalog, max_count: int
) -> list[CategorySuggestion]:
    """Turn a suggestions reply into at most max_count suggestions, best first.

    Entries naming unknown categories are dropped. Duplicate categories keep
    their first occurrence.
    """
    items = extract_json_array(response)
    if items is None:
        logger.warning("No JSON array found in suggestions response")
        return []

    suggestions: list[CategorySuggestion] = []
    seen: set[str] = set()
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            reply = ModelSuggestionReply.model_validate(item)
        except ValidationError:
            continue

        category = catalog.find_by_name(reply.category)
        if category is None:
            logger.warning(
                "Suggested category not in catalog", extra={"suggested_category": reply.category}
            )
            continue
        if category.id in seen:
            continue
        seen.add(category.id)
        suggestions.append(CategorySuggestion.from_category(category, reply.score, reply.reason or ""))

    # Stable sort keeps the model's order among equal scores.
    suggestions.sort(key=lambda s: s.score, reverse=True)
    return suggestions[: max(max_count, 0)]
