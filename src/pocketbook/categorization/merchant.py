"""Merchant identity used to index merchant memory."""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")


def normalize_merchant(text: str | None) -> str:
    """Normalize a merchant/description string into a stable key.

    Trims, collapses internal whitespace and upper-cases, so "Starbucks",
    " STARBUCKS " and "starbucks" share a key. This is an exact-match key,
    not fuzzy matching.
    """
    return _WHITESPACE.sub(" ", (text or "").strip()).upper()


def merchant_key_for(merchant_name: str | None, description: str | None = None) -> str:
    """Key for a transaction: the merchant name, else the description.

    Returns an empty string when neither yields anything.
    """
    key = normalize_merchant(merchant_name)
    if key:
        return key
    return normalize_merchant(description)
