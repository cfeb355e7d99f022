"""Categorization strategies.

Two variants share one interface:
- AutomaticStrategy asks the text-generation backend and validates every
  reply against the catalog.
- HybridStrategy never decides on its own: its single proposal is the
  top automatic suggestion, relabeled.

Backend failures stop here. A strategy returns None (or an empty list)
instead of raising, so categorization never blocks the caller.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from decimal import Decimal

from pocketbook.categorization.backend import TextGenerationBackend
from pocketbook.categorization.catalog import CategoryCatalog
from pocketbook.categorization.models import (
    CategorizationMethod,
    CategorizationResult,
    CategorySuggestion,
)
from pocketbook.categorization.prompts import (
    build_category_prompt,
    build_suggestions_prompt,
    parse_category_response,
    parse_suggestions_response,
)
from pocketbook.core.exceptions import BackendUnavailableError

logger = logging.getLogger(__name__)

Amount = Decimal | float | None


class CategorizationStrategy(ABC):
    """Proposes categories for a merchant from a catalog."""

    method: CategorizationMethod

    @abstractmethod
    async def propose_category(
        self,
        merchant_name: str,
        description: str | None,
        amount: Amount,
        catalog: CategoryCatalog,
    ) -> CategorizationResult | None:
        """Return one category, or None if nothing usable was produced."""

    @abstractmethod
    async def propose_suggestions(
        self,
        merchant_name: str,
        description: str | None,
        amount: Amount,
        catalog: CategoryCatalog,
        max_count: int,
    ) -> list[CategorySuggestion]:
        """Return at most max_count suggestions, best first."""


class AutomaticStrategy(CategorizationStrategy):
    """Ask the text-generation backend, then validate against the catalog."""

    method = CategorizationMethod.AUTOMATIC

    def __init__(self, backend: TextGenerationBackend, timeout_seconds: float | None = 30.0):
        """
        Args:
            backend: Text-generation backend
            timeout_seconds: Per-call cap; None disables it
        """
        self.backend = backend
        self.timeout_seconds = timeout_seconds

    async def _generate(self, prompt: str, purpose: str) -> str | None:
        """Run one backend call. Any failure becomes None."""
        try:
            if self.timeout_seconds is None:
                return await self.backend.generate(prompt)
            return await asyncio.wait_for(self.backend.generate(prompt), self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "Text-generation backend timed out",
                extra={"purpose": purpose, "timeout_seconds": self.timeout_seconds},
            )
        except BackendUnavailableError:
            logger.warning("Text-generation backend unavailable", extra={"purpose": purpose})
        except Exception as e:
            logger.error(
                "Unexpected text-generation backend failure",
                extra={"purpose": purpose, "error_type": type(e).__name__},
            )
        return None

    async def propose_category(
        self,
        merchant_name: str,
        description: str | None,
        amount: Amount,
        catalog: CategoryCatalog,
    ) -> CategorizationResult | None:
        prompt = build_category_prompt(merchant_name, description, amount, catalog)
        response = await self._generate(prompt, purpose="category")
        if response is None:
            return None
        return parse_category_response(response, catalog)

    async def propose_suggestions(
        self,
        merchant_name: str,
        description: str | None,
        amount: Amount,
        catalog: CategoryCatalog,
        max_count: int,
    ) -> list[CategorySuggestion]:
        if max_count <= 0:
            return []
        prompt = build_suggestions_prompt(merchant_name, description, amount, catalog, max_count)
        response = await self._generate(prompt, purpose="suggestions")
        if response is None:
            return []
        return parse_suggestions_response(response, catalog, max_count)


class HybridStrategy(CategorizationStrategy):
    """Top automatic suggestion as the proposal; suggestions pass straight through."""

    method = CategorizationMethod.HYBRID

    def __init__(self, automatic: AutomaticStrategy):
        self.automatic = automatic

    async def propose_category(
        self,
        merchant_name: str,
        description: str | None,
        amount: Amount,
        catalog: CategoryCatalog,
    ) -> CategorizationResult | None:
        suggestions = await self.automatic.propose_suggestions(
            merchant_name, description, amount, catalog, max_count=1
        )
        if not suggestions:
            return None

        top = suggestions[0]
        return CategorizationResult(
            category_id=top.category_id,
            category_name=top.category_name,
            group_id=top.group_id,
            group_name=top.group_name,
            confidence=top.score,
            method=CategorizationMethod.HYBRID,
        )

    async def propose_suggestions(
        self,
        merchant_name: str,
        description: str | None,
        amount: Amount,
        catalog: CategoryCatalog,
        max_count: int,
    ) -> list[CategorySuggestion]:
        return await self.automatic.propose_suggestions(
            merchant_name, description, amount, catalog, max_count
        )


def build_strategies(
    backend: TextGenerationBackend, timeout_seconds: float | None = 30.0
) -> dict[CategorizationMethod, CategorizationStrategy]:
    """Method -> strategy map, built once at startup.

    Manual has no entry: it never resolves automatically.
    """
    automatic = AutomaticStrategy(backend, timeout_seconds)
    return {
        CategorizationMethod.AUTOMATIC: automatic,
        CategorizationMethod.HYBRID: HybridStrategy(automatic),
    }
