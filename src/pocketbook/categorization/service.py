"""Categorization orchestrator.

The only entry point the API layer uses. Every operation takes the tenant
explicitly; nothing here reads tenant identity from shared state.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from pocketbook.categorization.catalog import CategoryCatalog
from pocketbook.categorization.memory import MerchantMemory
from pocketbook.categorization.merchant import merchant_key_for, normalize_merchant
from pocketbook.categorization.models import (
    CategorizationMethod,
    CategorizationResult,
    Category,
    CategorySuggestion,
)
from pocketbook.categorization.strategies import CategorizationStrategy
from pocketbook.core.exceptions import InvalidMerchantError, InvalidRequestError
from pocketbook.core.tenancy import require_tenant

logger = logging.getLogger(__name__)


class CategorizationService:
    """Memory first, strategy second; confirmations go straight to memory."""

    def __init__(
        self,
        catalog: CategoryCatalog,
        memory: MerchantMemory,
        strategies: Mapping[CategorizationMethod, CategorizationStrategy],
        default_suggestions: int = 6,
    ):
        """
        Args:
            catalog: Category catalog
            memory: Merchant memory
            strategies: Method -> strategy; must contain HYBRID (used for suggestions)
            default_suggestions: Suggestion count when the caller names none

        Raises:
            ValueError: If no hybrid strategy is registered
        """
        if CategorizationMethod.HYBRID not in strategies:
            raise ValueError("A hybrid strategy is required for suggestions")
        self.catalog = catalog
        self.memory = memory
        self.strategies = dict(strategies)
        self.default_suggestions = default_suggestions

    async def categorize(
        self,
        tenant_id: UUID,
        merchant_name: str | None,
        description: str | None = None,
        amount: Decimal | float | None = None,
        method: CategorizationMethod = CategorizationMethod.AUTOMATIC,
    ) -> CategorizationResult | None:
        """Resolve a category for a merchant.

        A memory hit wins regardless of method and comes back as CACHED.
        On a miss the strategy for method runs (MANUAL has none and yields
        None). A strategy result is remembered before it is returned.

        Returns:
            The result, or None when nothing usable was produced
        """
        tenant_id = require_tenant(tenant_id)
        key = merchant_key_for(merchant_name, description)
        if not key:
            return None

        cached = await self.memory.lookup(tenant_id, key)
        if cached is not None:
            logger.debug(
                "Merchant memory hit",
                extra={"tenant_id": str(tenant_id), "merchant_key": key},
            )
            return cached.with_method(CategorizationMethod.CACHED)

        strategy = self.strategies.get(method)
        if strategy is None:
            return None

        result = await strategy.propose_category(
            merchant_name or key, description, amount, self.catalog
        )
        if result is None:
            logger.warning(
                "No category proposed",
                extra={"tenant_id": str(tenant_id), "merchant_key": key, "method": method.value},
            )
            return None

        try:
            await self.memory.put(tenant_id, key, result)
        except SQLAlchemyError as e:
            # Remembering is best-effort; the proposal is still returned.
            logger.warning(
                "Merchant memory write-through failed",
                extra={"tenant_id": str(tenant_id), "merchant_key": key, "error_type": type(e).__name__},
            )
        return result

    async def suggestions(
        self,
        tenant_id: UUID,
        merchant_name: str | None,
        description: str | None = None,
        amount: Decimal | float | None = None,
        max_count: int | None = None,
    ) -> list[CategorySuggestion]:
        """Ranked candidates for interactive confirmation.

        Always goes through the hybrid strategy. Memory is neither read nor
        written.
        """
        tenant_id = require_tenant(tenant_id)
        if max_count is None:
            max_count = self.default_suggestions
        key = merchant_key_for(merchant_name, description)
        if not key or max_count <= 0:
            return []

        hybrid = self.strategies[CategorizationMethod.HYBRID]
        return await hybrid.propose_suggestions(
            merchant_name or key, description, amount, self.catalog, max_count
        )

    async def confirm(
        self,
        tenant_id: UUID,
        merchant_name: str | None,
        category_id: str,
        method: CategorizationMethod = CategorizationMethod.MANUAL,
    ) -> CategorizationResult:
        """Commit a user's choice for a merchant (confidence 1.0).

        Raises:
            InvalidMerchantError: If the merchant name is blank
            InvalidRequestError: If method is CACHED
            UnknownCategoryError: If category_id is not in the catalog
        """
        tenant_id = require_tenant(tenant_id)
        key = normalize_merchant(merchant_name)
        if not key:
            raise InvalidMerchantError(details={"field": "merchant_name"})
        if method == CategorizationMethod.CACHED:
            raise InvalidRequestError(details={"field": "method"})

        result = await self.memory.commit(tenant_id, key, category_id, method)
        logger.info(
            "Merchant category confirmed",
            extra={
                "tenant_id": str(tenant_id),
                "merchant_key": key,
                "category_id": category_id,
                "method": method.value,
            },
        )
        return result

    def grouped_catalog(self) -> dict[str, list[Category]]:
        """Group name -> categories, both sorted alphabetically."""
        return self.catalog.grouped()

    def group_categories(self, group_name: str) -> list[Category]:
        """Categories of one group.

        Raises:
            GroupNotFoundError: If the group does not exist
        """
        return list(self.catalog.categories_by_group(group_name))
