"""Read-time category overlay for transactions.

Transactions whose stored category is missing (or only a placeholder)
get the category remembered for their merchant. The overlay is applied to
copies of the response objects; stored rows are never touched, so one
confirmation fixes every historical transaction from that merchant on the
next read.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from pocketbook.categorization.memory import MerchantMemory
from pocketbook.categorization.merchant import merchant_key_for
from pocketbook.core.tenancy import require_tenant
from pocketbook.schemas.transaction import CategorySource, TransactionResponse

logger = logging.getLogger(__name__)

PLACEHOLDER_CATEGORY_NAMES = frozenset({"uncategorized", "uncategorised", "no category data"})


def has_real_category(category_id: str | None, category_name: str | None) -> bool:
    """False for a missing category or one of the placeholder names."""
    if not category_id or not category_id.strip():
        return False
    if category_name and category_name.strip().casefold() in PLACEHOLDER_CATEGORY_NAMES:
        return False
    return True


class TransactionProjector:
    """Overlay merchant memory onto transactions lacking a category."""

    def __init__(self, memory: MerchantMemory):
        self.memory = memory

    async def project(
        self, tenant_id: UUID, transactions: Iterable[TransactionResponse]
    ) -> list[TransactionResponse]:
        tenant_id = require_tenant(tenant_id)
        projected: list[TransactionResponse] = []
        overlaid = 0

        for txn in transactions:
            if has_real_category(txn.category_id, txn.category_name):
                projected.append(txn.model_copy(update={"category_source": CategorySource.STORED}))
                continue

            key = merchant_key_for(txn.merchant_name, txn.description)
            result = await self.memory.lookup(tenant_id, key) if key else None
            if result is None:
                projected.append(txn.model_copy(update={"category_source": CategorySource.NONE}))
                continue

            overlaid += 1
            projected.append(
                txn.model_copy(
                    update={
                        "category_id": result.category_id,
                        "category_name": result.category_name,
                        "group_id": result.group_id,
                        "group_name": result.group_name,
                        "category_source": CategorySource.MERCHANT_MEMORY,
                    }
                )
            )

        if overlaid:
            logger.debug(
                "Overlaid merchant categories",
                extra={"tenant_id": str(tenant_id), "overlaid": overlaid, "total": len(projected)},
            )
        return projected
