"""Merchant categorization.

Catalog, strategies, tenant-scoped merchant memory, the orchestrator and
the read-time transaction projector.
"""

from .catalog import CategoryCatalog, load_catalog
from .memory import MerchantMemory
from .models import CategorizationMethod, CategorizationResult, Category, CategorySuggestion
from .projector import TransactionProjector
from .service import CategorizationService

__all__ = [
    "CategorizationMethod",
    "CategorizationResult",
    "CategorizationService",
    "Category",
    "CategoryCatalog",
    "CategorySuggestion",
    "MerchantMemory",
    "TransactionProjector",
    "load_catalog",
]
