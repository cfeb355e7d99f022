"""Database models."""
from pocketbook.models.account import Account
from pocketbook.models.transaction import Transaction
from pocketbook.models.merchant_categorization import MerchantCategorization

__all__ = ["Account", "Transaction", "MerchantCategorization"]
