"""Transaction response schemas."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from pocketbook.schemas.common import MoneyMeta, PaginationMeta


class CategorySource(str, Enum):
    """Where a transaction's category came from."""

    STORED = "stored"
    MERCHANT_MEMORY = "merchant_memory"
    NONE = "none"


class TransactionResponse(BaseModel):
    """Transaction data for API responses."""

    id: str
    account_id: str = Field(description="Owning account")
    date: datetime = Field(description="Transaction date")
    description: str = Field(description="Bank description")
    amount: Decimal = Field(description="Signed amount in major units")
    type: str = Field(description="Transaction type reported by the bank")
    merchant_name: str | None = Field(None, description="Merchant name, when known")
    category_id: str | None = Field(None, description="Category identifier")
    category_name: str | None = Field(None, description="Category display name")
    group_id: str | None = Field(None, description="Spending group identifier")
    group_name: str | None = Field(None, description="Spending group display name")
    category_source: CategorySource | None = Field(
        None, description="Whether the category is stored or overlaid from merchant memory"
    )

    model_config = ConfigDict(from_attributes=True)


class TransactionListResult(BaseModel):
    """Paginated list of transactions."""

    transactions: list[TransactionResponse]
    pagination: PaginationMeta
    money: MoneyMeta = Field(
        description="Monetary representation for amounts in this response"
    )
