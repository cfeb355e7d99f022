"""Durable tenant-scoped merchant -> category mappings.

One row per (tenant, merchant key). Re-confirming a merchant overwrites
its row; there is no history.
"""

from uuid import UUID

from sqlalchemy import Float, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pocketbook.models.base import BaseModel


class MerchantCategorization(BaseModel):
    """Confirmed category for a merchant within one tenant."""

    __tablename__ = "merchant_categorizations"

    tenant_id: Mapped[UUID] = mapped_column(nullable=False)
    merchant_key: Mapped[str] = mapped_column(String(255), nullable=False)
    category_id: Mapped[str] = mapped_column(String(64), nullable=False)
    category_name: Mapped[str] = mapped_column(String(255), nullable=False)
    group_id: Mapped[str] = mapped_column(String(64), nullable=False)
    group_name: Mapped[str] = mapped_column(String(255), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    method: Mapped[str] = mapped_column(String(16), nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "merchant_key", name="uq_merchant_cat_tenant_key"),
        Index("ix_merchant_cat_tenant_key", "tenant_id", "merchant_key"),
    )

    def __repr__(self) -> str:
        return (
            f"<MerchantCategorization(tenant_id={self.tenant_id}, "
            f"merchant_key={self.merchant_key}, category_id={self.category_id})>"
        )
