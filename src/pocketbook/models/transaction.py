"""Transaction model for synced bank transactions."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pocketbook.models.base import TimestampedModel


class Transaction(TimestampedModel):
    """A single bank transaction.

    Category columns hold whatever the aggregator supplied (often nothing).
    They are never written by categorization; confirmed merchant
    categories are overlaid at read time instead.
    """

    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False)
    account_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    merchant_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    category_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    category_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    group_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    group_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_transactions_tenant_id", "tenant_id"),
        Index("ix_transactions_tenant_date", "tenant_id", "date"),
        Index("ix_transactions_account_id", "account_id"),
    )

    account: Mapped["Account"] = relationship("Account", back_populates="transactions")

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, tenant_id={self.tenant_id}, "
            f"date={self.date}, amount={self.amount})>"
        )
