"""Transaction repository (read side only)."""
from uuid import UUID

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from pocketbook.core.tenancy import TenantScope
from pocketbook.models.transaction import Transaction
from pocketbook.repositories.base import TenantScopedRepository


class TransactionRepository(TenantScopedRepository[Transaction]):
    """Tenant-scoped transaction queries. Category fields are never written."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Transaction)

    def list_query(
        self,
        tenant: UUID | TenantScope,
        skip: int = 0,
        limit: int = 100,
        account_id: str | None = None,
    ) -> Select:
        query = self.scoped_select(tenant)
        if account_id:
            query = query.where(Transaction.account_id == account_id)
        return (
            query.order_by(Transaction.date.desc(), Transaction.id)
            .offset(skip)
            .limit(limit)
        )

    async def list_for_tenant(
        self,
        tenant: UUID | TenantScope,
        skip: int = 0,
        limit: int = 100,
        account_id: str | None = None,
    ) -> list[Transaction]:
        """Transactions newest first, optionally for one account."""
        result = await self.db.execute(self.list_query(tenant, skip, limit, account_id))
        return list(result.scalars().all())

    async def count_for_tenant(
        self, tenant: UUID | TenantScope, account_id: str | None = None
    ) -> int:
        query = self.count_query(tenant)
        if account_id:
            query = query.where(Transaction.account_id == account_id)
        result = await self.db.execute(query)
        return int(result.scalar_one())

    async def get_for_tenant(self, tenant: UUID | TenantScope, transaction_id: str) -> Transaction | None:
        """A single transaction, or None if it is absent or owned by another tenant."""
        result = await self.db.execute(
            self.scoped_select(tenant).where(Transaction.id == transaction_id)
        )
        return result.scalar_one_or_none()
