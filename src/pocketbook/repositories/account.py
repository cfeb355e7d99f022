"""Account repository (read side only)."""
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from pocketbook.core.tenancy import TenantScope
from pocketbook.models.account import Account
from pocketbook.repositories.base import TenantScopedRepository


class AccountRepository(TenantScopedRepository[Account]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Account)

    async def list_for_tenant(self, tenant: UUID | TenantScope) -> list[Account]:
        """Accounts ordered by name."""
        result = await self.db.execute(
            self.scoped_select(tenant).order_by(Account.name, Account.id)
        )
        return list(result.scalars().all())
