"""Base repository for tenant-owned rows.

Every query goes through scoped_select, which adds the tenant predicate
unless the scope explicitly asks for all tenants.
"""
from typing import Any, Generic, Type, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pocketbook.core.tenancy import TenantScope
from pocketbook.models.base import Base

T = TypeVar("T", bound=Base)


def as_scope(tenant: UUID | TenantScope) -> TenantScope:
    """Wrap a bare tenant id into a single-tenant scope."""
    if isinstance(tenant, TenantScope):
        return tenant
    return TenantScope.for_tenant(tenant)


class TenantScopedRepository(Generic[T]):
    """Read-only repository whose queries are always tenant-scoped."""

    def __init__(self, db: AsyncSession, model: Type[T]):
        self.db = db
        self.model = model

    def scoped_select(self, tenant: UUID | TenantScope, *columns: Any) -> Select:
        """SELECT over the model (or the given columns) restricted to a scope."""
        scope = as_scope(tenant)
        query = select(*columns) if columns else select(self.model)
        if columns:
            query = query.select_from(self.model)
        if not scope.all_tenants:
            query = query.where(self.model.tenant_id == scope.tenant_id)
        return query

    def count_query(self, tenant: UUID | TenantScope) -> Select:
        return self.scoped_select(tenant, func.count())

    async def count(self, tenant: UUID | TenantScope) -> int:
        """Count rows within a scope."""
        result = await self.db.execute(self.count_query(tenant))
        return int(result.scalar_one())
