"""Unit tests for tenant-scoped repositories.

Queries are compiled rather than executed; the session is mocked.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession

from pocketbook.core.exceptions import TenantResolutionError
from pocketbook.core.tenancy import TenantScope
from pocketbook.repositories.account import AccountRepository
from pocketbook.repositories.transaction import TransactionRepository


def sql(query) -> str:
    return str(query.compile(dialect=postgresql.dialect()))


@pytest.fixture
def mock_db():
    db = AsyncMock(spec=AsyncSession)
    execute_result = MagicMock()
    execute_result.scalar_one.return_value = 3
    execute_result.scalars.return_value.all.return_value = []
    execute_result.scalar_one_or_none.return_value = None
    db.execute = AsyncMock(return_value=execute_result)
    return db


class TestScopedSelect:
    def test_single_tenant_filters(self, mock_db):
        repo = TransactionRepository(mock_db)

        compiled = sql(repo.scoped_select(uuid4()))

        assert "WHERE transactions.tenant_id =" in compiled

    def test_all_tenants_has_no_filter(self, mock_db):
        repo = TransactionRepository(mock_db)

        compiled = sql(repo.scoped_select(TenantScope.across_all_tenants()))

        assert "WHERE" not in compiled

    def test_count_query_is_scoped(self, mock_db):
        compiled = sql(AccountRepository(mock_db).count_query(uuid4()))

        assert "count(*)" in compiled
        assert "accounts.tenant_id" in compiled

    def test_bare_tenant_must_be_uuid(self, mock_db):
        with pytest.raises(TenantResolutionError):
            TransactionRepository(mock_db).scoped_select(None)


class TestTransactionRepository:
    def test_list_query_orders_newest_first(self, mock_db):
        compiled = sql(TransactionRepository(mock_db).list_query(uuid4(), account_id="acc_1"))

        assert "transactions.tenant_id" in compiled
        assert "transactions.account_id" in compiled
        assert "ORDER BY transactions.date DESC, transactions.id" in compiled

    @pytest.mark.asyncio
    async def test_count_for_tenant(self, mock_db):
        assert await TransactionRepository(mock_db).count_for_tenant(uuid4()) == 3
        mock_db.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_for_tenant_scopes_by_tenant_and_id(self, mock_db):
        result = await TransactionRepository(mock_db).get_for_tenant(uuid4(), "t1")

        assert result is None
        compiled = sql(mock_db.execute.await_args.args[0])
        assert "transactions.tenant_id" in compiled
        assert "transactions.id =" in compiled


class TestAccountRepository:
    @pytest.mark.asyncio
    async def test_list_for_tenant(self, mock_db):
        assert await AccountRepository(mock_db).list_for_tenant(uuid4()) == []

        compiled = sql(mock_db.execute.await_args.args[0])
        assert "ORDER BY accounts.name, accounts.id" in compiled

    @pytest.mark.asyncio
    async def test_count(self, mock_db):
        assert await AccountRepository(mock_db).count(TenantScope.across_all_tenants()) == 3
