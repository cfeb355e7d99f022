import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from uuid import UUID, uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

sys.path.append(str(Path(__file__).parents[1] / "src"))

from pocketbook.api.deps import get_account_repository, get_transaction_repository
from pocketbook.categorization.catalog import CategoryCatalog
from pocketbook.categorization.memory import MerchantMemory
from pocketbook.categorization.models import Category, CategoryGroup
from pocketbook.categorization.service import CategorizationService
from pocketbook.categorization.strategies import build_strategies
from pocketbook.config import Settings
from pocketbook.core.exceptions import BackendUnavailableError
from pocketbook.main import create_app
from pocketbook.models.account import Account
from pocketbook.models.transaction import Transaction
from pocketbook.repositories.base import as_scope

ADMIN_KEY = "test-admin-key"


class ScriptedBackend:
    """Text-generation backend that replays canned replies in order.

    A reply that is an exception instance is raised instead of returned.
    Running out of replies looks like an unavailable backend.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts: list[str] = []

    def queue(self, *replies) -> None:
        self.replies.extend(replies)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise BackendUnavailableError()
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class UnreachableStore:
    """MerchantMemoryStore whose database cannot be reached."""

    async def get(self, tenant_id, merchant_key):
        raise OperationalError("SELECT", {}, Exception("db down"))

    async def put(self, tenant_id, merchant_key, result):
        raise OperationalError("INSERT", {}, Exception("db down"))


class InMemoryTransactionRepository:
    """Stands in for TransactionRepository with the same tenant filtering."""

    def __init__(self, rows: list[Transaction]):
        self.rows = rows

    def _visible(self, tenant, account_id: str | None = None) -> list[Transaction]:
        scope = as_scope(tenant)
        return [
            row
            for row in self.rows
            if (scope.all_tenants or row.tenant_id == scope.tenant_id)
            and (account_id is None or row.account_id == account_id)
        ]

    async def list_for_tenant(self, tenant, skip=0, limit=100, account_id=None):
        rows = sorted(self._visible(tenant, account_id), key=lambda r: r.date, reverse=True)
        return rows[skip : skip + limit]

    async def count_for_tenant(self, tenant, account_id=None) -> int:
        return len(self._visible(tenant, account_id))

    async def get_for_tenant(self, tenant, transaction_id: str):
        for row in self._visible(tenant):
            if row.id == transaction_id:
                return row
        return None

    async def count(self, tenant) -> int:
        return len(self._visible(tenant))


class InMemoryAccountRepository:
    def __init__(self, rows: list[Account]):
        self.rows = rows

    def _visible(self, tenant) -> list[Account]:
        scope = as_scope(tenant)
        return [r for r in self.rows if scope.all_tenants or r.tenant_id == scope.tenant_id]

    async def list_for_tenant(self, tenant):
        return sorted(self._visible(tenant), key=lambda r: (r.name, r.id))

    async def count(self, tenant) -> int:
        return len(self._visible(tenant))


def make_transaction(
    tenant_id: UUID,
    id: str,
    merchant_name: str | None,
    description: str = "CARD PURCHASE",
    amount: str = "-10.00",
    account_id: str = "acc_1",
    day: int = 1,
    category_id: str | None = None,
    category_name: str | None = None,
) -> Transaction:
    return Transaction(
        id=id,
        tenant_id=tenant_id,
        account_id=account_id,
        date=datetime(2025, 3, day, tzinfo=timezone.utc),
        description=description,
        amount=Decimal(amount),
        type="EFTPOS",
        merchant_name=merchant_name,
        category_id=category_id,
        category_name=category_name,
        group_id=None,
        group_name=None,
    )


@pytest.fixture
def small_catalog() -> CategoryCatalog:
    """Four categories in two groups, ids chosen for readability."""
    food = CategoryGroup(id="grp_food", name="Food")
    transport = CategoryGroup(id="grp_transport", name="Transport")
    return CategoryCatalog(
        [
            Category(id="groc_01", name="Supermarkets and grocery stores", group=food),
            Category(id="cafe_01", name="Cafes and bakeries", group=food),
            Category(id="fuel_01", name="Petrol stations", group=transport),
            Category(id="park_01", name="Parking", group=transport),
        ]
    )


@pytest.fixture
def tenant_a() -> UUID:
    return uuid4()


@pytest.fixture
def tenant_b() -> UUID:
    return uuid4()


@pytest.fixture
def backend() -> ScriptedBackend:
    return ScriptedBackend()


@pytest.fixture
def memory(small_catalog) -> MerchantMemory:
    return MerchantMemory(small_catalog, shards=4)


@pytest.fixture
def offline_memory(small_catalog) -> MerchantMemory:
    return MerchantMemory(small_catalog, store=UnreachableStore())


@pytest.fixture
def service(small_catalog, memory, backend) -> CategorizationService:
    return CategorizationService(
        small_catalog, memory, build_strategies(backend, timeout_seconds=1.0)
    )


@pytest.fixture
def app_settings() -> Settings:
    return Settings(
        _env_file=None,
        tenant_provider="header",
        admin_api_key=ADMIN_KEY,
        llm_timeout_seconds=1.0,
    )


@pytest.fixture
def transaction_rows() -> list[Transaction]:
    return []


@pytest.fixture
def account_rows() -> list[Account]:
    return []


@pytest.fixture
def app(app_settings, backend, transaction_rows, account_rows):
    """App wired with the scripted backend and in-memory repositories."""
    application = create_app(app_settings, backend=backend)
    transactions = InMemoryTransactionRepository(transaction_rows)
    accounts = InMemoryAccountRepository(account_rows)
    application.dependency_overrides[get_transaction_repository] = lambda: transactions
    application.dependency_overrides[get_account_repository] = lambda: accounts
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_backend():
    return ScriptedBackend


@pytest.fixture
def make_txn():
    return make_transaction
