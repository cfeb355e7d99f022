"""Merchant memory: tenant-partitioned merchant key -> categorization result.

Once a merchant has an entry it is the single source of truth for that
merchant within the tenant. Keys are normalized (trimmed, whitespace
collapsed, upper-cased), so lookups are case-insensitive.

Entries live in an in-process map split into lock shards by tenant. When a
durable store is configured the map becomes a read-through cache in front
of it. Locks are only held for dictionary operations, never across an
await.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pocketbook.categorization.catalog import CategoryCatalog
from pocketbook.categorization.merchant import normalize_merchant
from pocketbook.categorization.models import CategorizationMethod, CategorizationResult
from pocketbook.core.tenancy import TenantScope, require_tenant
from pocketbook.models.merchant_categorization import MerchantCategorization

logger = logging.getLogger(__name__)


class MerchantMemoryStore(Protocol):
    """Durable backing store for merchant memory."""

    async def get(self, tenant_id: UUID, merchant_key: str) -> CategorizationResult | None:
        ...

    async def put(self, tenant_id: UUID, merchant_key: str, result: CategorizationResult) -> None:
        ...


@dataclass
class _Entry:
    result: CategorizationResult
    written_at: float


class _Shard:
    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.tenants: dict[UUID, OrderedDict[str, _Entry]] = {}


class MerchantMemory:
    """Concurrency-safe, tenant-scoped merchant memory.

    Args:
        catalog: Catalog used to validate committed category ids
        shards: Number of lock shards
        max_entries: Per-tenant cap; the least recently written entry is
            evicted beyond it (None for no cap)
        ttl_seconds: Entries older than this are misses (None keeps them forever)
        store: Optional durable store; the map then reads through to it
        clock: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        catalog: CategoryCatalog,
        shards: int = 16,
        max_entries: int | None = 10_000,
        ttl_seconds: float | None = None,
        store: MerchantMemoryStore | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if shards < 1:
            raise ValueError("shards must be at least 1")
        self.catalog = catalog
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.store = store
        self._clock = clock
        self._shards = [_Shard() for _ in range(shards)]

    def _shard(self, tenant_id: UUID) -> _Shard:
        return self._shards[tenant_id.int % len(self._shards)]

    def _is_expired(self, entry: _Entry, now: float) -> bool:
        return self.ttl_seconds is not None and now - entry.written_at > self.ttl_seconds

    def _get_local(self, tenant_id: UUID, key: str) -> CategorizationResult | None:
        shard = self._shard(tenant_id)
        now = self._clock()
        with shard.lock:
            entries = shard.tenants.get(tenant_id)
            if not entries:
                return None
            entry = entries.get(key)
            if entry is None:
                return None
            if self._is_expired(entry, now):
                del entries[key]
                return None
            return entry.result

    def _evict(self, tenant_id: UUID, entries: OrderedDict[str, _Entry]) -> None:
        # Caller holds the shard lock.
        if self.max_entries is None:
            return
        while len(entries) > self.max_entries:
            evicted, _ = entries.popitem(last=False)
            logger.debug(
                "Evicted merchant memory entry",
                extra={"tenant_id": str(tenant_id), "merchant_key": evicted},
            )

    def _put_local(self, tenant_id: UUID, key: str, result: CategorizationResult) -> None:
        shard = self._shard(tenant_id)
        now = self._clock()
        with shard.lock:
            entries = shard.tenants.setdefault(tenant_id, OrderedDict())
            entries[key] = _Entry(result=result, written_at=now)
            entries.move_to_end(key)
            self._evict(tenant_id, entries)

    def _put_local_if_absent(
        self, tenant_id: UUID, key: str, result: CategorizationResult
    ) -> CategorizationResult:
        """Populate the map from the store unless a live entry got there first.

        A commit that finished while the store read was in flight wins over
        the (older) value that read returned.
        """
        shard = self._shard(tenant_id)
        now = self._clock()
        with shard.lock:
            entries = shard.tenants.setdefault(tenant_id, OrderedDict())
            current = entries.get(key)
            if current is not None and not self._is_expired(current, now):
                return current.result
            entries[key] = _Entry(result=result, written_at=now)
            entries.move_to_end(key)
            self._evict(tenant_id, entries)
            return result

    async def lookup(self, tenant_id: UUID, merchant_key: str | None) -> CategorizationResult | None:
        """Return the remembered result for a merchant, or None."""
        tenant_id = require_tenant(tenant_id)
        key = normalize_merchant(merchant_key)
        if not key:
            return None

        result = self._get_local(tenant_id, key)
        if result is not None or self.store is None:
            return result

        try:
            result = await self.store.get(tenant_id, key)
        except SQLAlchemyError as e:
            # A store outage degrades to a miss; reads never fail on it.
            logger.warning(
                "Merchant memory store read failed",
                extra={"tenant_id": str(tenant_id), "merchant_key": key, "error_type": type(e).__name__},
            )
            return None
        if result is None:
            return None
        return self._put_local_if_absent(tenant_id, key, result)

    async def put(self, tenant_id: UUID, merchant_key: str | None, result: CategorizationResult) -> None:
        """Store a result, overwriting any previous one for the merchant.

        The durable store (if any) is written before the map.

        Raises:
            ValueError: If the merchant key normalizes to an empty string
        """
        tenant_id = require_tenant(tenant_id)
        key = normalize_merchant(merchant_key)
        if not key:
            raise ValueError("merchant key must not be empty")

        if self.store is not None:
            await self.store.put(tenant_id, key, result)
        self._put_local(tenant_id, key, result)

    async def commit(
        self,
        tenant_id: UUID,
        merchant_key: str | None,
        category_id: str,
        method: CategorizationMethod,
    ) -> CategorizationResult:
        """Remember a confirmed category (confidence 1.0) for a merchant.

        Raises:
            UnknownCategoryError: If category_id is not in the catalog;
                memory is left untouched
        """
        tenant_id = require_tenant(tenant_id)
        category = self.catalog.require(category_id)
        result = CategorizationResult.from_category(category, confidence=1.0, method=method)
        await self.put(tenant_id, merchant_key, result)
        return result

    def count(self, scope: TenantScope) -> int:
        """Number of in-process entries within a scope (expired ones included)."""
        if scope.all_tenants:
            total = 0
            for shard in self._shards:
                with shard.lock:
                    total += sum(len(entries) for entries in shard.tenants.values())
            return total

        shard = self._shard(scope.tenant_id)
        with shard.lock:
            return len(shard.tenants.get(scope.tenant_id, ()))


class SqlAlchemyMerchantMemoryStore:
    """MerchantMemoryStore backed by the merchant_categorizations table.

    Each call opens its own session. Writes overwrite the existing row
    (last write wins).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, tenant_id: UUID, merchant_key: str) -> CategorizationResult | None:
        async with self.session_factory() as session:
            row = (
                await session.execute(
                    select(MerchantCategorization).where(
                        MerchantCategorization.tenant_id == tenant_id,
                        MerchantCategorization.merchant_key == merchant_key,
                    )
                )
            ).scalar_one_or_none()

        if row is None:
            return None
        return CategorizationResult(
            category_id=row.category_id,
            category_name=row.category_name,
            group_id=row.group_id,
            group_name=row.group_name,
            confidence=row.confidence,
            method=CategorizationMethod(row.method),
        )

    async def put(self, tenant_id: UUID, merchant_key: str, result: CategorizationResult) -> None:
        """Insert or overwrite the row in one statement (ON CONFLICT DO UPDATE).

        Concurrent first writes for the same merchant cannot collide on the
        unique constraint; the last one to commit wins.
        """
        async with self.session_factory() as session:
            insert = sqlite_insert if session.get_bind().dialect.name == "sqlite" else pg_insert
            stmt = insert(MerchantCategorization).values(
                tenant_id=tenant_id,
                merchant_key=merchant_key,
                category_id=result.category_id,
                category_name=result.category_name,
                group_id=result.group_id,
                group_name=result.group_name,
                confidence=result.confidence,
                method=result.method.value,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[MerchantCategorization.tenant_id, MerchantCategorization.merchant_key],
                set_={
                    "category_id": stmt.excluded.category_id,
                    "category_name": stmt.excluded.category_name,
                    "group_id": stmt.excluded.group_id,
                    "group_name": stmt.excluded.group_name,
                    "confidence": stmt.excluded.confidence,
                    "method": stmt.excluded.method,
                    "updated_at": stmt.excluded.updated_at,
                },
            )
            await session.execute(stmt)
            await session.commit()
