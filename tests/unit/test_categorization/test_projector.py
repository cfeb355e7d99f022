import pytest

from pocketbook.categorization.models import CategorizationMethod
from pocketbook.categorization.projector import TransactionProjector, has_real_category
from pocketbook.core.exceptions import TenantResolutionError
from pocketbook.schemas.transaction import CategorySource, TransactionResponse


@pytest.fixture
def projector(memory):
    return TransactionProjector(memory)


def as_response(row) -> TransactionResponse:
    return TransactionResponse.model_validate(row)


@pytest.mark.parametrize(
    "category_id,category_name,expected",
    [
        ("fuel_01", "Petrol stations", True),
        (None, None, False),
        ("  ", "Petrol stations", False),
        ("x_1", "Uncategorized", False),
        ("x_1", "no category data", False),
        ("x_1", None, True),
    ],
)
def test_has_real_category(category_id, category_name, expected):
    assert has_real_category(category_id, category_name) is expected


class TestProject:
    async def test_overlays_confirmed_merchant(self, projector, memory, tenant_a, make_txn):
        await memory.commit(tenant_a, "BP", "fuel_01", CategorizationMethod.MANUAL)
        original = as_response(make_txn(tenant_a, "t1", "bp"))

        [projected] = await projector.project(tenant_a, [original])

        assert projected.category_id == "fuel_01"
        assert projected.category_name == "Petrol stations"
        assert projected.group_name == "Transport"
        assert projected.category_source == CategorySource.MERCHANT_MEMORY
        assert original.category_id is None
        assert original.category_source is None

    async def test_stored_category_kept(self, projector, memory, tenant_a, make_txn):
        await memory.commit(tenant_a, "BP", "fuel_01", CategorizationMethod.MANUAL)
        row = make_txn(tenant_a, "t1", "BP", category_id="cafe_01", category_name="Cafes and bakeries")

        [projected] = await projector.project(tenant_a, [as_response(row)])

        assert projected.category_id == "cafe_01"
        assert projected.category_source == CategorySource.STORED

    async def test_placeholder_category_is_replaced(self, projector, memory, tenant_a, make_txn):
        await memory.commit(tenant_a, "BP", "fuel_01", CategorizationMethod.MANUAL)
        row = make_txn(tenant_a, "t1", "BP", category_id="unc", category_name="Uncategorized")

        [projected] = await projector.project(tenant_a, [as_response(row)])

        assert projected.category_id == "fuel_01"

    async def test_unknown_merchant_left_alone(self, projector, tenant_a, make_txn):
        [projected] = await projector.project(tenant_a, [as_response(make_txn(tenant_a, "t1", "Nowhere"))])

        assert projected.category_id is None
        assert projected.category_source == CategorySource.NONE

    async def test_unreachable_store_leaves_rows_alone(self, offline_memory, tenant_a, make_txn):
        projector = TransactionProjector(offline_memory)

        [projected] = await projector.project(tenant_a, [as_response(make_txn(tenant_a, "t1", "BP"))])

        assert projected.category_id is None
        assert projected.category_source == CategorySource.NONE

    async def test_description_fallback(self, projector, memory, tenant_a, make_txn):
        await memory.commit(tenant_a, "Parking building", "park_01", CategorizationMethod.MANUAL)
        row = make_txn(tenant_a, "t1", None, description="PARKING  BUILDING")

        [projected] = await projector.project(tenant_a, [as_response(row)])

        assert projected.category_id == "park_01"

    async def test_other_tenant_memory_not_used(self, projector, memory, tenant_a, tenant_b, make_txn):
        await memory.commit(tenant_a, "BP", "fuel_01", CategorizationMethod.MANUAL)

        [projected] = await projector.project(tenant_b, [as_response(make_txn(tenant_b, "t1", "BP"))])

        assert projected.category_source == CategorySource.NONE

    async def test_order_preserved(self, projector, memory, tenant_a, make_txn):
        await memory.commit(tenant_a, "BP", "fuel_01", CategorizationMethod.MANUAL)
        rows = [make_txn(tenant_a, f"t{i}", name) for i, name in enumerate(["BP", "Nowhere", "bp"])]

        projected = await projector.project(tenant_a, [as_response(r) for r in rows])

        assert [p.id for p in projected] == ["t0", "t1", "t2"]
        assert [p.category_id for p in projected] == ["fuel_01", None, "fuel_01"]

    async def test_requires_tenant(self, projector):
        with pytest.raises(TenantResolutionError):
            await projector.project(None, [])
