"""Integration tests for categorization endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from pocketbook.core.exceptions import BackendUnavailableError

GROCERIES = "nzfcc_ckouvvy84001608ml5p6z4d8j"
PETROL = "nzfcc_ckouvvy84004508mlabc5e1a"
PARKING = "nzfcc_ckouvvy84004708mlcde5e1c"


@pytest.fixture
def tenant_headers(tenant_a) -> dict:
    return {"X-Tenant-Id": str(tenant_a)}


class TestCategorize:
    @pytest.mark.asyncio
    async def test_automatic(self, client: AsyncClient, backend, tenant_headers):
        backend.queue('Sure! {"category": "Parking", "group": "Transport", "confidence": 0.8}')

        response = await client.post(
            "/api/v1/categorization/categorize",
            json={"merchant_name": "Wilson Parking", "amount": "-8.00"},
            headers=tenant_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["category_id"] == PARKING
        assert data["group_name"] == "Transport"
        assert data["method"] == "automatic"
        assert data["confidence"] == 0.8

    @pytest.mark.asyncio
    async def test_second_call_is_cached(self, client: AsyncClient, backend, tenant_headers):
        backend.queue('{"category": "Parking"}')
        payload = {"merchant_name": "Wilson Parking"}

        await client.post("/api/v1/categorization/categorize", json=payload, headers=tenant_headers)
        response = await client.post(
            "/api/v1/categorization/categorize",
            json={"merchant_name": "WILSON PARKING"},
            headers=tenant_headers,
        )

        assert response.json()["method"] == "cached"
        assert len(backend.prompts) == 1

    @pytest.mark.asyncio
    async def test_no_result_is_422(self, client: AsyncClient, backend, tenant_headers):
        backend.queue(BackendUnavailableError())

        response = await client.post(
            "/api/v1/categorization/categorize",
            json={"merchant_name": "Mystery Ltd"},
            headers=tenant_headers,
        )

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "CAT_003"
        assert data["retry_allowed"] is True

    @pytest.mark.asyncio
    async def test_manual_without_memory_is_422(self, client: AsyncClient, backend, tenant_headers):
        response = await client.post(
            "/api/v1/categorization/categorize",
            json={"merchant_name": "BP", "method": "manual"},
            headers=tenant_headers,
        )

        assert response.status_code == 422
        assert backend.prompts == []

    @pytest.mark.asyncio
    async def test_blank_merchant_is_400(self, client: AsyncClient, tenant_headers):
        response = await client.post(
            "/api/v1/categorization/categorize",
            json={"merchant_name": "   "},
            headers=tenant_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_001"

    @pytest.mark.asyncio
    async def test_missing_tenant_is_401(self, client: AsyncClient, backend):
        response = await client.post(
            "/api/v1/categorization/categorize", json={"merchant_name": "BP"}
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "TENANT_001"
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert backend.prompts == []

    @pytest.mark.asyncio
    async def test_malformed_tenant_is_401(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/categorization/categorize",
            json={"merchant_name": "BP"},
            headers={"X-Tenant-Id": "tenant-one"},
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "TENANT_002"


class TestSuggestions:
    @pytest.mark.asyncio
    async def test_ranked_and_capped(self, client: AsyncClient, backend, tenant_headers):
        backend.queue(
            '[{"category": "Parking", "score": 0.2, "reason": "car park"},'
            ' {"category": "Petrol stations", "score": 0.9, "reason": "fuel"},'
            ' {"category": "Space travel", "score": 1.0}]'
        )

        response = await client.post(
            "/api/v1/categorization/suggestions",
            json={"merchant_name": "BP Connect", "max_suggestions": 2},
            headers=tenant_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert [s["category_id"] for s in data] == [PETROL, PARKING]
        assert data[0]["reason"] == "fuel"

    @pytest.mark.asyncio
    async def test_backend_down_is_empty(self, client: AsyncClient, backend, tenant_headers):
        backend.queue(BackendUnavailableError())

        response = await client.post(
            "/api/v1/categorization/suggestions",
            json={"merchant_name": "BP Connect"},
            headers=tenant_headers,
        )

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_max_suggestions_out_of_range(self, client: AsyncClient, tenant_headers):
        response = await client.post(
            "/api/v1/categorization/suggestions",
            json={"merchant_name": "BP", "max_suggestions": 0},
            headers=tenant_headers,
        )

        assert response.status_code == 400
        assert "max_suggestions" in response.json()["message"]


class TestConfirm:
    @pytest.mark.asyncio
    async def test_confirm_then_categorize(self, client: AsyncClient, backend, tenant_headers):
        response = await client.post(
            "/api/v1/categorization/confirm",
            json={"merchant_name": "Countdown", "category_id": GROCERIES},
            headers=tenant_headers,
        )

        assert response.status_code == 200
        result = response.json()["result"]
        assert result["confidence"] == 1.0
        assert result["method"] == "manual"

        response = await client.post(
            "/api/v1/categorization/categorize",
            json={"merchant_name": "countdown"},
            headers=tenant_headers,
        )
        assert response.json()["category_name"] == "Supermarkets and grocery stores"
        assert response.json()["method"] == "cached"
        assert backend.prompts == []

    @pytest.mark.asyncio
    async def test_other_tenant_unaffected(self, client: AsyncClient, backend, tenant_headers):
        await client.post(
            "/api/v1/categorization/confirm",
            json={"merchant_name": "Countdown", "category_id": GROCERIES},
            headers=tenant_headers,
        )
        backend.queue(BackendUnavailableError())

        response = await client.post(
            "/api/v1/categorization/categorize",
            json={"merchant_name": "Countdown"},
            headers={"X-Tenant-Id": str(uuid4())},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_category_is_400(self, client: AsyncClient, tenant_headers):
        response = await client.post(
            "/api/v1/categorization/confirm",
            json={"merchant_name": "Countdown", "category_id": "nzfcc_nope"},
            headers=tenant_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "CAT_001"

    @pytest.mark.asyncio
    async def test_missing_category_is_400(self, client: AsyncClient, tenant_headers):
        response = await client.post(
            "/api/v1/categorization/confirm",
            json={"merchant_name": "Countdown"},
            headers=tenant_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_001"

    @pytest.mark.asyncio
    async def test_cached_method_is_400(self, client: AsyncClient, tenant_headers):
        response = await client.post(
            "/api/v1/categorization/confirm",
            json={"merchant_name": "Countdown", "category_id": GROCERIES, "method": "cached"},
            headers=tenant_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_001"

        response = await client.post(
            "/api/v1/categorization/categorize",
            json={"merchant_name": "Countdown", "method": "manual"},
            headers=tenant_headers,
        )
        assert response.status_code == 422


class TestCategories:
    @pytest.mark.asyncio
    async def test_grouped(self, client: AsyncClient):
        response = await client.get("/api/v1/categorization/categories")

        assert response.status_code == 200
        data = response.json()
        assert list(data) == sorted(data, key=str.casefold)
        transport = [c["name"] for c in data["Transport"]]
        assert transport == sorted(transport, key=str.casefold)
        assert "Petrol stations" in transport

    @pytest.mark.asyncio
    async def test_one_group(self, client: AsyncClient):
        response = await client.get("/api/v1/categorization/categories/Food")

        assert response.status_code == 200
        assert all(c["group_name"] == "Food" for c in response.json())

    @pytest.mark.asyncio
    async def test_unknown_group_is_404(self, client: AsyncClient):
        response = await client.get("/api/v1/categorization/categories/Space")

        assert response.status_code == 404
        assert response.json()["error_code"] == "CAT_002"


class TestConfiguredSuggestionLimits:
    @pytest.fixture
    def app_settings(self):
        from pocketbook.config import Settings

        return Settings(
            _env_file=None,
            tenant_provider="header",
            llm_timeout_seconds=1.0,
            suggestions_default_count=2,
            suggestions_max_count=3,
        )

    @pytest.mark.asyncio
    async def test_above_configured_max_is_400(self, client: AsyncClient, backend, tenant_headers):
        response = await client.post(
            "/api/v1/categorization/suggestions",
            json={"merchant_name": "BP", "max_suggestions": 4},
            headers=tenant_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_001"
        assert backend.prompts == []

    @pytest.mark.asyncio
    async def test_configured_default_count(self, client: AsyncClient, backend, tenant_headers):
        backend.queue('[{"category": "Parking", "score": 0.2}]')

        response = await client.post(
            "/api/v1/categorization/suggestions",
            json={"merchant_name": "BP"},
            headers=tenant_headers,
        )

        assert response.status_code == 200
        assert "top 2 most likely" in backend.prompts[0]


class TestClaimTenantProvider:
    @pytest.fixture
    def app_settings(self):
        from pocketbook.config import Settings

        return Settings(_env_file=None, tenant_provider="jwt", llm_timeout_seconds=1.0)

    @pytest.mark.asyncio
    async def test_tenant_from_bearer_token(self, client: AsyncClient, tenant_a):
        from pocketbook.core.security import create_access_token

        token = create_access_token(tenant_a)
        response = await client.post(
            "/api/v1/categorization/confirm",
            json={"merchant_name": "BP", "category_id": PETROL},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_header_is_ignored(self, client: AsyncClient, tenant_a):
        response = await client.post(
            "/api/v1/categorization/confirm",
            json={"merchant_name": "BP", "category_id": PETROL},
            headers={"X-Tenant-Id": str(tenant_a)},
        )

        assert response.status_code == 401
