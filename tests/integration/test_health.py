import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from pocketbook.db.session import get_db


class FakeSession:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.statements = []

    async def execute(self, statement):
        self.statements.append(str(statement))
        if self.error is not None:
            raise self.error


def use_session(app, session: FakeSession) -> None:
    async def override():
        yield session

    app.dependency_overrides[get_db] = override


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    """Test basic health check."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"


@pytest.mark.asyncio
async def test_health_ready(app, client: AsyncClient):
    """Test readiness check with database connection."""
    session = FakeSession()
    use_session(app, session)

    response = await client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ready", "database": "connected"}
    assert session.statements == ["SELECT 1"]


@pytest.mark.asyncio
async def test_health_ready_database_down(app, client: AsyncClient):
    use_session(app, FakeSession(OperationalError("SELECT 1", {}, Exception("password=secret"))))

    response = await client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["database"] == "disconnected"
    assert "secret" not in response.text


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    response = await client.get("/health")
    assert response.headers["X-Request-ID"]
