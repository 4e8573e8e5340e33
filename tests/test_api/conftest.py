"""
API test fixtures: TestClient поверх той же in-memory БД
"""
import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_db
from app.main import app


@pytest.fixture
def client(session_factory):
    """Test client для FastAPI (каждый запрос - своя session)"""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_wallet(client):
    def _make(name="BCA", initial_balance=0, **extra):
        response = client.post("/wallets", json={"name": name, "initial_balance": initial_balance, **extra})
        assert response.status_code == 201
        return response.json()["data"]
    return _make
