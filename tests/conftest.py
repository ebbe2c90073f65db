import pytest
from fastapi.testclient import TestClient

from app.promohub.core.security import create_access_token
from app.promohub.db.registry import StoreRegistry
from app.promohub.services.promotions import PromotionService


@pytest.fixture()
def registry():
    registry = StoreRegistry()
    yield registry
    registry.clear()


@pytest.fixture()
def client(registry):
    from app.main import create_app

    app = create_app(registry)
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def service():
    return PromotionService("tenant-test")


@pytest.fixture()
def store(service):
    return service.store


@pytest.fixture()
def auth_headers():
    def _headers(*, tenant_id: str = "tenant-a", user_id: str = "user-1", email: str | None = "admin@example.com"):
        token = create_access_token({"sub": user_id, "tenant_id": tenant_id, "email": email, "role": "ADMIN"})
        return {"Authorization": f"Bearer {token}"}

    return _headers
