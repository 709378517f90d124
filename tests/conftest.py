# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from shopfront.config import Settings
from shopfront.database import MemoryStore
from shopfront.main import create_app


@pytest.fixture
def settings():
    return Settings(store_backend="memory", cors_origin="http://localhost:3000")


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store=store)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_product(client):
    def _make(name="Widget", price=9.5, stock=10):
        r = client.post("/products", json={"name": name, "price": price, "stock": stock})
        assert r.status_code == 200, r.text
        return r.json()["product"]
    return _make
