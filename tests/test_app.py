# tests/test_app.py
import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from shopfront.config import Settings
from shopfront.database import MemoryStore, MongoStore, open_store, to_object_id
from shopfront.main import create_app


class BrokenStore(MemoryStore):
    async def list_products(self):
        raise ServerSelectionTimeoutError("localhost:27017: connection refused")

    async def ping(self):
        raise ServerSelectionTimeoutError("localhost:27017: connection refused")


def test_store_failure_is_a_500(settings):
    app = create_app(settings, store=BrokenStore())
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/product")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}


def test_health(client, settings):
    assert client.get("/health").json() == {"status": "ok", "store": "connected"}

    app = create_app(settings, store=BrokenStore())
    with TestClient(app) as c:
        r = c.get("/health")
    assert r.status_code == 503
    assert r.json()["status"] == "degraded"


def test_cors_allows_configured_origin(client):
    r = client.options("/products", headers={
        "Origin": "http://localhost:3000",
        "Access-Control-Request-Method": "POST",
    })
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert r.headers["access-control-allow-credentials"] == "true"
    for method in ("GET", "POST", "PUT", "DELETE"):
        assert method in r.headers["access-control-allow-methods"]


def test_cors_rejects_other_origins(client):
    r = client.options("/products", headers={
        "Origin": "http://evil.example",
        "Access-Control-Request-Method": "POST",
    })
    assert r.status_code == 400
    r = client.get("/product", headers={"Origin": "http://evil.example"})
    assert "access-control-allow-origin" not in r.headers


def test_cors_rejects_patch(client):
    r = client.options("/products/x", headers={
        "Origin": "http://localhost:3000",
        "Access-Control-Request-Method": "PATCH",
    })
    assert r.status_code == 400


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("MONGO_URI", "mongodb://db:27017/store")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("STORE_BACKEND", "Memory")
    monkeypatch.setenv("SEED_USERS", "no")
    s = Settings.from_env()
    assert s.mongo_uri == "mongodb://db:27017/store"
    assert s.port == 8080
    assert s.store_backend == "memory"
    assert s.seed_users is False


def test_settings_defaults(monkeypatch):
    for name in ("MONGO_URI", "PORT", "CORS_ORIGIN", "STORE_BACKEND", "SEED_USERS"):
        monkeypatch.delenv(name, raising=False)
    s = Settings.from_env()
    assert s.mongo_uri == "mongodb://localhost:27017/shop"
    assert s.port == 5000
    assert s.cors_origin == "http://localhost:3000"
    assert s.seed_users is True


def test_open_store_backends():
    assert isinstance(open_store(Settings(store_backend="memory")), MemoryStore)
    mongo = open_store(Settings(store_backend="mongo", mongo_uri="mongodb://db:27017/store"))
    assert isinstance(mongo, MongoStore)
    assert mongo.uri == "mongodb://db:27017/store"
    with pytest.raises(ValueError):
        open_store(Settings(store_backend="redis"))


def test_to_object_id():
    assert to_object_id("nope") is None
    assert to_object_id(None) is None
    assert str(to_object_id("5f1d7f3e9c1a2b3c4d5e6f70")) == "5f1d7f3e9c1a2b3c4d5e6f70"
