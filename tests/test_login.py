# tests/test_login.py
import asyncio

from shopfront import services


def test_login_roles(client):
    assert client.post("/login", json={"username": "admin", "password": "admin123"}).json() == {"role": "admin"}
    assert client.post("/login", json={"username": "user", "password": "user123"}).json() == {"role": "user"}


def test_login_wrong_password(client):
    for username in ("admin", "user", "nobody"):
        r = client.post("/login", json={"username": username, "password": "wrong"})
        assert r.status_code == 401
        assert r.json() == {"error": "Invalid credentials"}


def test_login_cross_user_password(client):
    r = client.post("/login", json={"username": "admin", "password": "user123"})
    assert r.status_code == 401


def test_login_without_body(client):
    assert client.post("/login").status_code == 401


def test_seed_runs_once(client, store):
    assert asyncio.run(services.seed_users(store)) == 0
    assert len(store.users) == 2


def test_login_rejects_query_operators(client):
    for body in (
        {"username": {"$ne": None}, "password": {"$ne": None}},
        {"username": "admin", "password": {"$gt": ""}},
        {"username": "admin", "password": 123},
    ):
        r = client.post("/login", json=body)
        assert r.status_code == 401
        assert r.json() == {"error": "Invalid credentials"}
