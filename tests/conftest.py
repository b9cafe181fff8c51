import os
import tempfile
from types import SimpleNamespace

# Point the engine at a throwaway SQLite file before anything imports db.
_DB_DIR = tempfile.mkdtemp(prefix="task-lists-")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR}/test.db"
os.environ.setdefault("JWT_SECRET", "test-secret")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import insert

from api_client import ApiClient
from db import engine, metadata, users, gen_id, now_ts, ensure_default_list
from main import app
from security import hash_password, create_token

PASSWORD = "secret123"
_PW_HASH = hash_password(PASSWORD)  # bcrypt is slow; hash once per session


def make_user(username: str) -> SimpleNamespace:
    uid = gen_id()
    with engine.begin() as conn:
        conn.execute(insert(users).values(id=uid, username=username, password_hash=_PW_HASH, created_at=now_ts()))
        default_list_id = ensure_default_list(conn, uid)
    token = create_token(uid)
    return SimpleNamespace(
        id=uid,
        username=username,
        token=token,
        headers={"Authorization": f"Bearer {token}"},
        default_list_id=default_list_id,
    )


@pytest.fixture(autouse=True)
def fresh_db():
    metadata.drop_all(engine)
    metadata.create_all(engine)
    yield


@pytest.fixture
def alice():
    return make_user("alice")


@pytest.fixture
def bob():
    return make_user("bob")


@pytest.fixture
def anon_client():
    """Unauthenticated TestClient."""
    return TestClient(app)


@pytest.fixture
def client(alice):
    """TestClient authenticated as alice."""
    return TestClient(app, headers=alice.headers)


@pytest.fixture
def bob_client(bob):
    return TestClient(app, headers=bob.headers)


@pytest.fixture
async def api(alice):
    """ApiClient for alice, talking to the app in-process."""
    transport = httpx.ASGITransport(app=app)
    async with ApiClient(base_url="http://testserver/api", token=alice.token, transport=transport) as c:
        yield c


def create_list(client, name: str) -> dict:
    resp = client.post("/api/lists", json={"name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_task(client, list_id: str, title: str) -> dict:
    resp = client.post(f"/api/lists/{list_id}/tasks", json={"title": title})
    assert resp.status_code == 201, resp.text
    return resp.json()


def list_tasks(client, list_id: str) -> list:
    resp = client.get(f"/api/lists/{list_id}/tasks")
    assert resp.status_code == 200, resp.text
    return resp.json()
