"""
Authentication endpoint tests - registration, login and bearer-token
resolution, including the structured ``{"error": ...}`` failure bodies.
"""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register(async_client: AsyncClient):
    resp = await async_client.post("/register", json={
        "name": "Alice",
        "email": "a@x.com",
        "password": "secret",
    })
    assert resp.status_code == 200
    user = resp.json()
    assert user["name"] == "Alice"
    assert user["email"] == "a@x.com"
    assert "id" in user
    assert "password" not in user
    assert "password_hash" not in user


@pytest.mark.asyncio
async def test_register_duplicate_email_returns_422(async_client: AsyncClient):
    payload = {"name": "Alice", "email": "a@x.com", "password": "secret"}
    assert (await async_client.post("/register", json=payload)).status_code == 200

    resp = await async_client.post("/register", json={**payload, "name": "Imposter"})
    assert resp.status_code == 422
    assert "already registered" in resp.json()["error"]


@pytest.mark.asyncio
async def test_register_malformed_body_returns_400(async_client: AsyncClient):
    resp = await async_client.post("/register", json={"name": "NoEmail"})
    assert resp.status_code == 400
    assert "error" in resp.json()


@pytest.mark.asyncio
async def test_register_non_json_body_returns_400(async_client: AsyncClient):
    resp = await async_client.post(
        "/register", content=b"not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_returns_token(async_client: AsyncClient):
    await async_client.post("/register", json={
        "name": "Alice", "email": "a@x.com", "password": "secret",
    })
    resp = await async_client.post("/login", json={"email": "a@x.com", "password": "secret"})
    assert resp.status_code == 200
    token = resp.json()["token"]
    assert len(token) == 8
    assert token.isalnum() and token == token.lower()


@pytest.mark.asyncio
async def test_login_wrong_password_returns_422(async_client: AsyncClient):
    await async_client.post("/register", json={
        "name": "Alice", "email": "a@x.com", "password": "secret",
    })
    resp = await async_client.post("/login", json={"email": "a@x.com", "password": "nope"})
    assert resp.status_code == 422
    assert resp.json() == {"error": "invalid login"}


@pytest.mark.asyncio
async def test_login_unknown_email_returns_422(async_client: AsyncClient):
    resp = await async_client.post("/login", json={"email": "ghost@x.com", "password": "x"})
    assert resp.status_code == 422
    assert "not found" in resp.json()["error"]


@pytest.mark.asyncio
async def test_token_resolves_to_same_user(async_client: AsyncClient, register_and_login):
    user_id, headers = await register_and_login("a@x.com")

    resp = await async_client.post("/posts", json={"title": "Mine", "content": "C"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["author_id"] == user_id


# ---------------------------------------------------------------------------
# Bearer token enforcement
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_missing_token_returns_401(async_client: AsyncClient):
    resp = await async_client.post("/posts", json={"title": "T", "content": "C"})
    assert resp.status_code == 401
    assert "error" in resp.json()


@pytest.mark.asyncio
async def test_unknown_token_returns_401(async_client: AsyncClient):
    resp = await async_client.post(
        "/posts",
        json={"title": "T", "content": "C"},
        headers={"Authorization": "Bearer abcd1234"},
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_non_bearer_scheme_returns_401(async_client: AsyncClient):
    resp = await async_client.delete("/posts/1", headers={"Authorization": "Basic abc"})
    assert resp.status_code == 401
