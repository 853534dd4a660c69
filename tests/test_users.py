"""Tests for user registration, profile endpoints and profile caching."""

from unittest.mock import MagicMock

import pytest
import redis
from httpx import AsyncClient

from auth_api.core.redis_client import CacheManager
from auth_api.dependencies import get_cache_manager
from auth_api.main import app
from auth_api.repositories import UserRepository


@pytest.mark.asyncio
async def test_cache_manager_get_json():
    mock_redis = MagicMock()
    cache_manager = CacheManager(redis_client=mock_redis)

    mock_redis.get.return_value = None
    assert await cache_manager.get_json("user:1") is None
    mock_redis.get.assert_called_once_with("user:1")

    mock_redis.get.return_value = '{"name": "Test", "value": 123}'
    assert await cache_manager.get_json("user:1") == {"name": "Test", "value": 123}


@pytest.mark.asyncio
async def test_cache_manager_set_json_with_ttl():
    mock_redis = MagicMock()
    cache_manager = CacheManager(redis_client=mock_redis)

    assert await cache_manager.set_json("user:1", {"name": "Test"}, ttl=300) is True
    mock_redis.setex.assert_called_once_with("user:1", 300, '{"name": "Test"}')


@pytest.mark.asyncio
async def test_cache_manager_degrades_on_redis_errors():
    mock_redis = MagicMock()
    mock_redis.get.side_effect = redis.ConnectionError("redis down")
    mock_redis.setex.side_effect = redis.TimeoutError("redis slow")
    mock_redis.delete.side_effect = ConnectionRefusedError("redis down")
    cache_manager = CacheManager(redis_client=mock_redis)

    assert await cache_manager.get_json("user:1") is None
    assert await cache_manager.set_json("user:1", {}, ttl=10) is False
    assert await cache_manager.delete("user:1") is False


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient):
    response = await client.post(
        "/api/v1/users",
        json={"email": "new@example.com", "password": "password123", "name": "New User"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["code"] == 201
    assert body["message"] == "User created"
    assert body["data"]["email"] == "new@example.com"
    assert body["data"]["provider"] == "local"
    assert body["data"]["role"] == "user"
    assert "createdAt" in body["data"]
    for secret_field in ("password", "passwordHash", "refreshToken", "resetPasswordToken"):
        assert secret_field not in body["data"]

    login = await client.post(
        "/api/v1/auth/login",
        json={"email": "new@example.com", "password": "password123"},
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, test_user):
    response = await client.post(
        "/api/v1/users",
        json={"email": "u@test.com", "password": "password123", "name": "Dup"},
    )

    assert response.status_code == 409
    assert response.json() == {"data": None, "message": "Email already exists", "code": 409}


def _miss_first_email_lookup(monkeypatch):
    """Make the first email lookup miss, as when a concurrent request inserts
    the same email between the uniqueness check and the write."""
    original = UserRepository.find_by_email
    calls = []

    async def find_by_email(self, email, include_deleted=False):
        calls.append(email)
        if len(calls) == 1:
            return None
        return await original(self, email, include_deleted=include_deleted)

    monkeypatch.setattr(UserRepository, "find_by_email", find_by_email)
    return calls


@pytest.mark.asyncio
async def test_register_losing_concurrent_insert_is_conflict(
    client: AsyncClient, test_user, monkeypatch
):
    calls = _miss_first_email_lookup(monkeypatch)

    response = await client.post(
        "/api/v1/users",
        json={"email": "u@test.com", "password": "password123", "name": "Dup"},
    )

    assert len(calls) == 2
    assert response.status_code == 409
    assert response.json() == {"data": None, "message": "Email already exists", "code": 409}

    # The session stays usable after the rolled back insert
    retry = await client.post(
        "/api/v1/users",
        json={"email": "other@test.com", "password": "password123", "name": "Other"},
    )
    assert retry.status_code == 201


@pytest.mark.asyncio
async def test_email_change_losing_concurrent_write_is_conflict(
    client: AsyncClient, auth_headers, admin_user, monkeypatch
):
    _miss_first_email_lookup(monkeypatch)

    response = await client.patch(
        "/api/v1/users/me",
        headers=auth_headers,
        json={"email": "admin@test.com"},
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_get_me(client: AsyncClient, auth_headers, test_user):
    response = await client.get("/api/v1/users/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["id"] == test_user["id"]
    assert response.json()["data"]["email"] == "u@test.com"


@pytest.mark.asyncio
async def test_get_me_requires_auth(client: AsyncClient):
    response = await client.get("/api/v1/users/me")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_profile_is_cached(client: AsyncClient, auth_headers, test_user, fake_redis):
    first = await client.get("/api/v1/users/me", headers=auth_headers)

    assert f"user:{test_user['id']}" in fake_redis.store

    second = await client.get("/api/v1/users/me", headers=auth_headers)
    assert first.json() == second.json()


@pytest.mark.asyncio
async def test_update_invalidates_cache(client: AsyncClient, auth_headers, fake_redis):
    await client.get("/api/v1/users/me", headers=auth_headers)

    response = await client.patch(
        "/api/v1/users/me",
        headers=auth_headers,
        json={"name": "Renamed"},
    )
    assert response.status_code == 200
    assert response.json()["message"] == "User updated"
    assert response.json()["data"]["name"] == "Renamed"
    assert fake_redis.store == {}

    fresh = await client.get("/api/v1/users/me", headers=auth_headers)
    assert fresh.json()["data"]["name"] == "Renamed"


@pytest.mark.asyncio
async def test_update_password(client: AsyncClient, auth_headers):
    response = await client.patch(
        "/api/v1/users/me",
        headers=auth_headers,
        json={"password": "changed-password"},
    )
    assert response.status_code == 200

    login = await client.post(
        "/api/v1/auth/login",
        json={"email": "u@test.com", "password": "changed-password"},
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_update_email_conflict(client: AsyncClient, auth_headers, admin_user):
    response = await client.patch(
        "/api/v1/users/me",
        headers=auth_headers,
        json={"email": "admin@test.com"},
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_delete_me(client: AsyncClient, auth_headers):
    login = await client.post(
        "/api/v1/auth/login",
        json={"email": "u@test.com", "password": "pw123456"},
    )
    assert login.status_code == 200

    response = await client.delete("/api/v1/users/me", headers=auth_headers)
    assert response.status_code == 204

    assert (await client.get("/api/v1/users/me", headers=auth_headers)).status_code == 404
    relogin = await client.post(
        "/api/v1/auth/login",
        json={"email": "u@test.com", "password": "pw123456"},
    )
    assert relogin.status_code == 401


@pytest.mark.asyncio
async def test_list_users_admin_only(client: AsyncClient, auth_headers, admin_headers):
    forbidden = await client.get("/api/v1/users", headers=auth_headers)
    assert forbidden.status_code == 403

    allowed = await client.get("/api/v1/users", headers=admin_headers)
    assert allowed.status_code == 200
    emails = {user["email"] for user in allowed.json()["data"]}
    assert emails == {"u@test.com", "admin@test.com"}


@pytest.mark.asyncio
async def test_get_user_by_id(client: AsyncClient, auth_headers, admin_user):
    response = await client.get(f"/api/v1/users/{admin_user['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["role"] == "admin"

    missing = await client.get("/api/v1/users/does-not-exist", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["message"] == "User not found"


@pytest.mark.asyncio
async def test_profile_served_when_redis_is_down(client: AsyncClient, auth_headers, test_user):
    down = MagicMock()
    down.get.side_effect = redis.ConnectionError("redis down")
    down.setex.side_effect = redis.ConnectionError("redis down")
    app.dependency_overrides[get_cache_manager] = lambda: CacheManager(down)

    response = await client.get("/api/v1/users/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["id"] == test_user["id"]
