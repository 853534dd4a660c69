"""Tests for the uniform error envelope."""

import json

import pytest
from starlette.requests import Request

from auth_api.core.exceptions import AppException, InvalidLoginException
from auth_api.middleware.error_handler import app_exception_handler, general_exception_handler


def _request(path: str = "/api/v1/test") -> Request:
    return Request({"type": "http", "method": "GET", "path": path, "headers": [], "query_string": b""})


@pytest.mark.asyncio
async def test_operational_error_returned_verbatim():
    response = await app_exception_handler(_request(), InvalidLoginException())

    assert response.status_code == 401
    assert json.loads(response.body) == {
        "data": None,
        "message": "Invalid email or password",
        "code": 401,
    }


@pytest.mark.asyncio
async def test_non_operational_error_is_masked():
    exc = AppException("connection string leaked", status_code=503, is_operational=False)

    response = await app_exception_handler(_request(), exc)

    assert response.status_code == 500
    assert json.loads(response.body) == {
        "data": None,
        "message": "Internal server error",
        "code": 500,
    }


@pytest.mark.asyncio
async def test_unexpected_exception_is_masked():
    response = await general_exception_handler(_request(), RuntimeError("secret detail"))

    assert response.status_code == 500
    body = json.loads(response.body)
    assert body["message"] == "Internal server error"
    assert "secret detail" not in response.body.decode()


@pytest.mark.asyncio
async def test_unknown_route_uses_envelope(client):
    response = await client.get("/api/v1/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"data": None, "message": "Not Found", "code": 404}


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "ok"
    assert response.headers["X-Request-ID"]
