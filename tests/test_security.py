"""Tests for password hashing, JWT issuance and reset token generation."""

from datetime import timedelta

import pytest
from jose import jwt

from auth_api.config import settings
from auth_api.core.exceptions import InternalServerException, InvalidTokenException
from auth_api.core.security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    generate_password_reset_token,
    hash_password,
    verify_password,
)

CLAIMS = {"sub": "user-1", "email": "u@test.com", "role": "user"}


@pytest.mark.asyncio
async def test_hash_and_verify_password():
    hashed = await hash_password("correct horse")

    assert hashed.startswith("$argon2id$")
    assert hashed != "correct horse"
    assert await verify_password("correct horse", hashed) is True
    assert await verify_password("wrong horse", hashed) is False


@pytest.mark.asyncio
async def test_hash_is_salted():
    assert await hash_password("same-password") != await hash_password("same-password")


@pytest.mark.asyncio
async def test_verify_malformed_hash_is_server_error():
    with pytest.raises(InternalServerException):
        await verify_password("anything", "not-an-argon2-hash")


@pytest.mark.asyncio
async def test_hash_empty_password_is_server_error():
    with pytest.raises(InternalServerException):
        await hash_password("")


def test_token_lifetimes():
    access = jwt.get_unverified_claims(create_access_token(CLAIMS))
    refresh = jwt.get_unverified_claims(create_refresh_token(CLAIMS))

    assert access["exp"] - access["iat"] == 15 * 60
    assert refresh["exp"] - refresh["iat"] == 7 * 24 * 60 * 60
    assert access["type"] == "access"
    assert refresh["type"] == "refresh"
    assert access["sub"] == "user-1"
    assert access["email"] == "u@test.com"
    assert access["role"] == "user"


def test_tokens_are_unique():
    assert create_refresh_token(CLAIMS) != create_refresh_token(CLAIMS)


def test_decode_round_trip():
    payload = decode_access_token(create_access_token(CLAIMS))

    assert payload["sub"] == "user-1"


def test_expired_token_rejected():
    token = create_access_token(CLAIMS, expires_delta=timedelta(seconds=-1))

    with pytest.raises(InvalidTokenException):
        decode_access_token(token)


def test_tokens_use_separate_secrets():
    assert settings.jwt_access_secret_key != settings.jwt_refresh_secret_key

    with pytest.raises(InvalidTokenException):
        decode_access_token(create_refresh_token(CLAIMS))

    with pytest.raises(InvalidTokenException):
        decode_refresh_token(create_access_token(CLAIMS))


def test_wrong_token_type_rejected():
    # Correct secret, wrong "type" claim
    token = jwt.encode(
        {**CLAIMS, "type": "refresh"},
        settings.jwt_access_secret_key,
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(InvalidTokenException):
        decode_access_token(token)


def test_garbage_token_rejected():
    with pytest.raises(InvalidTokenException):
        decode_refresh_token("not.a.jwt")


def test_password_reset_token_entropy():
    token = generate_password_reset_token()

    assert len(token) == 64
    int(token, 16)
    assert token != generate_password_reset_token()
