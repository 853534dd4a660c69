"""Security utilities for password hashing, JWT and reset tokens."""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from jose import JWTError, jwt
from starlette.concurrency import run_in_threadpool
from structlog import get_logger

from auth_api.config import settings
from auth_api.core.exceptions import InternalServerException, InvalidTokenException

logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Password hashing (Argon2id)
password_hasher = PasswordHasher()


async def hash_password(password: str) -> str:
    """
    Hash a password.

    Args:
        password: Plaintext password

    Returns:
        Encoded Argon2id hash

    Raises:
        InternalServerException: If the input is not a non-empty string or hashing fails
    """
    if not isinstance(password, str) or not password:
        raise InternalServerException()

    try:
        return await run_in_threadpool(password_hasher.hash, password)
    except Exception as e:
        logger.error("password_hash_failed", error=str(e))
        raise InternalServerException() from e


async def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hash.

    A wrong password returns ``False``. A malformed stored hash is a server
    fault and raises instead.

    Raises:
        InternalServerException: If the stored hash cannot be parsed
    """
    if not isinstance(hashed_password, str) or not isinstance(plain_password, str):
        raise InternalServerException()

    try:
        return await run_in_threadpool(password_hasher.verify, hashed_password, plain_password)
    except VerifyMismatchError:
        return False
    except (InvalidHashError, VerificationError) as e:
        logger.error("password_verify_failed", error=str(e))
        raise InternalServerException() from e


def _create_token(
    data: dict[str, Any],
    secret: str,
    token_type: str,
    expires_delta: timedelta,
) -> str:
    now = datetime.now(UTC)
    to_encode = data.copy()
    to_encode.update(
        {
            "exp": now + expires_delta,
            "iat": now,
            "type": token_type,
            # Makes every issued token distinct, even within the same second
            "jti": uuid4().hex,
        }
    )

    try:
        return jwt.encode(to_encode, secret, algorithm=settings.jwt_algorithm)
    except (JWTError, TypeError, ValueError) as e:
        logger.error("token_signing_failed", token_type=token_type, error=str(e))
        raise InternalServerException() from e


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode ({"sub", "email", "role"})
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    return _create_token(data, settings.jwt_access_secret_key, ACCESS_TOKEN_TYPE, expires_delta)


def create_refresh_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a JWT refresh token.

    Args:
        data: Claims to encode ({"sub", "email", "role"})
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT refresh token
    """
    if expires_delta is None:
        expires_delta = timedelta(days=settings.refresh_token_expire_days)

    return _create_token(data, settings.jwt_refresh_secret_key, REFRESH_TOKEN_TYPE, expires_delta)


def _decode_token(token: str, secret: str, token_type: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.jwt_algorithm],
        )
    except (JWTError, AttributeError, TypeError) as e:
        # Bad signature, malformed structure and expiry all look the same to callers
        raise InvalidTokenException() from e

    if payload.get("type") != token_type or not payload.get("sub"):
        raise InvalidTokenException()

    return payload


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT access token.

    Raises:
        InvalidTokenException: If the token is invalid, expired or not an access token
    """
    return _decode_token(token, settings.jwt_access_secret_key, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT refresh token.

    Raises:
        InvalidTokenException: If the token is invalid, expired or not a refresh token
    """
    return _decode_token(token, settings.jwt_refresh_secret_key, REFRESH_TOKEN_TYPE)


def token_claims(user: dict[str, Any]) -> dict[str, Any]:
    """Build the minimal claim set for a user record."""
    return {"sub": str(user["id"]), "email": user["email"], "role": user["role"]}


def generate_password_reset_token() -> str:
    """Generate a 256-bit password reset token from the OS CSPRNG."""
    return secrets.token_hex(32)
