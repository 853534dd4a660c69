"""FastAPI dependencies."""

from typing import Annotated, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth_api.core.exceptions import (
    ForbiddenException,
    InvalidTokenException,
    UnauthenticatedException,
)
from auth_api.core.google_oauth import GoogleOAuthClient
from auth_api.core.mailer import Mailer
from auth_api.core.redis_client import CacheManager, get_redis_client
from auth_api.core.security import decode_access_token
from auth_api.database import get_db
from auth_api.models.users import UserRole
from auth_api.repositories.session_repository import SessionRepository
from auth_api.repositories.user_repository import UserRepository
from auth_api.services.auth_service import AuthService
from auth_api.services.password_reset_service import PasswordResetService
from auth_api.services.user_service import UserService

# Security
security = HTTPBearer(auto_error=False)

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict[str, Any]:
    """
    Verify the bearer access token and return its claims.

    Raises:
        UnauthenticatedException: If the header is missing or the token is invalid
    """
    if credentials is None:
        raise UnauthenticatedException()

    try:
        return decode_access_token(credentials.credentials)
    except InvalidTokenException as e:
        raise UnauthenticatedException() from e


async def get_current_user_id(
    claims: Annotated[dict[str, Any], Depends(get_current_claims)],
) -> str:
    """User ID of the authenticated caller."""
    return str(claims["sub"])


async def require_admin(
    claims: Annotated[dict[str, Any], Depends(get_current_claims)],
) -> dict[str, Any]:
    """Allow only callers whose token carries the admin role."""
    if claims.get("role") != UserRole.ADMIN.value:
        raise ForbiddenException("Admin role required")
    return claims


def get_cache_manager() -> CacheManager:
    return CacheManager(get_redis_client())


def get_mailer() -> Mailer:
    return Mailer()


def get_google_oauth_client() -> GoogleOAuthClient:
    return GoogleOAuthClient()


def get_user_repository(db: DatabaseSession) -> UserRepository:
    return UserRepository(db)


def get_session_repository(db: DatabaseSession) -> SessionRepository:
    return SessionRepository(db)


def get_password_reset_service(
    user_repository: Annotated[UserRepository, Depends(get_user_repository)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> PasswordResetService:
    return PasswordResetService(user_repository, mailer)


def get_auth_service(
    user_repository: Annotated[UserRepository, Depends(get_user_repository)],
    session_repository: Annotated[SessionRepository, Depends(get_session_repository)],
    password_reset_service: Annotated[PasswordResetService, Depends(get_password_reset_service)],
) -> AuthService:
    return AuthService(user_repository, session_repository, password_reset_service)


def get_user_service(
    user_repository: Annotated[UserRepository, Depends(get_user_repository)],
    cache_manager: Annotated[CacheManager, Depends(get_cache_manager)],
) -> UserService:
    return UserService(user_repository, cache_manager)


# Type aliases for dependency injection
CurrentUserId = Annotated[str, Depends(get_current_user_id)]
AdminClaims = Annotated[dict[str, Any], Depends(require_admin)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
GoogleOAuthClientDep = Annotated[GoogleOAuthClient, Depends(get_google_oauth_client)]
