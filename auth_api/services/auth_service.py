"""Authentication service: login, refresh, logout, Google login, password reset."""

from typing import Any

from structlog import get_logger

from auth_api.config import Settings, settings
from auth_api.core.exceptions import (
    EmailAlreadyExistsException,
    InvalidLoginException,
    InvalidProfileException,
    InvalidRefreshTokenException,
    InvalidTokenException,
    UserNotFoundException,
)
from auth_api.core.google_oauth import GoogleProfile
from auth_api.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    token_claims,
    verify_password,
)
from auth_api.models.users import UserProvider, UserRole
from auth_api.repositories.session_repository import SessionRepository
from auth_api.repositories.user_repository import UserRepository
from auth_api.schemas.auth import AuthTokens
from auth_api.services.password_reset_service import PasswordResetService

logger = get_logger(__name__)


class AuthService:
    """Composes credentials, tokens, sessions and password reset into user flows."""

    def __init__(
        self,
        user_repository: UserRepository,
        session_repository: SessionRepository,
        password_reset_service: PasswordResetService,
        config: Settings = settings,
    ):
        """Initialize auth service with its collaborators."""
        self.user_repository = user_repository
        self.session_repository = session_repository
        self.password_reset_service = password_reset_service
        self.config = config

    async def _start_session(self, user: dict[str, Any]) -> AuthTokens:
        """Issue a token pair and make the refresh token the user's only session."""
        claims = token_claims(user)
        access_token = create_access_token(claims)
        refresh_token = create_refresh_token(claims)

        await self.session_repository.save(user["id"], refresh_token)

        return AuthTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.config.access_token_expire_seconds,
        )

    async def login(self, email: str, password: str) -> AuthTokens:
        """
        Authenticate with email and password.

        Args:
            email: Account email
            password: Plaintext password

        Returns:
            Access and refresh token pair

        Raises:
            InvalidLoginException: Unknown email, password-less account or wrong password
        """
        user = await self.user_repository.find_by_email(email)

        if not user or not user["password_hash"]:
            raise InvalidLoginException()

        if not await verify_password(password, user["password_hash"]):
            raise InvalidLoginException()

        tokens = await self._start_session(user)
        logger.info("login_succeeded", user_id=user["id"])
        return tokens

    async def refresh(self, refresh_token: str) -> AuthTokens:
        """
        Issue a new access token from the stored refresh token.

        The refresh token is not rotated.

        Raises:
            InvalidRefreshTokenException: Token fails verification or is not the stored session
        """
        try:
            payload = decode_refresh_token(refresh_token)
        except InvalidTokenException as e:
            raise InvalidRefreshTokenException() from e

        user = await self.session_repository.find_by_refresh_token(refresh_token)
        if not user or str(user["id"]) != payload["sub"]:
            raise InvalidRefreshTokenException()

        access_token = create_access_token(token_claims(user))

        return AuthTokens(
            access_token=access_token,
            expires_in=self.config.access_token_expire_seconds,
        )

    async def logout(self, user_id: str) -> None:
        """Invalidate the user's session. Idempotent."""
        await self.session_repository.remove(user_id)
        logger.info("logout_succeeded", user_id=user_id)

    async def login_with_google(self, profile: GoogleProfile) -> AuthTokens:
        """
        Log in, or register on first use, with a Google profile.

        Raises:
            InvalidProfileException: Profile has no email or name
            EmailAlreadyExistsException: The email belongs to a different account
        """
        if not profile.email or not profile.name:
            raise InvalidProfileException()

        user = await self.user_repository.find_by_google_id(profile.id)

        if not user:
            # Providers are immutable, so an existing account cannot be linked
            if await self.user_repository.find_by_email(profile.email, include_deleted=True):
                raise EmailAlreadyExistsException()

            try:
                user = await self.user_repository.create(
                    email=profile.email,
                    name=profile.name,
                    provider=UserProvider.GOOGLE.value,
                    google_id=profile.id,
                    role=UserRole.USER.value,
                    password_hash=None,
                )
            except EmailAlreadyExistsException:
                # A concurrent first login for the same Google account won the insert
                user = await self.user_repository.find_by_google_id(profile.id)
                if not user:
                    raise
            else:
                logger.info("google_user_provisioned", user_id=user["id"])

        tokens = await self._start_session(user)
        logger.info("google_login_succeeded", user_id=user["id"])
        return tokens

    async def request_password_reset(self, email: str) -> None:
        """
        Email a password reset link.

        Completes normally whether or not the email is registered.
        """
        try:
            await self.password_reset_service.request_reset(email)
        except UserNotFoundException:
            logger.info("password_reset_skipped_unknown_email")

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Reset the password with an emailed token.

        Raises:
            InvalidTokenException: Token unknown, expired or already used
        """
        await self.password_reset_service.consume_reset(token, new_password)
