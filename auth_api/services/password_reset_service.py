"""Password reset token lifecycle."""

import html
import smtplib
from datetime import timedelta
from urllib.parse import urlencode

from structlog import get_logger

from auth_api.config import Settings, settings
from auth_api.core.exceptions import (
    InternalServerException,
    InvalidTokenException,
    UserNotFoundException,
)
from auth_api.core.mailer import Mailer
from auth_api.core.security import generate_password_reset_token, hash_password
from auth_api.models.users import UserProvider, utcnow
from auth_api.repositories.user_repository import UserRepository

logger = get_logger(__name__)

RESET_EMAIL_SUBJECT = "Reset your password"


class PasswordResetService:
    """Issues, emails and consumes single-use password reset tokens."""

    def __init__(
        self,
        user_repository: UserRepository,
        mailer: Mailer,
        config: Settings = settings,
    ):
        self.user_repository = user_repository
        self.mailer = mailer
        self.config = config

    def _reset_link(self, token: str) -> str:
        base_url = self.config.frontend_url.rstrip("/")
        return f"{base_url}/reset-password?{urlencode({'token': token})}"

    def _reset_email_body(self, name: str, token: str) -> str:
        link = html.escape(self._reset_link(token))
        minutes = self.config.password_reset_token_expire_minutes
        return (
            f"<p>Hello {html.escape(name)},</p>"
            "<p>We received a request to reset your password.</p>"
            f'<p><a href="{link}">Reset your password</a></p>'
            f"<p>This link expires in {minutes} minutes. "
            "If you did not request a reset, you can ignore this email.</p>"
        )

    async def request_reset(self, email: str) -> str:
        """
        Create a reset token for ``email`` and email the reset link.

        The token is persisted before the email is sent. If sending fails the
        token is cleared again so that no unseen token stays valid.

        Args:
            email: Account email

        Returns:
            The issued reset token

        Raises:
            UserNotFoundException: No local account uses this email
            InternalServerException: The email could not be sent
        """
        user = await self.user_repository.find_by_email(email)

        # Google accounts have no password to reset
        if not user or user["provider"] != UserProvider.LOCAL.value:
            raise UserNotFoundException()

        token = generate_password_reset_token()
        expires = utcnow() + timedelta(minutes=self.config.password_reset_token_expire_minutes)
        await self.user_repository.set_password_reset_token(user["id"], token, expires)

        try:
            await self.mailer.send(
                user["email"],
                RESET_EMAIL_SUBJECT,
                self._reset_email_body(user["name"], token),
            )
        except (smtplib.SMTPException, OSError) as e:
            await self.user_repository.clear_password_reset_token(user["id"])
            logger.error("password_reset_email_failed", user_id=user["id"], error=str(e))
            raise InternalServerException("Failed to send password reset email") from e

        logger.info("password_reset_requested", user_id=user["id"])
        return token

    async def consume_reset(self, token: str, new_password: str) -> None:
        """
        Set a new password using a reset token, consuming the token.

        Raises:
            InvalidTokenException: Token unknown, expired or already used
        """
        user = await self.user_repository.find_by_password_reset_token(token)
        if not user:
            raise InvalidTokenException()

        password_hash = await hash_password(new_password)

        if not await self.user_repository.reset_password(user["id"], token, password_hash):
            # Consumed or expired between the lookup and the write
            raise InvalidTokenException()

        logger.info("password_reset_completed", user_id=user["id"])
