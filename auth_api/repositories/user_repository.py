"""Data access for the users table."""

from datetime import datetime
from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from auth_api.core.exceptions import EmailAlreadyExistsException
from auth_api.models.users import UserProvider, users, utcnow


class UserRepository:
    """Lookups and writes on user rows.

    Every method returns plain dicts (or ``None``) and commits its own write.
    Soft-deleted users are invisible to lookups unless stated otherwise.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _fetch_one(self, query: Executable) -> dict[str, Any] | None:
        result = await self.db.execute(query)
        row = result.mappings().first()
        return dict(row) if row else None

    async def _write(self, query: Executable) -> dict[str, Any] | None:
        result = await self.db.execute(query)
        await self.db.commit()
        row = result.mappings().first()
        return dict(row) if row else None

    async def find_all(self) -> list[dict[str, Any]]:
        """All users that are not soft-deleted, oldest first."""
        query = select(users).where(users.c.deleted_at.is_(None)).order_by(users.c.created_at)
        result = await self.db.execute(query)
        return [dict(row) for row in result.mappings().all()]

    async def find_by_id(self, user_id: str) -> dict[str, Any] | None:
        query = select(users).where(users.c.id == user_id, users.c.deleted_at.is_(None))
        return await self._fetch_one(query)

    async def find_by_email(
        self, email: str, include_deleted: bool = False
    ) -> dict[str, Any] | None:
        """
        Find a user by exact email.

        Args:
            email: Email as stored (case-sensitive)
            include_deleted: Also match soft-deleted users (uniqueness checks)
        """
        query = select(users).where(users.c.email == email)
        if not include_deleted:
            query = query.where(users.c.deleted_at.is_(None))
        return await self._fetch_one(query)

    async def find_by_google_id(self, google_id: str) -> dict[str, Any] | None:
        query = select(users).where(
            users.c.provider == UserProvider.GOOGLE.value,
            users.c.google_id == google_id,
            users.c.deleted_at.is_(None),
        )
        return await self._fetch_one(query)

    async def _write_unique(self, query: Executable, email: str | None) -> dict[str, Any] | None:
        """
        Run a write that may collide with an existing email.

        Raises:
            EmailAlreadyExistsException: The email was taken by a concurrent write
            IntegrityError: Any other constraint violation
        """
        try:
            return await self._write(query)
        except IntegrityError:
            await self.db.rollback()
            if email and await self.find_by_email(email, include_deleted=True):
                raise EmailAlreadyExistsException() from None
            raise

    async def create(self, **values: Any) -> dict[str, Any]:
        """
        Insert a user and return the stored row.

        Raises:
            EmailAlreadyExistsException: If the email is already registered
        """
        query = insert(users).values(**values).returning(users)
        user = await self._write_unique(query, values.get("email"))

        if not user:
            raise ValueError("Failed to create user")

        return user

    async def update(self, user_id: str, **values: Any) -> dict[str, Any] | None:
        """Update a live user; returns ``None`` when no such user exists."""
        query = (
            update(users)
            .where(users.c.id == user_id, users.c.deleted_at.is_(None))
            .values(**values, updated_at=utcnow())
            .returning(users)
        )
        return await self._write_unique(query, values.get("email"))

    async def soft_delete(self, user_id: str) -> dict[str, Any] | None:
        """Mark a user deleted and drop its session."""
        return await self.update(user_id, deleted_at=utcnow(), refresh_token=None)

    async def set_password_reset_token(
        self, user_id: str, token: str, expires: datetime
    ) -> dict[str, Any] | None:
        return await self.update(
            user_id,
            reset_password_token=token,
            reset_password_token_expires=expires,
        )

    async def find_by_password_reset_token(self, token: str) -> dict[str, Any] | None:
        """Find the user holding ``token``; expired tokens do not match."""
        query = select(users).where(
            users.c.reset_password_token == token,
            users.c.reset_password_token_expires > utcnow(),
            users.c.deleted_at.is_(None),
        )
        return await self._fetch_one(query)

    async def clear_password_reset_token(self, user_id: str) -> dict[str, Any] | None:
        return await self.update(
            user_id,
            reset_password_token=None,
            reset_password_token_expires=None,
        )

    async def reset_password(self, user_id: str, token: str, password_hash: str) -> bool:
        """
        Store a new password hash and clear the reset pair in one write.

        The update repeats the token and expiry predicate, so only one caller
        can consume a given token.

        Returns:
            True if the token was still valid and the password was changed
        """
        query = (
            update(users)
            .where(
                users.c.id == user_id,
                users.c.reset_password_token == token,
                users.c.reset_password_token_expires > utcnow(),
                users.c.deleted_at.is_(None),
            )
            .values(
                password_hash=password_hash,
                reset_password_token=None,
                reset_password_token_expires=None,
                updated_at=utcnow(),
            )
            .returning(users.c.id)
        )
        return await self._write(query) is not None
