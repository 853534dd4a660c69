"""Refresh token persistence (one active session per user)."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from auth_api.models.users import users, utcnow


class SessionRepository:
    """Stores the single active refresh token on the user row."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, user_id: str, refresh_token: str) -> None:
        """Overwrite the user's refresh token (last write wins)."""
        query = (
            update(users)
            .where(users.c.id == user_id)
            .values(refresh_token=refresh_token, updated_at=utcnow())
        )
        await self.db.execute(query)
        await self.db.commit()

    async def find_by_refresh_token(self, refresh_token: str) -> dict[str, Any] | None:
        """Find the live user whose stored token equals ``refresh_token``."""
        query = select(users).where(
            users.c.refresh_token == refresh_token,
            users.c.deleted_at.is_(None),
        )
        result = await self.db.execute(query)
        user = result.mappings().first()
        return dict(user) if user else None

    async def remove(self, user_id: str) -> None:
        """Clear the user's refresh token; a no-op if none is stored."""
        query = (
            update(users)
            .where(users.c.id == user_id)
            .values(refresh_token=None, updated_at=utcnow())
        )
        await self.db.execute(query)
        await self.db.commit()
