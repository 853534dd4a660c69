"""User schemas for request/response validation."""

from datetime import datetime
from typing import Any

from pydantic import EmailStr, Field

from auth_api.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Schema for registering a local user."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1)


class UserUpdate(CamelModel):
    """Schema for updating the current user. All fields optional."""

    email: EmailStr | None = None
    password: str | None = Field(None, min_length=8)
    name: str | None = Field(None, min_length=1)


class UserResponse(CamelModel):
    """User fields exposed to clients."""

    id: str
    email: str
    name: str
    role: str
    provider: str
    created_at: datetime

    @classmethod
    def from_record(cls, user: dict[str, Any]) -> "UserResponse":
        """Project a stored user row onto the public fields.

        Credentials, session and reset-token columns never leave this
        boundary because they are not copied.
        """
        return cls(
            id=str(user["id"]),
            email=user["email"],
            name=user["name"],
            role=user["role"],
            provider=user["provider"],
            created_at=user["created_at"],
        )
