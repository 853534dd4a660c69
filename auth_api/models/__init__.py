"""Database models."""

from auth_api.models.users import UserProvider, UserRole, metadata, users

__all__ = [
    "UserProvider",
    "UserRole",
    "metadata",
    "users",
]
