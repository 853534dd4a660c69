"""Persistence layer."""

from auth_api.repositories.session_repository import SessionRepository
from auth_api.repositories.user_repository import UserRepository

__all__ = ["SessionRepository", "UserRepository"]
