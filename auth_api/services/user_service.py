"""User service for account registration and profile management."""

from structlog import get_logger

from auth_api.core.exceptions import (
    BadRequestException,
    EmailAlreadyExistsException,
    UserNotFoundException,
)
from auth_api.core.redis_client import CacheManager
from auth_api.core.security import hash_password
from auth_api.models.users import UserProvider, UserRole
from auth_api.repositories.user_repository import UserRepository
from auth_api.schemas.users import UserCreate, UserResponse, UserUpdate

logger = get_logger(__name__)


class UserService:
    """Service for user operations."""

    # Cache TTL in seconds (30 minutes for user profiles)
    USER_CACHE_TTL = 1800

    def __init__(self, user_repository: UserRepository, cache_manager: CacheManager | None = None):
        """Initialize service with repository and optional cache manager."""
        self.user_repository = user_repository
        self.cache = cache_manager

    @staticmethod
    def _get_user_cache_key(user_id: str) -> str:
        """Generate cache key for user."""
        return f"user:{user_id}"

    async def _invalidate(self, user_id: str) -> None:
        if self.cache:
            await self.cache.delete(self._get_user_cache_key(user_id))

    async def create_user(self, user_data: UserCreate) -> UserResponse:
        """
        Register a local user.

        Raises:
            EmailAlreadyExistsException: If the email is already registered
        """
        existing = await self.user_repository.find_by_email(user_data.email, include_deleted=True)
        if existing:
            raise EmailAlreadyExistsException()

        user = await self.user_repository.create(
            email=user_data.email,
            name=user_data.name,
            password_hash=await hash_password(user_data.password),
            provider=UserProvider.LOCAL.value,
            role=UserRole.USER.value,
        )

        logger.info("user_registered", user_id=user["id"])
        return UserResponse.from_record(user)

    async def get_user_by_id(self, user_id: str) -> UserResponse:
        """
        Get a user's public profile, cached.

        Raises:
            UserNotFoundException: If the user does not exist
        """
        cache_key = self._get_user_cache_key(user_id)

        if self.cache:
            cached_user = await self.cache.get_json(cache_key)
            if cached_user:
                return UserResponse.model_validate(cached_user)

        user = await self.user_repository.find_by_id(user_id)
        if not user:
            raise UserNotFoundException()

        profile = UserResponse.from_record(user)

        if self.cache:
            await self.cache.set_json(
                cache_key, profile.model_dump(mode="json"), ttl=self.USER_CACHE_TTL
            )

        return profile

    async def list_users(self) -> list[UserResponse]:
        """List all users that are not soft-deleted."""
        return [UserResponse.from_record(user) for user in await self.user_repository.find_all()]

    async def update_user(self, user_id: str, user_data: UserUpdate) -> UserResponse:
        """
        Update the user's email, name or password.

        Raises:
            UserNotFoundException: If the user does not exist
            EmailAlreadyExistsException: If the new email belongs to another user
            BadRequestException: If a password is set on a Google account
        """
        user = await self.user_repository.find_by_id(user_id)
        if not user:
            raise UserNotFoundException()

        changes = user_data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return UserResponse.from_record(user)

        if "email" in changes and changes["email"] != user["email"]:
            if await self.user_repository.find_by_email(changes["email"], include_deleted=True):
                raise EmailAlreadyExistsException()

        if "password" in changes:
            if user["provider"] != UserProvider.LOCAL.value:
                raise BadRequestException("Password cannot be set on a Google account")
            changes["password_hash"] = await hash_password(changes.pop("password"))

        updated = await self.user_repository.update(user_id, **changes)
        if not updated:
            raise UserNotFoundException()

        await self._invalidate(user_id)
        return UserResponse.from_record(updated)

    async def soft_delete_user(self, user_id: str) -> None:
        """
        Soft delete a user and end its session.

        Raises:
            UserNotFoundException: If the user does not exist
        """
        deleted = await self.user_repository.soft_delete(user_id)
        if not deleted:
            raise UserNotFoundException()

        await self._invalidate(user_id)
        logger.info("user_soft_deleted", user_id=user_id)
