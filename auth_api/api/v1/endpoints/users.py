"""User endpoints."""

from fastapi import APIRouter, Response, status

from auth_api.core.cookies import clear_refresh_token_cookie
from auth_api.dependencies import AdminClaims, CurrentUserId, UserServiceDep
from auth_api.schemas.common import ApiResponse
from auth_api.schemas.users import UserCreate, UserResponse, UserUpdate

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserCreate,
    user_service: UserServiceDep,
) -> ApiResponse[UserResponse]:
    """Register a local account."""
    user = await user_service.create_user(user_data)
    return ApiResponse(data=user, message="User created", code=status.HTTP_201_CREATED)


@router.get("", response_model=ApiResponse[list[UserResponse]])
async def list_users(
    _admin: AdminClaims,
    user_service: UserServiceDep,
) -> ApiResponse[list[UserResponse]]:
    """List all users that are not soft-deleted. Admin only."""
    return ApiResponse(data=await user_service.list_users())


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_current_user_profile(
    user_id: CurrentUserId,
    user_service: UserServiceDep,
) -> ApiResponse[UserResponse]:
    """Get current user's profile."""
    return ApiResponse(data=await user_service.get_user_by_id(user_id))


@router.patch("/me", response_model=ApiResponse[UserResponse])
async def update_current_user_profile(
    user_data: UserUpdate,
    user_id: CurrentUserId,
    user_service: UserServiceDep,
) -> ApiResponse[UserResponse]:
    """Update current user's profile."""
    user = await user_service.update_user(user_id, user_data)
    return ApiResponse(data=user, message="User updated")


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_current_user(
    user_id: CurrentUserId,
    user_service: UserServiceDep,
) -> Response:
    """Soft delete the current user and end the session."""
    await user_service.soft_delete_user(user_id)

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_refresh_token_cookie(response)
    return response


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user(
    user_id: str,
    _current_user_id: CurrentUserId,
    user_service: UserServiceDep,
) -> ApiResponse[UserResponse]:
    """Get a user's public profile by ID."""
    return ApiResponse(data=await user_service.get_user_by_id(user_id))
