"""Authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Cookie, Response, status
from fastapi.responses import RedirectResponse

from auth_api.config import settings
from auth_api.core.cookies import clear_refresh_token_cookie, set_refresh_token_cookie
from auth_api.core.exceptions import InvalidRefreshTokenException, UnauthorizedException
from auth_api.dependencies import AuthServiceDep, CurrentUserId, GoogleOAuthClientDep
from auth_api.schemas.auth import (
    AccessTokenResponse,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
)
from auth_api.schemas.common import ApiResponse

router = APIRouter()

RESET_REQUESTED_MESSAGE = "If this email exists, a reset link has been sent."


@router.post(
    "/login",
    response_model=ApiResponse[AccessTokenResponse],
    status_code=status.HTTP_200_OK,
    summary="User login",
)
async def login(
    payload: LoginRequest,
    response: Response,
    auth_service: AuthServiceDep,
) -> ApiResponse[AccessTokenResponse]:
    """
    Authenticate with email and password.

    The access token is returned in the body; the refresh token is set as an
    HTTP-only cookie.
    """
    tokens = await auth_service.login(payload.email, payload.password)
    set_refresh_token_cookie(response, tokens.refresh_token)

    return ApiResponse(data=AccessTokenResponse.from_tokens(tokens), message="Login success")


@router.post(
    "/refresh",
    response_model=ApiResponse[AccessTokenResponse],
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
)
async def refresh_token(
    auth_service: AuthServiceDep,
    refresh_cookie: Annotated[str | None, Cookie(alias=settings.refresh_cookie_name)] = None,
) -> ApiResponse[AccessTokenResponse]:
    """Issue a new access token using the refresh token cookie."""
    if not refresh_cookie:
        raise InvalidRefreshTokenException()

    tokens = await auth_service.refresh(refresh_cookie)

    return ApiResponse(data=AccessTokenResponse.from_tokens(tokens), message="Token refreshed")


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    status_code=status.HTTP_200_OK,
    summary="Logout",
)
async def logout(
    response: Response,
    user_id: CurrentUserId,
    auth_service: AuthServiceDep,
) -> ApiResponse[None]:
    """Remove the stored refresh token and clear the cookie."""
    await auth_service.logout(user_id)
    clear_refresh_token_cookie(response)

    return ApiResponse(data=None, message="Logged out successfully")


@router.get(
    "/google",
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    summary="Start Google login",
)
async def google_login(google_client: GoogleOAuthClientDep) -> RedirectResponse:
    """Redirect the browser to Google's consent screen."""
    return RedirectResponse(google_client.authorization_url())


@router.get(
    "/google/callback",
    response_model=ApiResponse[AccessTokenResponse],
    status_code=status.HTTP_200_OK,
    summary="Google OAuth callback",
)
async def google_callback(
    response: Response,
    auth_service: AuthServiceDep,
    google_client: GoogleOAuthClientDep,
    code: str | None = None,
    error: str | None = None,
) -> ApiResponse[AccessTokenResponse]:
    """Finish Google login: exchange the code, log in or register, set the cookie."""
    if error or not code:
        raise UnauthorizedException("Google authentication failed")

    profile = await google_client.fetch_profile(code)
    tokens = await auth_service.login_with_google(profile)
    set_refresh_token_cookie(response, tokens.refresh_token)

    return ApiResponse(
        data=AccessTokenResponse.from_tokens(tokens),
        message="Google login success",
    )


@router.post(
    "/forgot-password",
    response_model=ApiResponse[None],
    status_code=status.HTTP_200_OK,
    summary="Request password reset email",
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    auth_service: AuthServiceDep,
) -> ApiResponse[None]:
    """Send a reset link. The reply does not reveal whether the email exists."""
    await auth_service.request_password_reset(payload.email)

    return ApiResponse(data=None, message=RESET_REQUESTED_MESSAGE)


@router.post(
    "/reset-password",
    response_model=ApiResponse[None],
    status_code=status.HTTP_200_OK,
    summary="Reset password",
)
async def reset_password(
    payload: ResetPasswordRequest,
    auth_service: AuthServiceDep,
) -> ApiResponse[None]:
    """Set a new password using the emailed reset token."""
    await auth_service.reset_password(payload.token, payload.new_password)

    return ApiResponse(data=None, message="Password has been reset successfully.")
