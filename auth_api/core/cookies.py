"""Refresh token cookie helpers."""

from fastapi import Response

from auth_api.config import settings


def set_refresh_token_cookie(response: Response, refresh_token: str) -> None:
    """Attach the refresh token as an HTTP-only cookie."""
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=refresh_token,
        max_age=settings.refresh_token_expire_seconds,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_refresh_token_cookie(response: Response) -> None:
    """Remove the refresh token cookie (logout)."""
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
