"""Authentication schemas."""

from pydantic import EmailStr, Field

from auth_api.schemas.common import CamelModel


class LoginRequest(CamelModel):
    """Email/password login request."""

    email: EmailStr
    password: str = Field(..., min_length=6)


class ForgotPasswordRequest(CamelModel):
    """Password reset email request."""

    email: EmailStr


class ResetPasswordRequest(CamelModel):
    """Password reset using the emailed token."""

    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)


class AuthTokens(CamelModel):
    """Token pair issued by the auth service.

    ``refresh_token`` is only set when a new session was created; it travels
    to the client as a cookie, never in the JSON body.
    """

    access_token: str
    refresh_token: str | None = None
    expires_in: int


class AccessTokenResponse(CamelModel):
    """Token payload returned in the response body."""

    access_token: str
    expires_in: int = Field(..., description="Access token lifetime in seconds")

    @classmethod
    def from_tokens(cls, tokens: AuthTokens) -> "AccessTokenResponse":
        return cls(access_token=tokens.access_token, expires_in=tokens.expires_in)
