"""Google OAuth 2.0 authorization-code client."""

from urllib.parse import urlencode

import httpx
from pydantic import BaseModel
from structlog import get_logger

from auth_api.config import Settings, settings
from auth_api.core.exceptions import UnauthorizedException

logger = get_logger(__name__)


class GoogleProfile(BaseModel):
    """Profile fields the auth flow consumes from Google."""

    id: str
    email: str | None = None
    name: str | None = None


class GoogleOAuthClient:
    """Runs the server side of Google's authorization-code flow."""

    AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
    SCOPES = ("openid", "email", "profile")

    def __init__(self, config: Settings = settings):
        self.config = config

    def authorization_url(self) -> str:
        """Build the consent screen URL the browser is redirected to."""
        params = {
            "client_id": self.config.google_client_id,
            "redirect_uri": self.config.google_redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.SCOPES),
            "access_type": "online",
            "prompt": "select_account",
        }
        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> GoogleProfile:
        """
        Exchange an authorization code and fetch the user's profile.

        Args:
            code: Authorization code from the OAuth callback

        Returns:
            Google profile (id, email, name)

        Raises:
            UnauthorizedException: If Google rejects the code or the profile request
        """
        async with httpx.AsyncClient(timeout=10.0) as client:
            try:
                token_res = await client.post(
                    GoogleOAuthClient.TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": self.config.google_client_id,
                        "client_secret": self.config.google_client_secret,
                        "redirect_uri": self.config.google_redirect_uri,
                        "grant_type": "authorization_code",
                    },
                )
                token_res.raise_for_status()
                access_token = token_res.json()["access_token"]

                userinfo_res = await client.get(
                    GoogleOAuthClient.USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                userinfo_res.raise_for_status()
                userinfo = userinfo_res.json()

                return GoogleProfile(
                    id=userinfo["sub"],
                    email=userinfo.get("email"),
                    name=userinfo.get("name"),
                )
            except (httpx.HTTPError, KeyError, ValueError) as e:
                logger.warning("google_oauth_exchange_failed", error=str(e))
                raise UnauthorizedException("Google authentication failed") from e
