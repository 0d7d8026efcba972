"""Identity provider abstraction and the Google OAuth2 implementation."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx

from app.config import settings
from app.services.exceptions import AuthExchangeFailedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityProfile:
    """Profile returned by the identity provider for a signed-in account."""

    subject: str
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None


class IdentityProvider(ABC):
    """
    Abstract interface to an OAuth2 identity provider.

    Allows the login flow to be tested without talking to Google.
    """

    @abstractmethod
    def authorization_url(self, state: str, domain_hint: Optional[str] = None) -> str:
        """
        Build the URL the browser is redirected to for sign-in.

        Args:
            state: One-time CSRF state token
            domain_hint: Hosted domain to preselect (e.g. "wit.edu")

        Returns:
            Absolute authorization URL
        """
        pass

    @abstractmethod
    def exchange_code(self, code: str) -> IdentityProfile:
        """
        Exchange an authorization code for the account profile.

        Args:
            code: Authorization code from the callback

        Returns:
            IdentityProfile of the signed-in account

        Raises:
            AuthExchangeFailedError: If the exchange or profile lookup fails
        """
        pass


class GoogleIdentityProvider(IdentityProvider):
    """Google OAuth2 (authorization code flow) implementation."""

    SCOPES = ("openid", "email", "profile")

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the Google provider.

        Args:
            client_id: OAuth client id (defaults to settings)
            client_secret: OAuth client secret (defaults to settings)
            redirect_uri: Registered callback URL (defaults to settings)
            timeout: HTTP timeout in seconds (defaults to settings)
            http_client: Preconfigured httpx client, mainly for tests
        """
        self.client_id = client_id or settings.GOOGLE_CLIENT_ID
        self.client_secret = client_secret or settings.GOOGLE_CLIENT_SECRET
        self.redirect_uri = redirect_uri or settings.GOOGLE_REDIRECT_URI
        self.timeout = timeout or settings.OAUTH_HTTP_TIMEOUT
        self._http_client = http_client

    def authorization_url(self, state: str, domain_hint: Optional[str] = None) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.SCOPES),
            "access_type": "offline",
            "prompt": "select_account consent",
            "state": state,
        }
        if domain_hint:
            params["hd"] = domain_hint
        return f"{settings.GOOGLE_AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> IdentityProfile:
        client = self._http_client or httpx.Client(timeout=self.timeout)
        try:
            token_response = client.post(
                settings.GOOGLE_TOKEN_URL,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                },
            )
            token_response.raise_for_status()
            token = token_response.json()
            if "error" in token or "access_token" not in token:
                raise AuthExchangeFailedError(
                    f"Error fetching access token: {token.get('error', 'missing access_token')}"
                )

            userinfo_response = client.get(
                settings.GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {token['access_token']}"},
            )
            userinfo_response.raise_for_status()
            info = userinfo_response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Google OAuth exchange failed: {e}")
            raise AuthExchangeFailedError("Failed to exchange authorization code") from e
        finally:
            if self._http_client is None:
                client.close()

        subject = info.get("sub") or info.get("id")
        email = info.get("email")
        if not subject or not email:
            raise AuthExchangeFailedError("Identity provider returned an incomplete profile")

        return IdentityProfile(
            subject=str(subject),
            email=email,
            name=info.get("name"),
            picture=info.get("picture"),
        )
