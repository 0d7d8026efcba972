"""Google login flow guarded by one-time state tokens."""

import logging
import secrets
from typing import Optional

from app.config import settings
from app.identity.provider import IdentityProvider
from app.models.session import AuthSession
from app.models.user import User
from app.services.exceptions import (
    DomainNotAllowedError,
    InvalidInputError,
    InvalidStateError,
)
from app.services.session_service import SessionService
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT = "/"


def safe_redirect_target(target: Optional[str]) -> str:
    """Keep post-login redirects on this site."""
    if not target:
        return DEFAULT_REDIRECT
    target = target.strip()
    if not target.startswith("/") or target.startswith("//") or "\\" in target:
        return DEFAULT_REDIRECT
    return target


def email_in_domain(email: str, allowed_domain: str) -> bool:
    """
    Case-insensitive suffix match, e.g. ``person@WIT.edu`` against ``@wit.edu``.

    The domain is anchored at ``@`` whether or not the setting includes it.
    """
    domain = (allowed_domain or "").strip().lower().lstrip("@")
    if not domain:
        return False
    return email.strip().lower().endswith(f"@{domain}")


class OAuthService:
    """
    Drives the authorization code flow.

    ``begin_login`` stores a random state token in the session and
    ``complete_login`` accepts the callback only if it returns that exact
    token. The token is discarded on first use, so a replayed callback fails.
    """

    def __init__(
        self,
        session_service: SessionService,
        user_service: UserService,
        identity_provider: IdentityProvider,
        allowed_domain: Optional[str] = None,
    ):
        """
        Initialize the OAuth service.

        Args:
            session_service: Session service the login attempt is bound to
            user_service: User service used for the login upsert
            identity_provider: Provider that issues and redeems codes
            allowed_domain: Email domain allowed to sign in (defaults to settings)
        """
        self.sessions = session_service
        self.users = user_service
        self.provider = identity_provider
        self.allowed_domain = allowed_domain if allowed_domain is not None else settings.ALLOWED_EMAIL_DOMAIN

    @property
    def domain_hint(self) -> Optional[str]:
        return self.allowed_domain.lstrip("@") or None

    def begin_login(self, record: AuthSession, redirect_target: Optional[str] = None) -> str:
        """
        Start a login attempt.

        Args:
            record: Session the attempt is bound to
            redirect_target: Where to send the user after login

        Returns:
            Identity provider authorization URL
        """
        state = secrets.token_hex(16)
        self.sessions.store_oauth_state(record, state, safe_redirect_target(redirect_target))
        return self.provider.authorization_url(state, domain_hint=self.domain_hint)

    def complete_login(
        self,
        record: Optional[AuthSession],
        returned_state: Optional[str],
        code: Optional[str],
    ) -> tuple[User, AuthSession, str]:
        """
        Finish a login attempt from the provider callback.

        Args:
            record: Session that started the attempt (None if the cookie is gone)
            returned_state: ``state`` query parameter
            code: ``code`` query parameter

        Returns:
            Tuple of (user, new logged-in session, redirect target)

        Raises:
            InvalidStateError: State missing or not the one issued
            InvalidInputError: No authorization code
            AuthExchangeFailedError: Code exchange failed; no user is touched
            DomainNotAllowedError: Email outside the allowed domain
        """
        expected = record.oauth_state if record is not None else None
        if not returned_state or not expected or not secrets.compare_digest(returned_state.encode(), expected.encode()):
            logger.warning("OAuth callback rejected: state mismatch")
            raise InvalidStateError()

        # Single use, whatever happens next
        self.sessions.clear_oauth_state(record)

        if not code:
            raise InvalidInputError("Authorization code not provided")

        profile = self.provider.exchange_code(code)

        if not email_in_domain(profile.email, self.allowed_domain):
            logger.warning(f"OAuth login rejected for {profile.email}: outside {self.allowed_domain}")
            raise DomainNotAllowedError(profile.email, self.allowed_domain)

        user = self.users.upsert_from_profile(profile)
        session = self.sessions.establish(record, user)
        redirect = self.sessions.pop_redirect(session, DEFAULT_REDIRECT)

        logger.info(f"User {user.id} logged in")
        return user, session, redirect
