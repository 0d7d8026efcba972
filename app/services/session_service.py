"""Server-side session management."""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.db.base import utcnow
from app.models.session import AuthSession
from app.models.user import User
from app.services.exceptions import UnauthenticatedError

logger = logging.getLogger(__name__)


def _as_aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SessionService:
    """Issues, validates and destroys login sessions."""

    def __init__(self, db: Session, lifetime_seconds: Optional[int] = None):
        """
        Initialize the session service.

        Args:
            db: SQLAlchemy database session
            lifetime_seconds: Session TTL (defaults to settings)
        """
        self.db = db
        self.lifetime = timedelta(seconds=lifetime_seconds or settings.SESSION_LIFETIME_SECONDS)

    @staticmethod
    def new_token() -> str:
        return secrets.token_urlsafe(32)

    def get(self, token: Optional[str]) -> Optional[AuthSession]:
        """
        Look up a live session by cookie token.

        Expired sessions are deleted on sight.

        Returns:
            AuthSession or None
        """
        if not token:
            return None

        record = self.db.query(AuthSession).filter(AuthSession.id == token).first()
        if record is None:
            return None

        if _as_aware(record.expires_at) <= utcnow():
            self.db.delete(record)
            self.db.commit()
            logger.info(f"Expired session for user {record.user_id} removed")
            return None

        return record

    def get_or_create(self, token: Optional[str]) -> AuthSession:
        """Return the live session for ``token`` or start an anonymous one."""
        record = self.get(token)
        if record is not None:
            return record

        record = AuthSession(
            id=self.new_token(),
            logged_in=False,
            expires_at=utcnow() + self.lifetime,
        )
        self.db.add(record)
        self.db.commit()
        return record

    def authenticate(self, token: Optional[str]) -> AuthSession:
        """
        Resolve the logged-in session for a request.

        Raises:
            UnauthenticatedError: If there is no live, logged-in session
        """
        record = self.get(token)
        if record is None or not record.logged_in or not record.user_id:
            raise UnauthenticatedError()
        return record

    def establish(self, record: AuthSession, user: User) -> AuthSession:
        """
        Bind a session to a user after a successful login.

        The session id is rotated; the pending redirect target is carried
        over so the callback can still consume it.

        Returns:
            The new AuthSession
        """
        fresh = AuthSession(
            id=self.new_token(),
            user_id=user.id,
            email=user.email,
            name=user.name,
            picture=user.picture,
            logged_in=True,
            oauth_redirect=record.oauth_redirect,
            expires_at=utcnow() + self.lifetime,
        )
        self.db.delete(record)
        self.db.add(fresh)
        self.db.commit()

        logger.info(f"Session established for user {user.id}")
        return fresh

    def store_oauth_state(self, record: AuthSession, state: str, redirect: str) -> None:
        record.oauth_state = state
        record.oauth_redirect = redirect
        self.db.commit()

    def clear_oauth_state(self, record: AuthSession) -> None:
        record.oauth_state = None
        self.db.commit()

    def pop_redirect(self, record: AuthSession, default: str = "/") -> str:
        redirect = record.oauth_redirect or default
        record.oauth_redirect = None
        self.db.commit()
        return redirect

    def destroy(self, token: Optional[str]) -> None:
        """Delete the session. Unknown or missing tokens are ignored."""
        if not token:
            return
        deleted = self.db.query(AuthSession).filter(AuthSession.id == token).delete()
        self.db.commit()
        if deleted:
            logger.info("Session destroyed")

    def introspect(self, token: Optional[str]) -> dict:
        """Describe the current login state for the session endpoint."""
        record = self.get(token)
        if record is None or not record.logged_in:
            return {"status": "success", "logged_in": False, "user": None}

        return {
            "status": "success",
            "logged_in": True,
            "user": {
                "id": record.user_id,
                "email": record.email,
                "name": record.name,
                "picture": record.picture,
            },
        }
