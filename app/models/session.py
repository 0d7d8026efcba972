"""Server-side login session model."""

from sqlalchemy import Boolean, Column, DateTime, String

from app.db.base import Base, utcnow


class AuthSession(Base):
    """
    Server-side session bound to a browser cookie.

    Besides the logged-in identity, the row carries the transient OAuth
    handshake fields (state token and post-login redirect) which are
    cleared as soon as they are consumed.
    """

    __tablename__ = "auth_sessions"

    # Random token, also the cookie value
    id = Column(String(64), primary_key=True)

    user_id = Column(String(36), nullable=True, index=True)
    email = Column(String(255), nullable=True)
    name = Column(String(255), nullable=True)
    picture = Column(String(2048), nullable=True)
    logged_in = Column(Boolean, nullable=False, default=False)

    oauth_state = Column(String(64), nullable=True)
    oauth_redirect = Column(String(2048), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<AuthSession(user_id={self.user_id}, logged_in={self.logged_in})>"
