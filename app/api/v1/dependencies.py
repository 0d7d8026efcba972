"""API dependencies for dependency injection."""

import re
from typing import Optional

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from app.config import settings
from app.db.session import get_db
from app.identity.provider import GoogleIdentityProvider, IdentityProvider
from app.services.comment_service import CommentService
from app.services.context import RequestContext
from app.services.exceptions import InvalidInputError
from app.services.notification_service import NotificationService
from app.services.oauth_service import OAuthService
from app.services.post_service import PostService
from app.services.role_resolver import RoleResolver
from app.services.session_service import SessionService
from app.services.user_service import UserService

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def parse_id(value: Optional[str], resource: str = "Resource") -> str:
    """Validate an id taken from the request; malformed ids never reach the store."""
    value = (value or "").strip()
    if not UUID_PATTERN.match(value):
        raise InvalidInputError(f"Valid {resource} ID (UUID) is required")
    return value


def get_session_token(request: Request) -> Optional[str]:
    """Session token carried in the cookie, if any."""
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def set_session_cookie(response: Response, request: Request, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_LIFETIME_SECONDS,
        path="/",
        httponly=True,
        samesite="lax",
        secure=request.url.scheme == "https",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/", httponly=True, samesite="lax")


def get_identity_provider() -> IdentityProvider:
    """Get identity provider client."""
    return GoogleIdentityProvider()


def get_session_service(db: Session = Depends(get_db)) -> SessionService:
    """Get session service instance."""
    return SessionService(db)


def get_role_resolver(db: Session = Depends(get_db)) -> RoleResolver:
    """Get role resolver instance."""
    return RoleResolver(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Get user service instance."""
    return UserService(db)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """Get notification service instance."""
    return NotificationService(db)


def get_post_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> PostService:
    """Get post service instance."""
    return PostService(db, notifications)


def get_comment_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> CommentService:
    """Get comment service instance."""
    return CommentService(db, notifications)


def get_oauth_service(
    session_service: SessionService = Depends(get_session_service),
    user_service: UserService = Depends(get_user_service),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> OAuthService:
    """Get OAuth login service instance."""
    return OAuthService(session_service, user_service, identity_provider)


def get_request_context(
    token: Optional[str] = Depends(get_session_token),
    session_service: SessionService = Depends(get_session_service),
    role_resolver: RoleResolver = Depends(get_role_resolver),
) -> RequestContext:
    """
    Resolve who is acting on this request.

    The admin flag is looked up from the store on every request.

    Raises:
        UnauthenticatedError: If there is no logged-in session
    """
    record = session_service.authenticate(token)
    return RequestContext(
        user_id=record.user_id,
        is_admin=role_resolver.is_admin(record.user_id),
        email=record.email,
        name=record.name,
        picture=record.picture,
    )
