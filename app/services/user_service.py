"""User service for profiles and account management."""

import logging
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.base import utcnow
from app.identity.provider import IdentityProfile
from app.models.user import User, UserRole
from app.services.context import RequestContext
from app.services.exceptions import (
    InvalidInputError,
    LastAdminError,
    UserNotFoundError,
)
from app.services.ownership import (
    ensure_admin,
    ensure_can_access_user,
    filter_user_update,
    same_id,
)

logger = logging.getLogger(__name__)


def parse_role(value: Any) -> UserRole:
    try:
        return UserRole(str(value).strip().lower())
    except ValueError:
        raise InvalidInputError("Role must be either 'user' or 'admin'")


class UserService:
    """Service for user lookup, login upserts and profile management."""

    def __init__(self, db: Session):
        """
        Initialize the user service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def get_user_by_id(self, user_id: str) -> User:
        """
        Get user by ID.

        Raises:
            UserNotFoundError: If user doesn't exist
        """
        user = self.db.query(User).filter(User.id == user_id).first()

        if not user:
            raise UserNotFoundError(user_id)

        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email, ignoring case."""
        return self.db.query(User).filter(
            func.lower(User.email) == email.strip().lower()
        ).first()

    def upsert_from_profile(self, profile: IdentityProfile) -> User:
        """
        Create or refresh the local user for a signed-in Google account.

        Matches on the Google subject first, then on email.

        Args:
            profile: Profile returned by the identity provider

        Returns:
            The persisted User
        """
        user = self.db.query(User).filter(User.external_id == profile.subject).first()
        if user is None:
            user = self.get_user_by_email(profile.email)

        now = utcnow()
        if user is not None:
            user.external_id = profile.subject
            user.name = profile.name
            user.picture = profile.picture
            user.last_login_at = now
            logger.info(f"Updated user {user.id} from identity provider")
        else:
            user = User(
                external_id=profile.subject,
                email=profile.email.strip().lower(),
                name=profile.name,
                picture=profile.picture,
                last_login_at=now,
            )
            self.db.add(user)
            logger.info(f"Created user for {user.email}")

        self.db.commit()
        self.db.refresh(user)
        return user

    def list_users(self, ctx: RequestContext) -> list[User]:
        """List every user, newest first. Admin only."""
        ensure_admin(ctx, "Admin access required to list all users")
        return self.db.query(User).order_by(User.created_at.desc()).all()

    def get_profile(self, ctx: RequestContext, user_id: str) -> User:
        """Get a profile the current user may view (their own, or any for admins)."""
        ensure_can_access_user(ctx, user_id, action="view")
        return self.get_user_by_id(user_id)

    def update_user(self, ctx: RequestContext, user_id: str, changes: dict[str, Any]) -> User:
        """
        Update a user profile.

        Args:
            ctx: Current request context
            user_id: Target user ID
            changes: Requested field values

        Returns:
            Updated User instance

        Raises:
            UserNotFoundError: If the target doesn't exist
            ForbiddenError: Not self/admin, or admin-only fields from a non-admin
            InvalidInputError: Bad phone/role/email, or nothing to update
        """
        user = self.get_user_by_id(user_id)
        ensure_can_access_user(ctx, user.id, action="update")

        values = filter_user_update(ctx, changes)
        if not values:
            raise InvalidInputError("No fields to update")

        if "email" in values:
            values["email"] = values["email"].lower()
            clash = self.db.query(User.id).filter(
                func.lower(User.email) == values["email"],
                User.id != user.id,
            ).first()
            if clash:
                raise InvalidInputError("Email already in use")

        if "role" in values:
            role = parse_role(values["role"])
            values["role"] = role.value
            if role != UserRole.ADMIN and self._has_admin_role(user):
                self._ensure_not_last_admin("Cannot demote the last admin user")

        values["updated_at"] = utcnow()
        self.db.query(User).filter(User.id == user.id).update(values, synchronize_session="fetch")
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"User {user.id} updated by {ctx.user_id}: {sorted(values)}")
        return user

    def delete_user(self, ctx: RequestContext, user_id: str) -> None:
        """
        Delete a user account.

        The last remaining admin can never be deleted, not even by themselves.

        Raises:
            UserNotFoundError: If the target doesn't exist
            ForbiddenError: Not self/admin
            LastAdminError: Target is the only admin
        """
        user = self.get_user_by_id(user_id)
        ensure_can_access_user(ctx, user.id, action="delete")

        if self._has_admin_role(user):
            self._ensure_not_last_admin()

        self.db.query(User).filter(User.id == user.id).delete(synchronize_session="fetch")
        self.db.commit()

        if same_id(ctx.user_id, user_id):
            logger.info(f"User {user_id} deleted their own account")
        else:
            logger.info(f"User {user_id} deleted by admin {ctx.user_id}")

    def count_admins(self, lock: bool = False) -> int:
        query = self.db.query(User.id).filter(
            func.lower(func.trim(User.role)) == UserRole.ADMIN.value
        )
        if lock:
            query = query.with_for_update()
        return len(query.all())

    @staticmethod
    def _has_admin_role(user: User) -> bool:
        return user.role is not None and user.role.strip().lower() == UserRole.ADMIN.value

    def _ensure_not_last_admin(self, message: str = "Cannot delete the last admin user") -> None:
        # Locks the admin rows until the caller commits
        if self.count_admins(lock=True) <= 1:
            self.db.rollback()
            raise LastAdminError(message)
