"""Administrator resolution over current and legacy role storage."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


def is_legacy_admin_value(value: Any) -> bool:
    """
    Interpret a legacy ``is_admin`` value.

    Only boolean ``True``, integer ``1`` and the string ``"1"`` count.
    """
    if value is True:
        return True
    if isinstance(value, int) and not isinstance(value, bool):
        return value == 1
    return value == "1"


class RoleStrategy(ABC):
    """One way of deciding admin status; ``None`` means no answer."""

    name: str = "strategy"

    @abstractmethod
    def resolve(self, db: Session, user_id: str) -> Optional[bool]:
        pass


class RoleColumnStrategy(RoleStrategy):
    """Reads the ``role`` column. A non-null value is always definitive."""

    name = "role"

    def resolve(self, db: Session, user_id: str) -> Optional[bool]:
        row = db.query(User.role).filter(User.id == user_id).first()
        if row is None or row.role is None:
            return None
        return row.role.strip().lower() == UserRole.ADMIN.value


class LegacyFlagStrategy(RoleStrategy):
    """Falls back to the pre-migration ``is_admin`` column."""

    name = "is_admin"

    def resolve(self, db: Session, user_id: str) -> Optional[bool]:
        row = db.query(User.is_admin).filter(User.id == user_id).first()
        if row is None:
            return None
        return True if is_legacy_admin_value(row.is_admin) else None


DEFAULT_STRATEGIES: tuple[RoleStrategy, ...] = (
    RoleColumnStrategy(),
    LegacyFlagStrategy(),
)


class RoleResolver:
    """
    Decide whether a user is an administrator.

    Strategies are tried in order and the first definitive answer wins.
    Anything else, including a storage failure, resolves to non-admin.
    """

    def __init__(self, db: Session, strategies: Sequence[RoleStrategy] = DEFAULT_STRATEGIES):
        """
        Initialize the resolver.

        Args:
            db: SQLAlchemy database session
            strategies: Lookups to try, in order
        """
        self.db = db
        self.strategies = tuple(strategies)

    def is_admin(self, user_id: Optional[str]) -> bool:
        if not user_id:
            return False

        try:
            for strategy in self.strategies:
                answer = strategy.resolve(self.db, user_id)
                if answer is not None:
                    return answer
        except SQLAlchemyError as e:
            logger.error(f"Role lookup failed for user {user_id}: {e}")
            self.db.rollback()
            return False

        return False
