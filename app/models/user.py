"""User model."""

from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.types import TypeDecorator

from app.db.base import Base, generate_id, utcnow


class UserRole(str, PyEnum):
    """Enumeration of assignable user roles."""

    USER = "user"
    ADMIN = "admin"


class LegacyAdminFlag(TypeDecorator):
    """
    Pre-migration ``is_admin`` column.

    Old rows hold booleans, integers or strings. Stored values are returned
    untouched so the role resolver can interpret them strictly.
    """

    impl = Integer
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if isinstance(value, bool):
            return int(value)
        return value

    def process_result_value(self, value, dialect):
        return value


class User(Base):
    """User authenticated through Google, owner of posts and comments."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)

    # Google account subject, unknown until the first login
    external_id = Column(String(255), unique=True, nullable=True)

    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    picture = Column(String(2048), nullable=True)
    phone = Column(String(20), nullable=True)

    # Free-form in older rows ("Admin", "ADMIN", ...); NULL means unset
    role = Column(String(20), nullable=True)

    # Legacy admin flag, only populated on rows created before `role` existed
    is_admin = Column(LegacyAdminFlag(), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
