"""Ownership policy: who may mutate which resource."""

import logging
import re
from typing import Any, Optional

from app.services.context import RequestContext
from app.services.exceptions import ForbiddenError, InvalidInputError

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^[0-9\-\+\(\)\s]+$")
PHONE_MAX_LENGTH = 20

# Fields a user may change on their own profile
SELF_SERVICE_USER_FIELDS = frozenset({"name", "picture", "phone"})

# Fields only an administrator may change on any profile
ADMIN_ONLY_USER_FIELDS = frozenset({"email", "role"})


def normalize_id(value: Any) -> str:
    """Canonical form used when comparing ids from different storage paths."""
    return str(value).strip().lower()


def same_id(a: Optional[Any], b: Optional[Any]) -> bool:
    if a is None or b is None:
        return False
    return normalize_id(a) == normalize_id(b)


def can_mutate(actor_user_id: Optional[str], owner_user_id: Optional[str], actor_is_admin: bool) -> bool:
    """
    Admins may mutate anything; everyone else only what they own.

    A resource without an owner can only be mutated by an admin.
    """
    return actor_is_admin or same_id(actor_user_id, owner_user_id)


def ensure_can_mutate(ctx: RequestContext, owner_user_id: Optional[str], resource: str) -> None:
    """
    Raise ForbiddenError unless the acting user owns the resource or is admin.

    Args:
        ctx: Current request context
        owner_user_id: Owner recorded on the resource
        resource: Resource name used in the error message
    """
    if can_mutate(ctx.user_id, owner_user_id, ctx.is_admin):
        return

    logger.warning(
        f"Denied {resource} mutation: user {ctx.user_id} is not owner {owner_user_id} and not admin"
    )
    raise ForbiddenError(
        f"You do not have permission to modify this {resource}. "
        f"Only the {resource} creator or admins can modify it."
    )


def can_mutate_notification(actor_user_id: Optional[str], owner_user_id: Optional[str]) -> bool:
    """Notifications belong to their recipient only; admins get no override."""
    return same_id(actor_user_id, owner_user_id)


def ensure_can_access_notification(ctx: RequestContext, owner_user_id: Optional[str]) -> None:
    if not can_mutate_notification(ctx.user_id, owner_user_id):
        logger.warning(f"Denied notification access for user {ctx.user_id}")
        raise ForbiddenError("You do not have permission to update this notification")


def ensure_can_access_user(ctx: RequestContext, target_user_id: str, action: str = "update") -> None:
    """Users may act on their own profile; admins on any."""
    if not can_mutate(ctx.user_id, target_user_id, ctx.is_admin):
        logger.warning(f"Denied user {action}: {ctx.user_id} on {target_user_id}")
        raise ForbiddenError(f"You do not have permission to {action} this user profile")


def ensure_admin(ctx: RequestContext, message: str = "Admin access required") -> None:
    if not ctx.is_admin:
        logger.warning(f"Denied admin-only operation for user {ctx.user_id}")
        raise ForbiddenError(message)


def validate_phone(phone: str) -> str:
    phone = phone.strip()
    if not PHONE_PATTERN.match(phone) or len(phone) > PHONE_MAX_LENGTH:
        raise InvalidInputError("Invalid phone number format")
    return phone


def filter_user_update(ctx: RequestContext, changes: dict[str, Any]) -> dict[str, Any]:
    """
    Check a profile update against the field whitelist.

    Non-admins may only touch self-service fields; supplying ``email`` or
    ``role`` is refused outright. Unknown keys are dropped.

    Returns:
        The permitted subset of ``changes`` with values normalised
    """
    requested_admin_fields = ADMIN_ONLY_USER_FIELDS.intersection(changes)
    if requested_admin_fields and not ctx.is_admin:
        logger.warning(
            f"Denied admin-only profile fields {sorted(requested_admin_fields)} for user {ctx.user_id}"
        )
        raise ForbiddenError("Only admins can change email or role")

    allowed = SELF_SERVICE_USER_FIELDS | (ADMIN_ONLY_USER_FIELDS if ctx.is_admin else frozenset())
    permitted: dict[str, Any] = {}
    for field, value in changes.items():
        if field not in allowed or value is None:
            continue
        if field == "phone":
            value = validate_phone(value)
        elif isinstance(value, str):
            value = value.strip()
        permitted[field] = value

    return permitted
