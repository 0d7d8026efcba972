"""Approval workflow for posts."""

import logging
from typing import Union

from app.models.post import ApprovalStatus
from app.services.context import RequestContext
from app.services.exceptions import ForbiddenError, InvalidInputError

logger = logging.getLogger(__name__)


def parse_status(value: Union[str, ApprovalStatus]) -> ApprovalStatus:
    """Map a raw value onto ApprovalStatus, rejecting anything unknown."""
    if isinstance(value, ApprovalStatus):
        return value
    try:
        return ApprovalStatus(str(value).strip().lower())
    except ValueError:
        raise InvalidInputError(
            "Approval status must be one of: pending, approved, rejected"
        )


def initial_status(creator_is_admin: bool) -> ApprovalStatus:
    """
    Status a new post starts in.

    Admin posts skip moderation. The value is fixed at creation and is not
    recomputed if the creator's role changes later.
    """
    return ApprovalStatus.APPROVED if creator_is_admin else ApprovalStatus.PENDING


def transition(
    ctx: RequestContext,
    current: Union[str, ApprovalStatus],
    requested: Union[str, ApprovalStatus],
) -> ApprovalStatus:
    """
    Validate an explicit status change requested on a post.

    Any state may move to any other state, but only an admin may move it.

    Returns:
        The new status
    """
    target = parse_status(requested)
    if not ctx.is_admin:
        logger.warning(f"Denied approval change to {target.value} by non-admin {ctx.user_id}")
        raise ForbiddenError("Only admins can change the approval status of a post")

    source = parse_status(current)
    if source != target:
        logger.info(f"Approval status {source.value} -> {target.value} by admin {ctx.user_id}")
    return target
