"""Comment endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.v1.dependencies import get_comment_service, get_request_context, parse_id
from app.schemas.comment import (
    CommentCreate,
    CommentEnvelope,
    CommentListResponse,
    CommentResponse,
    CommentUpdate,
)
from app.schemas.common import MessageResponse
from app.services.comment_service import CommentService
from app.services.context import RequestContext
from app.services.exceptions import InvalidInputError

router = APIRouter()


@router.get(
    "",
    response_model=CommentListResponse,
    summary="List comments on a post",
)
def list_comments(
    post_id: Optional[str] = Query(default=None, description="Post to list comments for"),
    comment_service: CommentService = Depends(get_comment_service),
) -> CommentListResponse:
    if post_id is None:
        raise InvalidInputError("post_id parameter is required")

    comments = comment_service.list_for_post(parse_id(post_id, "Post"))
    return CommentListResponse(
        count=len(comments),
        comments=[CommentResponse.model_validate(c) for c in comments],
    )


@router.get(
    "/{comment_id}",
    response_model=CommentResponse,
    summary="Get a comment",
)
def get_comment(
    comment_id: str,
    comment_service: CommentService = Depends(get_comment_service),
) -> CommentResponse:
    comment = comment_service.get_comment(parse_id(comment_id, "Comment"))
    return CommentResponse.model_validate(comment)


@router.post(
    "",
    response_model=CommentEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post",
)
def create_comment(
    data: CommentCreate,
    ctx: RequestContext = Depends(get_request_context),
    comment_service: CommentService = Depends(get_comment_service),
) -> CommentEnvelope:
    comment = comment_service.create_comment(ctx, parse_id(data.post_id, "Post"), data.content)
    return CommentEnvelope(
        message="Comment created successfully",
        comment=CommentResponse.model_validate(comment),
    )


@router.put(
    "/{comment_id}",
    response_model=CommentEnvelope,
    summary="Edit a comment",
    description="Only the comment's author or an admin may edit it.",
)
def update_comment(
    comment_id: str,
    data: CommentUpdate,
    ctx: RequestContext = Depends(get_request_context),
    comment_service: CommentService = Depends(get_comment_service),
) -> CommentEnvelope:
    comment = comment_service.update_comment(ctx, parse_id(comment_id, "Comment"), data.content)
    return CommentEnvelope(
        message="Comment updated successfully",
        comment=CommentResponse.model_validate(comment),
    )


@router.delete(
    "/{comment_id}",
    response_model=MessageResponse,
    summary="Delete a comment",
    description="Only the comment's author or an admin may delete it.",
)
def delete_comment(
    comment_id: str,
    ctx: RequestContext = Depends(get_request_context),
    comment_service: CommentService = Depends(get_comment_service),
) -> MessageResponse:
    comment_service.delete_comment(ctx, parse_id(comment_id, "Comment"))
    return MessageResponse(message="Comment deleted successfully")
