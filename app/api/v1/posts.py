"""Post endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.v1.dependencies import get_post_service, get_request_context, parse_id
from app.models.post import PostType
from app.schemas.common import MessageResponse
from app.schemas.post import (
    PostCreate,
    PostCreatedResponse,
    PostListResponse,
    PostResponse,
    PostUpdate,
)
from app.services.context import RequestContext
from app.services.post_service import PostService

router = APIRouter()


@router.get(
    "",
    response_model=PostListResponse,
    summary="List posts",
    description="""
    List all posts, newest first, optionally filtered by type.

    Posts are returned regardless of approval status; the status is
    included on every post.
    """,
)
def list_posts(
    type: Optional[PostType] = Query(default=None, description="Filter by 'lost' or 'found'"),
    post_service: PostService = Depends(get_post_service),
) -> PostListResponse:
    posts = post_service.list_posts(type)
    return PostListResponse(
        count=len(posts),
        posts=[PostResponse.model_validate(post) for post in posts],
    )


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    summary="Get a post",
)
def get_post(
    post_id: str,
    post_service: PostService = Depends(get_post_service),
) -> PostResponse:
    post = post_service.get_post(parse_id(post_id, "Post"))
    return PostResponse.model_validate(post)


@router.post(
    "",
    response_model=PostCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a post",
    description="""
    Create a lost or found post owned by the current user.

    Posts by admins are approved immediately; everyone else's start as
    pending.
    """,
)
def create_post(
    data: PostCreate,
    ctx: RequestContext = Depends(get_request_context),
    post_service: PostService = Depends(get_post_service),
) -> PostCreatedResponse:
    post = post_service.create_post(ctx, data)
    return PostCreatedResponse(id=post.id, admin_approval_status=post.admin_approval_status)


@router.put(
    "/{post_id}",
    response_model=MessageResponse,
    summary="Update a post",
    description="""
    Update fields of a post. Only the creator or an admin may update it,
    and only an admin may change `admin_approval_status`.
    """,
)
def update_post(
    post_id: str,
    data: PostUpdate,
    ctx: RequestContext = Depends(get_request_context),
    post_service: PostService = Depends(get_post_service),
) -> MessageResponse:
    post_service.update_post(ctx, parse_id(post_id, "Post"), data)
    return MessageResponse(message="Post updated successfully")


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    summary="Delete a post",
    description="Delete a post and its comments. Only the creator or an admin may delete it.",
)
def delete_post(
    post_id: str,
    ctx: RequestContext = Depends(get_request_context),
    post_service: PostService = Depends(get_post_service),
) -> MessageResponse:
    post_service.delete_post(ctx, parse_id(post_id, "Post"))
    return MessageResponse(message="Post deleted successfully")
