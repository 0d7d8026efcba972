"""User endpoints."""

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_request_context, get_user_service, parse_id
from app.schemas.common import MessageResponse
from app.schemas.user import UserListResponse, UserResponse, UserUpdate
from app.services.context import RequestContext
from app.services.user_service import UserService

router = APIRouter()


@router.get(
    "",
    response_model=UserListResponse,
    summary="List users",
    description="Admin only.",
)
def list_users(
    ctx: RequestContext = Depends(get_request_context),
    user_service: UserService = Depends(get_user_service),
) -> UserListResponse:
    users = user_service.list_users(ctx)
    return UserListResponse(
        count=len(users),
        users=[UserResponse.model_validate(u) for u in users],
    )


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user profile",
    description="Users can view their own profile; admins can view any.",
)
def get_user(
    user_id: str,
    ctx: RequestContext = Depends(get_request_context),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = user_service.get_profile(ctx, parse_id(user_id, "User"))
    return UserResponse.model_validate(user)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update a user profile",
    description="""
    Users may change their own name, picture and phone.
    Admins may additionally change email and role on any profile.
    """,
)
def update_user(
    user_id: str,
    data: UserUpdate,
    ctx: RequestContext = Depends(get_request_context),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = user_service.update_user(
        ctx,
        parse_id(user_id, "User"),
        data.model_dump(exclude_unset=True, exclude_none=True),
    )
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete a user",
    description="Users may delete themselves; admins may delete anyone except the last admin.",
)
def delete_user(
    user_id: str,
    ctx: RequestContext = Depends(get_request_context),
    user_service: UserService = Depends(get_user_service),
) -> MessageResponse:
    user_service.delete_user(ctx, parse_id(user_id, "User"))
    return MessageResponse(message="User deleted successfully")
