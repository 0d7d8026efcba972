"""Login, callback, logout and session endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

from app.api.v1.dependencies import (
    clear_session_cookie,
    get_oauth_service,
    get_session_service,
    get_session_token,
    set_session_cookie,
)
from app.schemas.user import SessionInfo
from app.services.oauth_service import OAuthService
from app.services.session_service import SessionService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/login",
    summary="Start Google sign-in",
    description="Redirects to Google. `redirect` is where to land after signing in.",
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND,
)
def login(
    request: Request,
    redirect: Optional[str] = Query(default="/", description="Post-login redirect target"),
    token: Optional[str] = Depends(get_session_token),
    session_service: SessionService = Depends(get_session_service),
    oauth_service: OAuthService = Depends(get_oauth_service),
) -> RedirectResponse:
    """Issue a state token and send the browser to the identity provider."""
    record = session_service.get_or_create(token)
    authorization_url = oauth_service.begin_login(record, redirect)

    response = RedirectResponse(authorization_url, status_code=status.HTTP_302_FOUND)
    set_session_cookie(response, request, record.id)
    return response


@router.get(
    "/callback",
    summary="Google sign-in callback",
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND,
)
def callback(
    request: Request,
    state: Optional[str] = Query(default=None),
    code: Optional[str] = Query(default=None),
    token: Optional[str] = Depends(get_session_token),
    session_service: SessionService = Depends(get_session_service),
    oauth_service: OAuthService = Depends(get_oauth_service),
) -> RedirectResponse:
    """
    Finish sign-in.

    Errors (bad state, foreign domain, failed exchange) are rendered by the
    application's exception handlers.
    """
    record = session_service.get(token)
    _, session, redirect = oauth_service.complete_login(record, state, code)

    response = RedirectResponse(redirect, status_code=status.HTTP_302_FOUND)
    set_session_cookie(response, request, session.id)
    return response


@router.api_route(
    "/logout",
    methods=["GET", "POST"],
    summary="Log out",
    description="Destroys the session. Always succeeds.",
)
def logout(
    token: Optional[str] = Depends(get_session_token),
    session_service: SessionService = Depends(get_session_service),
) -> JSONResponse:
    session_service.destroy(token)

    response = JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"status": "success", "message": "Logged out successfully"},
    )
    clear_session_cookie(response)
    return response


@router.get(
    "/session",
    response_model=SessionInfo,
    summary="Current session",
    description="Reports whether the browser is signed in and as whom.",
)
def session_info(
    token: Optional[str] = Depends(get_session_token),
    session_service: SessionService = Depends(get_session_service),
) -> dict:
    return session_service.introspect(token)


@router.options("/session", include_in_schema=False)
def session_preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK)
