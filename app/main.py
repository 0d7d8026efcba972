"""FastAPI application entry point."""

import html
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from urllib.parse import quote

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1 import auth
from app.api.v1.router import api_router
from app.config import settings
from app.db.session import engine
from app.db.base import Base
from app.services.exceptions import (
    AuthExchangeFailedError,
    DomainNotAllowedError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    UnauthenticatedError,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    # Startup: Create database tables
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started")
    yield


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message, **extra},
    )


def _wants_json(request: Request) -> bool:
    return "/api/" in request.url.path or "application/json" in request.headers.get("accept", "")


def _login_url(request: Request) -> str:
    current = request.url.path
    if request.url.query:
        current = f"{current}?{request.url.query}"
    return f"{settings.LOGIN_PATH}?redirect={quote(current, safe='')}"


def _domain_denied_page(exc: DomainNotAllowedError) -> str:
    domain = html.escape(exc.allowed_domain)
    email = html.escape(exc.email)
    return f"""<!DOCTYPE html>
<html>
<head><title>Access Denied</title></head>
<body>
  <h1>Access Denied</h1>
  <p>This application is restricted to <strong>{domain}</strong> email addresses only.</p>
  <p>You attempted to sign in with: <strong>{email}</strong></p>
  <p><a href="/">Return to Home</a></p>
</body>
</html>
"""


def register_exception_handlers(app: FastAPI) -> None:
    """Map service-layer exceptions onto HTTP responses."""

    @app.exception_handler(UnauthenticatedError)
    async def unauthenticated_handler(request: Request, exc: UnauthenticatedError):
        login_url = _login_url(request)
        if _wants_json(request):
            return _error(status.HTTP_401_UNAUTHORIZED, exc.message, login_url=login_url)
        return RedirectResponse(login_url, status_code=status.HTTP_302_FOUND)

    @app.exception_handler(ForbiddenError)
    async def forbidden_handler(request: Request, exc: ForbiddenError):
        return _error(status.HTTP_403_FORBIDDEN, exc.message)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, exc.message)

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return _error(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(InvalidStateError)
    async def invalid_state_handler(request: Request, exc: InvalidStateError):
        return _error(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(DomainNotAllowedError)
    async def domain_not_allowed_handler(request: Request, exc: DomainNotAllowedError):
        return HTMLResponse(_domain_denied_page(exc), status_code=status.HTTP_403_FORBIDDEN)

    @app.exception_handler(AuthExchangeFailedError)
    async def auth_exchange_failed_handler(request: Request, exc: AuthExchangeFailedError):
        logger.error(f"Login failed: {exc.message}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Authentication failed")

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error(status.HTTP_400_BAD_REQUEST, message, errors=jsonable_errors(errors))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Database error on {request.method} {request.url.path}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def jsonable_errors(errors: list) -> list[dict]:
    """Keep only the serialisable parts of validation errors."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in errors
    ]


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Campus lost & found bulletin with Google sign-in and post moderation.",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    register_exception_handlers(app)

    app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return app


app = create_application()


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
