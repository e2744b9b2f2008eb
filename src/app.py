"""Main FastAPI application module.

This module initializes the FastAPI application, registers all route
handlers, and renders every failure as
``{"success": false, "error": <kind>, "message": <text>}``.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.logging_config import setup_logging
from config import (
    CORS_ALLOWED_ORIGINS,
    API_HOST,
    API_PORT,
)
from api.routes import channel_route, class_route, message_route
from core.database import init_db
from core.exceptions import ClassWorkspaceError
from core.identity import IdentityResolver

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def error_response(status_code: int, kind: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": kind, "message": message},
    )


async def workspace_error_handler(request: Request, exc: ClassWorkspaceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.kind)
    return error_response(exc.status_code, exc.kind, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"Invalid request: {location or 'body'} {errors[0].get('msg', '')}".strip()
    return error_response(400, "ValidationError", message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = "NotFound" if exc.status_code == 404 else "HTTPError"
    return error_response(exc.status_code, kind, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "InternalError", "Internal server error")


def create_app(identity_resolver: Optional[IdentityResolver] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        identity_resolver: Resolver for bearer tokens. A new one with its own
            cache is created when omitted.

    Returns:
        The configured application.
    """
    application = FastAPI(
        title="Class Workspace API",
        description="Classes, invitation codes, membership and channel messages.",
        version=API_VERSION,
    )
    application.state.identity_resolver = identity_resolver or IdentityResolver()

    # Configure CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(ClassWorkspaceError, workspace_error_handler)
    application.add_exception_handler(RequestValidationError, validation_error_handler)
    application.add_exception_handler(StarletteHTTPException, http_error_handler)
    application.add_exception_handler(Exception, unhandled_error_handler)

    # Register route handlers
    application.include_router(class_route.router)
    application.include_router(channel_route.router)
    application.include_router(message_route.router)

    @application.on_event("startup")
    def startup_tasks() -> None:
        """Create database tables."""
        init_db()

    @application.get("/api/health", summary="Health check", tags=["Health"])
    def health() -> dict:
        return {"status": "ok"}

    return application


# Setup logging
setup_logging()

app = create_app()


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{API_HOST}:{API_PORT}"
    logger.info("Starting Class Workspace API at %s (docs: %s/docs)", server_url, server_url)
    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
