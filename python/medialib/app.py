"""FastAPI application creation and configuration.

This module creates and configures the FastAPI application instance.
It registers exception handlers, request-id middleware, and routes.

Startup:
- The placeholder item is ensured before the app serves requests, so no
  item deletion can run without its detach target.

Middleware Ordering:
- RequestIDMiddleware is added LAST so it runs FIRST (outermost)
- This ensures every response (including errors) gets X-Request-ID
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from medialib.api.routes import create_api_router
from medialib.config import get_settings
from medialib.db.session import get_session_factory, session_scope
from medialib.errors import ApiError, ApiErrorCode
from medialib.logging import configure_logging, get_logger
from medialib.middleware.request_id import RequestIDMiddleware
from medialib.responses import (
    api_error_handler,
    error_response,
    http_exception_handler,
    unhandled_exception_handler,
)
from medialib.services.bootstrap import ensure_placeholder_item

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ensure the placeholder item exists before serving requests."""
    with session_scope(app.state.session_factory) as db:
        placeholder_id = ensure_placeholder_item(db)
    logger.info("placeholder_item_ready", placeholder_id=str(placeholder_id))

    yield

    logger.info("app_shutdown")


def create_app(session_factory=None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        session_factory: Optional sessionmaker used for startup bootstrap
            (for testing). Defaults to the application session factory.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    configure_logging(json_format=settings.log_json)

    app = FastAPI(
        title="medialib API",
        description="Persistence core of a media library server",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.session_factory = session_factory or get_session_factory()

    # Register exception handlers
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors (including malformed JSON)."""
        return JSONResponse(
            status_code=400,
            content=error_response(ApiErrorCode.E_INVALID_REQUEST, "Invalid request body"),
        )

    app.include_router(create_api_router())

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Add request-id middleware to the app.

    This should be called AFTER all other middleware is added, so it runs FIRST.

    Args:
        app: The FastAPI application.
        log_requests: Whether to log access entries for each request.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
    logger.info("request_id_middleware_enabled")
