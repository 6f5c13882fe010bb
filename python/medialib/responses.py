"""API response envelope helpers and exception handlers.

All API responses use a consistent envelope:
- Success: { "data": ... }
- Error: { "error": { "code": "E_...", "message": "...", "request_id": "..." } }

The request_id is included in error responses for debugging and support.
Retryable errors (a store outage or a losing concurrent item deletion) also
carry a Retry-After header; the caller may repeat the same request unchanged.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from medialib.errors import ApiError, ApiErrorCode
from medialib.logging import get_logger, get_request_id

logger = get_logger(__name__)

RETRY_AFTER_SECONDS = 1


def success_response(data: Any) -> dict[str, Any]:
    """Create a success response envelope.

    Args:
        data: The response data to wrap.

    Returns:
        Dict with "data" key containing the response.
    """
    return {"data": data}


def error_response(
    code: ApiErrorCode, message: str, request_id: str | None = None
) -> dict[str, Any]:
    """Create an error response envelope.

    Args:
        code: The error code enum value.
        message: Human-readable error message.
        request_id: Optional request ID for correlation (auto-populated from context if None).

    Returns:
        Dict with "error" key containing code, message, and request_id.
    """
    if request_id is None:
        request_id = get_request_id()

    error = {"code": code.value, "message": message}
    if request_id:
        error["request_id"] = request_id

    return {"error": error}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Map a service-layer ApiError to its status, envelope and retry hint."""
    headers = None
    if exc.retryable:
        headers = {"Retry-After": str(RETRY_AFTER_SECONDS)}
        logger.warning("api_error_retryable", code=exc.code.value, status_code=exc.status_code)
    elif exc.status_code >= 500:
        logger.error("api_error", code=exc.code.value, status_code=exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, exc.message),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: Any) -> JSONResponse:
    """Handle FastAPI HTTPException and return proper JSON response."""
    status_to_code = {
        400: ApiErrorCode.E_INVALID_REQUEST,
        404: ApiErrorCode.E_NOT_FOUND,
        422: ApiErrorCode.E_INVALID_REQUEST,
    }
    code = status_to_code.get(exc.status_code, ApiErrorCode.E_INTERNAL)
    message = str(exc.detail) if exc.detail else "An error occurred"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code, message),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions and return 500 with E_INTERNAL.

    Logs the exception server-side but never leaks details to client.
    """
    logger.exception("unhandled_exception", error=str(exc))

    return JSONResponse(
        status_code=500,
        content=error_response(ApiErrorCode.E_INTERNAL, "Internal server error"),
    )
