"""X-Request-ID middleware for request correlation.

Reuses a well-formed incoming X-Request-ID (UUIDs are lower-cased) or
generates a new one, binds it to the logging context for the duration of the
request, echoes it in the response, and emits one access log entry.

Must be added LAST so it runs FIRST and wraps every other middleware.
"""

import re
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from medialib.logging import clear_request_context, get_logger, set_request_context

REQUEST_ID_HEADER = "X-Request-ID"

# Alphanumeric, dots, hyphens, underscores; at most 128 characters
VALID_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

logger = get_logger(__name__)


def resolve_request_id(incoming: str | None) -> str:
    """Return the request ID to use for a request carrying `incoming`."""
    if not incoming or not VALID_REQUEST_ID_PATTERN.match(incoming):
        return str(uuid.uuid4())
    try:
        return str(uuid.UUID(incoming))
    except ValueError:
        return incoming


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware for X-Request-ID handling and access logging.

    Args:
        app: The ASGI application.
        log_requests: If True, log access entries for each request.
    """

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.monotonic()

        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(request_id, path=request.url.path, method=request.method)

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id

            if self.log_requests:
                duration_ms = (time.monotonic() - start_time) * 1000
                logger.info(
                    "request_completed",
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 2),
                )

            return response

        except Exception:
            logger.exception("request_failed")
            raise

        finally:
            clear_request_context()
