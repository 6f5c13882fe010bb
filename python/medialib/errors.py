"""API error definitions.

All API errors are defined here with their corresponding HTTP status codes.
Service functions raise these; routes let them propagate to the handlers in
medialib.responses.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Standardized error codes for the API.

    Format: E_CATEGORY_NAME
    """

    # Not found errors (404)
    E_NOT_FOUND = "E_NOT_FOUND"
    E_ITEM_NOT_FOUND = "E_ITEM_NOT_FOUND"

    # Validation errors (400)
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_INVALID_ARGUMENT = "E_INVALID_ARGUMENT"
    E_PLACEHOLDER_FORBIDDEN = "E_PLACEHOLDER_FORBIDDEN"

    # Conflict errors (409)
    E_CONSTRAINT_VIOLATION = "E_CONSTRAINT_VIOLATION"

    # Server errors
    E_STORE_UNAVAILABLE = "E_STORE_UNAVAILABLE"  # 503
    E_INTERNAL = "E_INTERNAL"  # 500


# Error code to HTTP status mapping
ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_ITEM_NOT_FOUND: 404,
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_INVALID_ARGUMENT: 400,
    ApiErrorCode.E_PLACEHOLDER_FORBIDDEN: 400,
    ApiErrorCode.E_CONSTRAINT_VIOLATION: 409,
    ApiErrorCode.E_STORE_UNAVAILABLE: 503,
    ApiErrorCode.E_INTERNAL: 500,
}


class ApiError(Exception):
    """Base exception for API errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
        status_code: HTTP status code (derived from code)
        retryable: Whether the caller may retry the same operation unchanged
    """

    retryable: bool = False

    def __init__(self, code: ApiErrorCode, message: str):
        self.code = code
        self.message = message
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)
        super().__init__(message)


class NotFoundError(ApiError):
    """Resource not found error."""

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_NOT_FOUND, message: str = "Not found"):
        super().__init__(code, message)


class InvalidRequestError(ApiError):
    """Invalid request error."""

    def __init__(
        self, code: ApiErrorCode = ApiErrorCode.E_INVALID_REQUEST, message: str = "Invalid request"
    ):
        super().__init__(code, message)


class InvalidArgumentError(InvalidRequestError):
    """Caller passed arguments that are rejected before any store access."""

    def __init__(
        self,
        code: ApiErrorCode = ApiErrorCode.E_INVALID_ARGUMENT,
        message: str = "Invalid argument",
    ):
        super().__init__(code, message)


class ConstraintViolationError(ApiError):
    """The store rejected a write because of a uniqueness or FK conflict.

    A correct reconciliation plan makes this unreachable except under
    concurrent writers. The conflicting writer has committed by the time this
    is raised, so the same call can be retried against the new state.
    """

    retryable = True

    def __init__(
        self,
        code: ApiErrorCode = ApiErrorCode.E_CONSTRAINT_VIOLATION,
        message: str = "Constraint violation",
    ):
        super().__init__(code, message)


class StoreUnavailableError(ApiError):
    """Transient store failure (connection lost, lock timeout, serialization)."""

    retryable = True

    def __init__(
        self,
        code: ApiErrorCode = ApiErrorCode.E_STORE_UNAVAILABLE,
        message: str = "Store unavailable",
    ):
        super().__init__(code, message)
