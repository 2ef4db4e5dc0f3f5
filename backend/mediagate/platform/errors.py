"""
Consistent error handling for the mediagate API.

All errors raised by the core derive from AppError and carry a stable
machine-readable code. Stack traces are NEVER returned to clients.

Standard HTTP status codes:
- 400: Bad Request (validation, plan not available, subscription expired/inactive)
- 401: Unauthorized (missing credentials, invalid/expired token, bad login)
- 403: Forbidden (ownership violation, unpublished or non-entitled content)
- 404: Not Found (per-entity variants)
- 409: Conflict (user exists, active subscription exists)
- 429: Too Many Requests (rate limit)
- 500: Internal Server Error
- 503: Service Unavailable (key-value store unreachable)
"""

import logging
import uuid
from typing import Any, Optional

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class AppError(Exception):
    """
    Base application error with consistent error shape.

    All custom errors should inherit from this class.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to API error response format."""
        return _error_body(self.code, self.message, self.details)


class ValidationError(AppError):
    """Validation error (400)."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(
            code="VALIDATION_FAILED",
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class AuthenticationError(AppError):
    """Missing or unusable credentials (401)."""

    def __init__(
        self,
        message: str = "Authentication required",
        code: str = "UNAUTHORIZED",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
        )


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password (401)."""

    def __init__(self):
        # Same message for both cases so callers cannot tell which accounts exist
        super().__init__(message="Invalid email or password", code="INVALID_CREDENTIALS")


class TokenInvalidError(AuthenticationError):
    """Token failed signature or structural checks (401)."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message=message, code="TOKEN_INVALID")


class TokenExpiredError(AuthenticationError):
    """Token expired, or superseded by a newer session for the same identity (401)."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message=message, code="TOKEN_EXPIRED")


class PermissionDeniedError(AppError):
    """Permission denied (403)."""

    def __init__(
        self,
        message: str = "Permission denied",
        code: str = "FORBIDDEN",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class NotFoundError(AppError):
    """Resource not found (404)."""

    resource = "Resource"

    def __init__(self, identifier: Optional[str] = None, resource: Optional[str] = None):
        resource = resource or self.resource
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id '{identifier}' not found"
        self.identifier = identifier
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource},
        )


class UserNotFoundError(NotFoundError):
    resource = "User"


class PlanNotFoundError(NotFoundError):
    resource = "Plan"


class SubscriptionNotFoundError(NotFoundError):
    resource = "Subscription"


class ContentNotFoundError(NotFoundError):
    resource = "Content"


class WatchHistoryNotFoundError(NotFoundError):
    resource = "Watch history"


class ConflictError(AppError):
    """Resource conflict (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class UserExistsError(ConflictError):
    """Email already registered (409)."""

    def __init__(self):
        super().__init__(message="A user with this email already exists", code="USER_EXISTS")


class StoreUnavailableError(AppError):
    """
    Key-value store unreachable (503).

    Fatal for the current call; the core never retries internally.
    """

    def __init__(self, message: str = "Session store temporarily unavailable"):
        super().__init__(
            code="STORE_UNAVAILABLE",
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id(request: Request) -> str:
    """Incoming X-Correlation-ID header, then request state, then a fresh id."""
    correlation_id = request.headers.get("X-Correlation-ID")
    if correlation_id:
        return correlation_id

    if hasattr(request.state, "correlation_id"):
        return request.state.correlation_id

    return generate_correlation_id()


def _error_body(code: str, message: str, details: Optional[dict[str, Any]] = None) -> dict:
    return {"error": {"code": code, "message": message, "details": details or {}}}


def _error_response(
    request: Request,
    status_code: int,
    body: dict,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    correlation_id = getattr(request.state, "correlation_id", None) or get_correlation_id(request)
    headers = dict(headers or {})
    headers["X-Correlation-ID"] = correlation_id
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _log_request_error(request: Request, message: str, **context) -> None:
    logger.warning(
        message,
        extra={
            "correlation_id": getattr(request.state, "correlation_id", None),
            "path": request.url.path,
            "method": request.method,
            **context,
        },
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Renders anything that escapes the route layer.

    Tags every request with a correlation id. Unexpected exceptions become
    a generic 500; the exception text and stack trace stay in the logs.
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = get_correlation_id(request)
        request.state.correlation_id = correlation_id

        try:
            response = await call_next(request)
        except AppError as e:
            return await app_error_handler(request, e)
        except HTTPException as e:
            return await http_exception_handler(request, e)
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                extra={
                    "correlation_id": correlation_id,
                    "error_type": type(e).__name__,
                    "path": request.url.path,
                    "method": request.method,
                },
            )
            return _error_response(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                _error_body(
                    "INTERNAL_ERROR",
                    "An unexpected error occurred",
                    {"correlation_id": correlation_id},
                ),
            )

        response.headers["X-Correlation-ID"] = correlation_id
        return response


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    _log_request_error(
        request,
        "Application error",
        error_code=exc.code,
        status_code=exc.status_code,
    )
    return _error_response(request, exc.status_code, exc.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTPException in the standard error shape, keeping its headers (Retry-After)."""
    _log_request_error(request, "HTTP exception", status_code=exc.status_code)
    code = "RATE_LIMIT_EXCEEDED" if exc.status_code == status.HTTP_429_TOO_MANY_REQUESTS else "HTTP_ERROR"
    return _error_response(
        request,
        exc.status_code,
        _error_body(code, str(exc.detail)),
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request parsing failures map to 400 VALIDATION_FAILED."""
    error = ValidationError(
        "Request validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
    )
    return await app_error_handler(request, error)
