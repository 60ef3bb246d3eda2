"""Error taxonomy and the uniform `{code, message, error?}` response body."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from blog_api.core.config import Settings

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class ApiError(Exception):
    """Base class for errors rendered to clients as `{code, message}`."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "ValidationError"

    def __init__(self, message: str, *, detail: object | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "ValidationError"


class AuthenticationError(ApiError):
    """Identity not established: token missing, invalid, expired or revoked."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AuthenticationError"


class AuthorizationError(ApiError):
    """Identity established but not allowed to do this."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "AuthorizationError"


class DuplicateEmailError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    code = "DuplicateEmail"


class RateLimitExceededError(ApiError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "RateLimitExceeded"


class ServerError(ApiError):
    """Unexpected failure. `detail` holds the underlying error for logs."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "ServerError"

    def __init__(
        self, message: str = INTERNAL_ERROR_MESSAGE, *, detail: object | None = None
    ) -> None:
        super().__init__(message, detail=detail)


def error_body(exc: ApiError, *, expose_detail: bool) -> dict[str, object]:
    """Build the JSON body for an ApiError. `error` only appears on ServerError."""
    body: dict[str, object] = {"code": exc.code, "message": exc.message}
    if isinstance(exc, ServerError) and expose_detail and exc.detail is not None:
        body["error"] = str(exc.detail)
    elif isinstance(exc, ValidationError) and exc.detail is not None:
        body["errors"] = exc.detail
    return body


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Install handlers so every failure uses the same body shape."""
    expose_detail = not settings.is_production

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        if exc.status_code >= 500:
            reason = str(exc.detail)[:500] if exc.detail is not None else exc.message
            logger.error(
                "Request failed: %s %s -> %s: %s",
                request.method,
                request.url.path,
                exc.code,
                reason,
                exc_info=exc.detail if isinstance(exc.detail, BaseException) else None,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc, expose_detail=expose_detail),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg", "")}
            for err in exc.errors()
        ]
        err = ValidationError("Request validation failed", detail=errors)
        return JSONResponse(status_code=err.status_code, content=error_body(err, expose_detail=False))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error during %s %s", request.method, request.url.path
        )
        err = ServerError(detail=exc)
        return JSONResponse(
            status_code=err.status_code,
            content=error_body(err, expose_detail=expose_detail),
        )
