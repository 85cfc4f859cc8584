"""
Error kinds of the identity service and their HTTP mapping.

Services raise AppError subclasses; register_error_handlers() turns them
into ``{"error", "code", "field"?, "details"?}`` bodies. Rejections from
the authentication layer (credentials, one-time codes, refresh tokens) use
fixed messages that do not reveal which check failed.

Anything that is not an AppError is logged and answered as a bare 500;
Sentry, when enabled, has already captured it by then.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Root of every error a service may raise on purpose.

    ``status_code`` is a class default; pass ``status_code=`` to override it
    for one raise (logout reports a bad refresh token as 400).
    """

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        body: dict[str, Any] = {"error": self.message, "code": self.error_code}
        for key in ("field", "details"):
            value = getattr(self, key)
            if value is not None:
                body[key] = value
        return body


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class AlreadyVerifiedError(AppError):
    status_code = 400
    error_code = "already_verified"


class InvalidOrExpiredCodeError(AppError):
    status_code = 400
    error_code = "invalid_or_expired_code"

    def __init__(self, message: str = "Invalid or expired verification code", **kwargs) -> None:
        super().__init__(message, **kwargs)


class AuthenticationError(AppError):
    status_code = 401
    error_code = "authentication_error"


class InvalidCredentialsError(AuthenticationError):
    error_code = "invalid_credentials"

    def __init__(self, message: str = "Invalid credentials", **kwargs) -> None:
        super().__init__(message, **kwargs)


class InvalidRefreshTokenError(AuthenticationError):
    error_code = "invalid_refresh_token"

    def __init__(self, message: str = "Invalid refresh token", **kwargs) -> None:
        super().__init__(message, **kwargs)


class ForbiddenError(AppError):
    status_code = 403
    error_code = "forbidden"


class EmailNotVerifiedError(ForbiddenError):
    error_code = "email_not_verified"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class ConflictError(AppError):
    status_code = 409
    error_code = "conflict"


class InternalError(AppError):
    """Store or infrastructure failure, already logged where it happened."""


def _error_response(error: AppError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        level = log.error if exc.status_code >= 500 else log.warning
        level(
            "request_failed" if exc.status_code >= 500 else "request_rejected",
            method=request.method,
            path=request.url.path,
            code=exc.error_code,
            status_code=exc.status_code,
        )
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        issues = [
            {"loc": list(issue["loc"]), "msg": issue["msg"], "type": issue["type"]}
            for issue in exc.errors()
        ]
        return _error_response(ValidationError("Request validation failed", details=issues))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        log.error(
            "unhandled_exception",
            method=request.method,
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return _error_response(InternalError("Something went wrong on our side"))
