"""
Error taxonomy for the authentication flow and its HTTP mapping.

Every failure is raised as an AuthError subclass and converted to a JSON
body of the form {"message": ..., "code": ..., "errors": {...}} at the
boundary by the handlers registered in register_exception_handlers().
"""

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

FieldErrors = Dict[str, List[str]]


class AuthError(Exception):
    """Base class for all authentication flow errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed."

    def __init__(self, message: Optional[str] = None, errors: Optional[FieldErrors] = None):
        self.message = message or self.default_message
        self.errors = errors or {}
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.__class__.__name__


class ValidationFailedError(AuthError):
    """Input failed validation; the caller corrects it and retries."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "The given data was invalid."


class DuplicateEmailError(ValidationFailedError):
    default_message = "The email has already been taken."

    def __init__(self, message: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message, {"email": [message]})


class InvalidCredentialsError(ValidationFailedError):
    """
    Unknown email and wrong password share this error so the response
    never reveals which one it was.
    """
    default_message = "The provided credentials are incorrect."

    def __init__(self):
        super().__init__(self.default_message, {"email": [self.default_message]})


class EmailNotVerifiedError(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Email not verified. Please check your email for the verification link."


class InvalidLinkError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid or expired verification link."


class UnauthenticatedError(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthenticated."


class InvalidTokenError(UnauthenticatedError):
    """Token is malformed or does not exist (never issued, or revoked)."""


class TokenExpiredError(UnauthenticatedError):
    """Token exists but its expiry has passed."""
    default_message = "Token expired."


class UserNotFoundError(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found."


class TooManyRequestsError(AuthError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too Many Attempts."


def error_body(exc: AuthError) -> dict:
    body = {"message": exc.message, "code": exc.code}
    if exc.errors:
        body["errors"] = exc.errors
    return body


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    logger.info(f"{exc.code} ({exc.status_code}) on {request.method} {request.url.path}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return JSONResponse(status_code=exc.status_code, content=error_body(exc), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Flatten pydantic errors into field -> [messages]."""
    errors: FieldErrors = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        msg = err.get("msg", "Invalid value.")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.setdefault(field, []).append(msg)

    first = next(iter(errors.values()))[0] if errors else ValidationFailedError.default_message
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": first, "code": ValidationFailedError.__name__, "errors": errors},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
