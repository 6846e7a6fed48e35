"""HTTP error types raised by services and the access control gate."""

from __future__ import annotations

from typing import Any

from werkzeug.exceptions import HTTPException


class APIError(HTTPException):
    """Base error carrying a stable, machine-readable ``error_code``."""

    code = 500
    error_code = "internal_error"
    description = "An unexpected error occurred."

    def __init__(
        self,
        description: str | None = None,
        *,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(description)
        self.details = details


class ValidationError(APIError):
    code = 400
    error_code = "validation_error"
    description = "Validation failed."


class DuplicateEmail(APIError):
    code = 400
    error_code = "duplicate_email"
    description = "User already exists with this email address."


class Unauthenticated(APIError):
    code = 401
    error_code = "unauthenticated"
    description = "Access token required."


class InvalidCredentials(Unauthenticated):
    error_code = "invalid_credentials"
    description = "Invalid email or password."


class InvalidToken(Unauthenticated):
    error_code = "invalid_token"
    description = "Invalid token."


class ExpiredToken(Unauthenticated):
    error_code = "token_expired"
    description = "Token expired."


class TokenRevoked(Unauthenticated):
    error_code = "token_revoked"
    description = "Token has been revoked."


class AccountDeactivated(APIError):
    code = 401
    error_code = "account_deactivated"
    description = "Account has been deactivated."


class AccountLocked(APIError):
    code = 423
    error_code = "account_locked"
    description = (
        "Account temporarily locked due to too many failed login attempts."
    )


class Forbidden(APIError):
    code = 403
    error_code = "forbidden"
    description = "Insufficient permissions."


class NotFound(APIError):
    code = 404
    error_code = "not_found"
    description = "Resource not found."


def error_code_for(error: HTTPException) -> str:
    """Return the machine-readable code for any HTTP exception."""

    if isinstance(error, APIError):
        return error.error_code
    name = getattr(error, "name", None) or "error"
    return name.lower().replace(" ", "_").replace("-", "_")
