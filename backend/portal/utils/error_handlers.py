"""
Centralized error handling and user-friendly error messages.

Every domain failure is an `AppError` carrying a stable machine-readable `code`
next to the human message, so clients can branch on `code` without parsing text.
"""
import logging

from fastapi import HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# User-friendly error messages
ERROR_MESSAGES = {
    # One-time codes
    "not_registered": "This phone number or email is not registered. Please contact your recruiter.",
    "invalid_or_expired": "The code is invalid or has expired. Please request a new one.",
    "delivery_failed": "We could not deliver your code. Please try sending it again.",

    # Sessions
    "invalid_credentials": "Invalid email or password. Please try again.",
    "session_expired": "Your session has expired. Please login again.",
    "wrong_principal_kind": "This session cannot be used here.",

    # Docket
    "incomplete_docket": "Your docket is missing required documents.",
    "user_not_found": "User not found.",

    # General
    "unauthorized": "Please login to access this feature.",
    "forbidden": "You don't have permission to access this resource.",
    "not_found": "The requested resource was not found.",
    "server_error": "Something went wrong on our end. Please try again later.",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


class AppError(Exception):
    """Base application error."""
    code = "SERVER_ERROR"

    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class NotFoundError(AppError):
    code = "NOT_FOUND"

    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, status_code=404, details=details)


class NotRegisteredError(AppError):
    """Identifier is malformed or unknown. Both cases must look identical."""
    code = "NOT_REGISTERED"

    def __init__(self):
        super().__init__(get_error_message("not_registered"), status_code=404)


class InvalidOrExpiredOtpError(AppError):
    """Wrong, expired and already-spent codes all collapse into this one error."""
    code = "INVALID_OR_EXPIRED"

    def __init__(self):
        super().__init__(get_error_message("invalid_or_expired"), status_code=401)


class InvalidCredentialsError(AppError):
    code = "INVALID_CREDENTIALS"

    def __init__(self):
        super().__init__(get_error_message("invalid_credentials"), status_code=401)


class UnauthorizedError(AppError):
    """Missing, unknown or expired session token."""
    code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Unauthorized access", details: dict | None = None):
        super().__init__(message, status_code=401, details=details)


class ForbiddenError(AppError):
    """Valid session, wrong context."""
    code = "FORBIDDEN"

    def __init__(self, message: str = "Access forbidden", details: dict | None = None):
        super().__init__(message, status_code=403, details=details)


class WrongPrincipalKindError(ForbiddenError):
    code = "WRONG_PRINCIPAL_KIND"

    def __init__(self, *, expected: str, actual: str):
        super().__init__(
            get_error_message("wrong_principal_kind"),
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class IncompleteDocketError(AppError):
    code = "INCOMPLETE_DOCKET"

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(
            get_error_message("incomplete_docket"),
            status_code=409,
            details={"missing": self.missing},
        )


class DeliveryFailedError(AppError):
    """The notifier could not hand the code to its transport."""
    code = "DELIVERY_FAILED"

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or get_error_message("delivery_failed"), status_code=502, details=details)


class ServiceUnavailableError(AppError):
    code = "SERVICE_UNAVAILABLE"

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or get_error_message("database_error"), status_code=503, details=details)


def create_error_response(
    status_code: int,
    message: str,
    code: str | None = None,
    details: dict | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "error": message,
    }

    if code:
        content["code"] = code

    if details:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )


def app_error_response(exc: AppError) -> JSONResponse:
    return create_error_response(exc.status_code, exc.message, code=exc.code, details=exc.details)


def handle_database_error(error: Exception, operation: str = "") -> AppError:
    """Map a persistence failure to a generic error; never to a domain kind."""
    logger.error(f"Database error during {operation}: {error}")

    error_str = str(error).lower()

    if "duplicate" in error_str or "unique" in error_str:
        return ValidationError("This record already exists. Please check your input.")

    if "connection" in error_str or "operational" in error_str:
        return ServiceUnavailableError()

    return AppError(get_error_message("server_error"), status_code=500)


def http_error_code(exc: HTTPException) -> str:
    return {
        400: "VALIDATION_ERROR",
        401: "UNAUTHENTICATED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        409: "CONFLICT",
        422: "VALIDATION_ERROR",
    }.get(exc.status_code, "SERVER_ERROR")
