"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict

logger = logging.getLogger("eparcel")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class InsufficientPermissionsError(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(self, message: str = "Insufficient permissions", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


class TransitionNotPermittedError(AppException):
    """Raised when the actor's role may not fire a status transition."""

    def __init__(self, role: str, current: str, target: str):
        super().__init__(
            message=f"Role {role} cannot move a parcel from '{current}' to '{target}'",
            error_code="ERR_PERM_002",
            status_code=status.HTTP_403_FORBIDDEN,
            details={"role": role, "from": current, "to": target}
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class TokenRevokedError(AppException):
    """Raised when token has been revoked."""

    def __init__(self, message: str = "Token has been revoked"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_002",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class InvalidCredentialsError(AppException):
    """Raised when the email/password pair does not match an account."""

    def __init__(self):
        super().__init__(
            message="Invalid credentials",
            error_code="ERR_AUTH_003",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class AccountInactiveError(AppException):
    """Raised when an inactive account tries to authenticate."""

    def __init__(self):
        super().__init__(
            message="Account is inactive. Contact Admin.",
            error_code="ERR_AUTH_004",
            status_code=status.HTTP_403_FORBIDDEN
        )


class InvalidTransitionError(AppException):
    """Raised when the requested status is unreachable from the current one."""

    def __init__(self, current: str, target: str):
        super().__init__(
            message=f"Cannot move a parcel from '{current}' to '{target}'",
            error_code="ERR_PARCEL_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"from": current, "to": target}
        )


class DuplicateTrackingNumberError(AppException):
    """Raised when a tracking number is already in use."""

    def __init__(self, tracking_number: str):
        super().__init__(
            message=f"Parcel with tracking number '{tracking_number}' already exists",
            error_code="ERR_PARCEL_002",
            status_code=status.HTTP_409_CONFLICT,
            details={"tracking_number": tracking_number}
        )


class ConcurrentModificationError(AppException):
    """Raised when a parcel was changed since the caller last read it."""

    def __init__(self, parcel_id: str, expected: int, actual: int):
        super().__init__(
            message="Parcel was modified by another request",
            error_code="ERR_PARCEL_003",
            status_code=status.HTTP_409_CONFLICT,
            details={"id": parcel_id, "expected_version": expected, "current_version": actual}
        )


class DuplicateRequestError(AppException):
    """Raised when the same parcel action is already in flight."""

    def __init__(self, parcel_id: str):
        super().__init__(
            message="Another request for this parcel is still being processed",
            error_code="ERR_PARCEL_004",
            status_code=status.HTTP_409_CONFLICT,
            details={"id": parcel_id}
        )


class EmailAlreadyRegisteredError(AppException):
    """Raised when an email is already used by another account."""

    def __init__(self, email: str):
        super().__init__(
            message="Email already registered",
            error_code="ERR_USER_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"email": email}
        )


class InvalidRoleError(AppException):
    """Raised when a role is not acceptable for the requested operation."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="ERR_USER_002",
            status_code=status.HTTP_400_BAD_REQUEST
        )


class DataAccessError(AppException):
    """Raised when the storage backend fails to complete an operation."""

    def __init__(self, operation: str, reason: str = "Storage backend unavailable"):
        super().__init__(
            message=reason,
            error_code="ERR_STORAGE_001",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"operation": operation}
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        409: "ERR_CONFLICT",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_errors(exc)
            }
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Strip non-serializable context (e.g. raised ValueErrors) from validation errors."""
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(error)
    return errors


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception: %s: %s", type(exc).__name__, exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
