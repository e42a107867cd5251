"""
Application error taxonomy.

Domain code raises the subclasses below; the result envelope and the HTTP
exception handler both read ``kind`` to decide how a failure is reported.
"""

from enum import Enum
from typing import Any, Dict, Optional

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    INVALID_CREDENTIAL = "invalid_credential"
    EXPIRED_CREDENTIAL = "expired_credential"
    AUTHENTICATION_FAILED = "authentication_failed"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    INFRASTRUCTURE = "infrastructure"


STATUS_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INVALID_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.EXPIRED_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.AUTHENTICATION_FAILED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.VALIDATION: 422,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INFRASTRUCTURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class AppError(Exception):
    """Base class for all application exceptions."""

    kind: ErrorKind = ErrorKind.INFRASTRUCTURE
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class UnauthenticatedError(AppError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Authentication required"


class InvalidCredentialError(AppError):
    kind = ErrorKind.INVALID_CREDENTIAL
    default_message = "Invalid token"


class ExpiredCredentialError(AppError):
    kind = ErrorKind.EXPIRED_CREDENTIAL
    default_message = "Token has expired"


class AuthenticationFailedError(AppError):
    kind = ErrorKind.AUTHENTICATION_FAILED
    default_message = "Authentication failed"


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION
    default_message = "Invalid request"


class EntityNotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Entity not found"


class ForbiddenError(AppError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden"


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT
    default_message = "Conflict"


class InfrastructureError(AppError):
    kind = ErrorKind.INFRASTRUCTURE
    default_message = "Service unavailable. Please try again later"


class StorageError(InfrastructureError):
    default_message = "Storage service unavailable. Please try again later"


ERROR_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: UnauthenticatedError,
    ErrorKind.INVALID_CREDENTIAL: InvalidCredentialError,
    ErrorKind.EXPIRED_CREDENTIAL: ExpiredCredentialError,
    ErrorKind.AUTHENTICATION_FAILED: AuthenticationFailedError,
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.NOT_FOUND: EntityNotFoundError,
    ErrorKind.FORBIDDEN: ForbiddenError,
    ErrorKind.CONFLICT: ConflictError,
    ErrorKind.INFRASTRUCTURE: InfrastructureError,
}


def error_for(kind: ErrorKind, message: str) -> AppError:
    return ERROR_BY_KIND[kind](message)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render every uncaught exception as a failed result envelope."""

    if isinstance(exc, AppError):
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.message,
                "code": exc.kind.value,
                "path": request.url.path,
            },
            headers=headers,
        )

    logger.exception("Unhandled error", path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "An unexpected error occurred. Please try again later.",
            "code": "internal_error",
            "path": request.url.path,
        },
    )
