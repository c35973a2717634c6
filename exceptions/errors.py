"""
Custom exception classes for the application.

Every error carries a code, a human-readable message and an HTTP status
so routes can convert it with to_dict().
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "COMPANY_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class DuplicateError(ConflictError):
    """Duplicate resource (409)."""

    def __init__(
        self,
        resource: str,
        field: str,
        value: str
    ):
        super().__init__(
            code=f"{resource.upper()}_{field.upper()}_EXISTS",
            message=f"{resource} with this {field} already exists",
            details={field: value}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# COMPANY ERRORS
# ===================

class CompanyNotFoundError(NotFoundError):
    """No company stored under this email."""

    def __init__(self, email: str):
        super().__init__(
            resource="Company",
            identifier=email,
            code="COMPANY_NOT_FOUND"
        )


class CompanyEmailExistsError(DuplicateError):
    """Insert hit the unique constraint on companies.email."""

    def __init__(self, email: str):
        super().__init__(
            resource="Company",
            field="email",
            value=email
        )


# ===================
# IMPORT ERRORS
# ===================

class CompanyParseError(ValidationError):
    """Uploaded company file could not be parsed."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="COMPANY_PARSE_ERROR",
            message=message,
            details=details
        )


class MissingImportFileError(ValidationError):
    """Import requested without a file."""

    def __init__(self):
        super().__init__(
            code="IMPORT_FILE_REQUIRED",
            message="No file uploaded"
        )


class InvalidImportModeError(ValidationError):
    """Import mode missing or not one of the supported policies."""

    def __init__(self, mode: Optional[str], valid: list[str]):
        message = (
            "Import mode is required" if not mode
            else f"Unknown import mode: {mode}"
        )
        super().__init__(
            code="INVALID_IMPORT_MODE",
            message=message,
            details={"provided": mode, "valid": valid}
        )
