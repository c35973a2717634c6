"""
Custom exceptions module.

Base classes map to HTTP status codes; company and import errors
specialise them.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DuplicateError,
    DatabaseError,

    # Companies
    CompanyNotFoundError,
    CompanyEmailExistsError,

    # Import
    CompanyParseError,
    MissingImportFileError,
    InvalidImportModeError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DuplicateError",
    "DatabaseError",

    # Companies
    "CompanyNotFoundError",
    "CompanyEmailExistsError",

    # Import
    "CompanyParseError",
    "MissingImportFileError",
    "InvalidImportModeError",
]
