"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
)
from models.company import (
    Scalar,
    FieldMap,
    COMPANY_FIELDS,
    LIST_FIELDS,
    IDENTITY_FIELD,
    ImportMode,
    CompanyFields,
    CompanyResponse,
    CompanyListItem,
    ImportResponse,
    DeleteCompanyResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",

    # Company
    "Scalar",
    "FieldMap",
    "COMPANY_FIELDS",
    "LIST_FIELDS",
    "IDENTITY_FIELD",
    "ImportMode",
    "CompanyFields",
    "CompanyResponse",
    "CompanyListItem",
    "ImportResponse",
    "DeleteCompanyResponse",
]
