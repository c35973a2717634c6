"""
Company schemas for validation and serialization.

Incoming spreadsheet rows are loosely typed, so CompanyFields keeps the
raw scalars for truthiness checks and only converts them to strings
when they are written to the store.
"""

import math
from enum import Enum
from typing import Any, Optional, Union

from pydantic import ConfigDict, Field

from models.base import BaseSchema, TimestampMixin


# Loose cell value as read from Excel/CSV
Scalar = Union[bool, int, float, str]

# One parsed row: header name -> cell value
FieldMap = dict[str, Any]

# Attribute names of a stored company, in storage order
COMPANY_FIELDS: tuple[str, ...] = ("name", "industry", "location", "email", "phone")

# Columns returned by the list endpoint
LIST_FIELDS: tuple[str, ...] = ("name", "industry", "email", "phone")

IDENTITY_FIELD = "email"


class ImportMode(str, Enum):
    """Merge policy applied to every record of an import run."""
    CREATE_NEW = "create_new"
    CREATE_UPDATE_NO_OVERWRITE = "create_update_no_overwrite"
    CREATE_UPDATE_OVERWRITE = "create_update_overwrite"
    UPDATE_NO_OVERWRITE = "update_no_overwrite"
    UPDATE_OVERWRITE = "update_overwrite"

    @classmethod
    def values(cls) -> list[str]:
        return [mode.value for mode in cls]


class CompanyFields(BaseSchema):
    """
    Known company attributes from one incoming row.

    Unknown columns are ignored. Only keys present in the source row
    count as provided (see provided()).
    """

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="ignore"
    )

    name: Optional[Scalar] = None
    industry: Optional[Scalar] = None
    location: Optional[Scalar] = None
    email: Optional[Scalar] = None
    phone: Optional[Scalar] = None

    @classmethod
    def from_row(cls, row: FieldMap) -> "CompanyFields":
        """Build from a parsed row, dropping unknown keys and NaN cells."""
        known = {}
        for key in COMPANY_FIELDS:
            if key not in row:
                continue
            value = row[key]
            if isinstance(value, float) and math.isnan(value):
                continue
            known[key] = value
        return cls.model_validate(known)

    def provided(self) -> dict[str, Any]:
        """Fields that were present in the source row, in storage order."""
        return self.model_dump(exclude_unset=True)


class CompanyResponse(BaseSchema, TimestampMixin):
    """Stored company record."""

    id: Optional[str] = Field(None, description="Row id assigned by the store")
    name: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    email: str = Field(..., min_length=1, description="Unique identity of the company")
    phone: Optional[str] = None


class CompanyListItem(BaseSchema):
    """Company projected to the columns shown in listings."""

    name: Optional[str] = None
    industry: Optional[str] = None
    email: str
    phone: Optional[str] = None


class ImportResponse(BaseSchema):
    """Response body of a finished import run."""

    status: str = "success"
    inserted: int = Field(..., ge=0)
    updated: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)


class DeleteCompanyResponse(BaseSchema):
    message: str = "Company deleted successfully"
