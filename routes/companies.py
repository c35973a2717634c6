"""
Company API routes.

Import an uploaded company file, list companies, delete by email.
"""

from fastapi import APIRouter, UploadFile, File, Form
from fastapi.responses import JSONResponse
from typing import Optional
from io import BytesIO
import structlog

from config import settings
from models.company import CompanyListItem, DeleteCompanyResponse, ImportResponse
from parsers.company_file_parser import detect_file_format
from services.company_import_service import get_company_import_service
from exceptions import (
    AppError,
    CompanyNotFoundError,
    MissingImportFileError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.post("/import", response_model=ImportResponse)
async def import_companies(
    file: Optional[UploadFile] = File(None),
    import_mode: Optional[str] = Form(None),
    import_mode_camel: Optional[str] = Form(None, alias="importMode"),
):
    """
    Import companies from an Excel or CSV upload.

    The form field import_mode (or importMode) selects the merge policy.
    Rows without an email are skipped.

    Raises:
        422: No file, unknown mode, unreadable file, file too large
        409: Email inserted concurrently by another run
        500: Database failure (rows before the failure stay imported)
    """
    try:
        if file is None:
            raise MissingImportFileError()

        logger.info(
            "company_upload_started",
            filename=file.filename,
            content_type=file.content_type
        )

        content = await file.read()
        if not content:
            raise MissingImportFileError()
        if len(content) > settings.max_upload_bytes:
            raise ValidationError(
                code="FILE_TOO_LARGE",
                message=f"File exceeds {settings.max_upload_mb} MB",
                details={"size_bytes": len(content)}
            )

        file_format = detect_file_format(file.content_type, file.filename)

        service = get_company_import_service()
        summary = service.import_file(
            BytesIO(content),
            import_mode or import_mode_camel,
            file_format
        )

        return ImportResponse(
            status="success",
            inserted=summary.inserted,
            updated=summary.updated,
            skipped=summary.skipped
        )

    except Exception as e:
        return handle_error(e)


@router.get("", response_model=list[CompanyListItem])
async def list_companies():
    """List every company with name, industry, email and phone."""
    try:
        service = get_company_import_service()
        return service.list_companies()

    except Exception as e:
        return handle_error(e)


@router.delete("/{email}", response_model=DeleteCompanyResponse)
async def delete_company(email: str):
    """
    Delete a company by email.

    Raises:
        404: No company with this email
    """
    try:
        service = get_company_import_service()
        if not service.delete_by_email(email):
            raise CompanyNotFoundError(email)

        return DeleteCompanyResponse()

    except Exception as e:
        return handle_error(e)
