"""
Company import orchestration.

Runs parsed rows through the reconciliation engine one at a time and
tallies the results. Runs are not transactional: when a store call
fails, rows reconciled before it keep their changes and the run stops.
"""

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Iterable, Optional, Union
import structlog

from models.company import CompanyListItem, FieldMap, ImportMode, LIST_FIELDS
from parsers.company_file_parser import FileFormat, parse_company_file
from services.company_store import CompanyStore, get_company_store
from services.reconciliation_service import ReconcileResult, ReconciliationService
from exceptions import InvalidImportModeError, MissingImportFileError

logger = structlog.get_logger(__name__)


@dataclass
class ImportSummary:
    """Counters for one import run."""
    inserted: int = 0
    updated: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.updated + self.skipped

    def record(self, result: ReconcileResult) -> None:
        """Count one reconciled row."""
        if result == ReconcileResult.INSERTED:
            self.inserted += 1
        elif result == ReconcileResult.UPDATED:
            self.updated += 1
        else:
            self.skipped += 1

    def to_dict(self) -> dict:
        return {
            "inserted": self.inserted,
            "updated": self.updated,
            "skipped": self.skipped,
        }


def resolve_import_mode(mode: Union[ImportMode, str, None]) -> ImportMode:
    """
    Validate a requested import mode.

    Raises:
        InvalidImportModeError: If mode is missing or unknown
    """
    if isinstance(mode, ImportMode):
        return mode

    try:
        return ImportMode(str(mode).strip() if mode else "")
    except ValueError:
        raise InvalidImportModeError(mode, ImportMode.values())


class CompanyImportService:
    """
    Import runs plus the list and delete operations on companies.
    """

    def __init__(self, store: Optional[CompanyStore] = None):
        self.store = store or get_company_store()
        self.reconciler = ReconciliationService(self.store)

    # ===================
    # IMPORT
    # ===================

    def import_file(
        self,
        file: Union[str, Path, BytesIO, bytes, None],
        mode: Union[ImportMode, str, None],
        file_format: FileFormat,
    ) -> ImportSummary:
        """
        Parse an uploaded file and reconcile every row.

        The file is parsed completely before the first row touches the
        store, so a parse failure leaves the store unchanged.

        Args:
            file: Uploaded file (path, bytes or file-like object)
            mode: Import mode name
            file_format: EXCEL or CSV

        Returns:
            ImportSummary for the run

        Raises:
            MissingImportFileError: If no file was given
            InvalidImportModeError: If mode is missing or unknown
            CompanyParseError: If the file is malformed
            DatabaseError: If a store call fails mid-run
        """
        if file is None or (isinstance(file, bytes) and not file):
            raise MissingImportFileError()

        import_mode = resolve_import_mode(mode)
        rows = parse_company_file(file, file_format)

        return self.import_rows(rows, import_mode)

    def import_rows(self, rows: Iterable[FieldMap], mode: Union[ImportMode, str, None]) -> ImportSummary:
        """
        Reconcile rows in order under one import mode.

        Each row's lookup and write complete before the next row starts.
        """
        import_mode = resolve_import_mode(mode)
        rows = list(rows)
        summary = ImportSummary()

        logger.info(
            "company_import_started",
            mode=import_mode.value,
            row_count=len(rows)
        )

        for index, row in enumerate(rows):
            try:
                outcome = self.reconciler.reconcile(row, import_mode)
            except Exception as e:
                logger.error(
                    "company_import_aborted",
                    mode=import_mode.value,
                    row=index + 1,
                    committed=summary.to_dict(),
                    error=str(e)
                )
                raise
            summary.record(outcome.result)

        logger.info(
            "company_import_completed",
            mode=import_mode.value,
            total=summary.total,
            **summary.to_dict()
        )

        return summary

    # ===================
    # LIST / DELETE
    # ===================

    def list_companies(self) -> list[CompanyListItem]:
        """All stored companies projected to name, industry, email, phone."""
        rows = self.store.find_all(LIST_FIELDS)
        return [CompanyListItem(**row) for row in rows]

    def delete_by_email(self, email: str) -> bool:
        """
        Delete the company stored under email.

        Returns:
            True if deleted, False if no company matched
        """
        logger.info("deleting_company", email=email)

        deleted = self.store.delete_by_email(email)

        if deleted:
            logger.info("company_deleted", email=email)
        else:
            logger.info("company_delete_not_found", email=email)

        return deleted


# Singleton instance for convenience
_company_import_service: Optional[CompanyImportService] = None

def get_company_import_service() -> CompanyImportService:
    """Get or create CompanyImportService instance."""
    global _company_import_service
    if _company_import_service is None:
        _company_import_service = CompanyImportService()
    return _company_import_service
