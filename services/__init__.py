"""
Business logic services.

Each service handles one domain area.
"""

from services.company_store import CompanyStore, get_company_store
from services.reconciliation_service import (
    ReconciliationService,
    ReconcileAction,
    ReconcileResult,
    ReconcileOutcome,
    POLICY_TABLE,
)
from services.company_import_service import (
    CompanyImportService,
    get_company_import_service,
    ImportSummary,
)

__all__ = [
    "CompanyStore",
    "get_company_store",
    "ReconciliationService",
    "ReconcileAction",
    "ReconcileResult",
    "ReconcileOutcome",
    "POLICY_TABLE",
    "CompanyImportService",
    "get_company_import_service",
    "ImportSummary",
]
