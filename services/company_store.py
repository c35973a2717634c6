"""
Company store backed by the Supabase companies table.

The table is keyed by email (unique constraint, see sql/companies.sql).
Every failed call is raised as DatabaseError; nothing is retried.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Sequence
import structlog

from config import get_supabase_client, settings
from models.company import CompanyResponse, IDENTITY_FIELD, LIST_FIELDS
from exceptions import CompanyEmailExistsError, DatabaseError

logger = structlog.get_logger(__name__)

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class CompanyStore:
    """
    Find/insert/update/delete primitives on company records by email.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = settings.companies_table

    # ===================
    # READ OPERATIONS
    # ===================

    def find_by_email(self, email: str) -> Optional[CompanyResponse]:
        """
        Get the company stored under an email.

        Args:
            email: Identity value

        Returns:
            CompanyResponse or None if not found
        """
        logger.debug("finding_company", email=email)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq(IDENTITY_FIELD, email)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("find_company_failed", email=email, error=str(e))
            raise DatabaseError("select", str(e), details={"email": email})

        if not result.data:
            return None

        return CompanyResponse(**result.data[0])

    def find_all(self, fields: Sequence[str] = LIST_FIELDS) -> list[dict[str, Any]]:
        """
        Get every company projected to the given columns.

        Rows come back in store order.
        """
        try:
            result = (
                self.db.table(self.table)
                .select(",".join(fields))
                .execute()
            )
        except Exception as e:
            logger.error("list_companies_failed", error=str(e))
            raise DatabaseError("select", str(e))

        rows = [{field: row.get(field) for field in fields} for row in result.data]
        logger.info("companies_retrieved", count=len(rows))
        return rows

    # ===================
    # WRITE OPERATIONS
    # ===================

    def insert(self, fields: dict[str, Any]) -> CompanyResponse:
        """
        Insert a new company.

        Raises:
            CompanyEmailExistsError: If the email is already stored
            DatabaseError: On any other failure
        """
        email = fields.get(IDENTITY_FIELD)

        try:
            result = (
                self.db.table(self.table)
                .insert(fields)
                .execute()
            )
        except Exception as e:
            if _is_unique_violation(e):
                logger.warning("company_email_conflict", email=email)
                raise CompanyEmailExistsError(email)
            logger.error("insert_company_failed", email=email, error=str(e))
            raise DatabaseError("insert", str(e), details={"email": email})

        return CompanyResponse(**result.data[0])

    def update_fields(self, email: str, fields: dict[str, Any]) -> None:
        """Set the given columns on the company stored under email and stamp updated_at."""
        payload = {**fields, "updated_at": datetime.now(timezone.utc).isoformat()}

        try:
            (
                self.db.table(self.table)
                .update(payload)
                .eq(IDENTITY_FIELD, email)
                .execute()
            )
        except Exception as e:
            logger.error(
                "update_company_failed",
                email=email,
                fields=list(fields.keys()),
                error=str(e)
            )
            raise DatabaseError("update", str(e), details={"email": email})

    def delete_by_email(self, email: str) -> bool:
        """
        Hard delete the company stored under email.

        Returns:
            True if a row was deleted, False if none matched
        """
        try:
            result = (
                self.db.table(self.table)
                .delete()
                .eq(IDENTITY_FIELD, email)
                .execute()
            )
        except Exception as e:
            logger.error("delete_company_failed", email=email, error=str(e))
            raise DatabaseError("delete", str(e), details={"email": email})

        return bool(result.data)


def _is_unique_violation(error: Exception) -> bool:
    """Detect a unique constraint failure from a PostgREST error."""
    if getattr(error, "code", None) == UNIQUE_VIOLATION:
        return True
    return "duplicate key" in str(error).lower()


# Singleton instance for convenience
_company_store: Optional[CompanyStore] = None

def get_company_store() -> CompanyStore:
    """Get or create CompanyStore instance."""
    global _company_store
    if _company_store is None:
        _company_store = CompanyStore()
    return _company_store
