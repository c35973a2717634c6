"""
Reconciliation policy engine.

Decides, for one incoming company row, whether to insert it, fill the
empty fields of the stored record, overwrite the stored record, or skip
it. The decision is a lookup in POLICY_TABLE keyed by
(import mode, stored record exists).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
import structlog

from models.company import (
    CompanyFields,
    CompanyResponse,
    FieldMap,
    IDENTITY_FIELD,
    ImportMode,
)
from services.company_store import CompanyStore
from utils.text_utils import has_value, is_blank, to_store_value

logger = structlog.get_logger(__name__)


class ReconcileAction(str, Enum):
    """Store mutation chosen for a row."""
    INSERT = "insert"           # No stored record, create one
    MERGE_FILL = "merge_fill"   # Fill only empty fields on the stored record
    OVERWRITE = "overwrite"     # Set every provided field on the stored record
    SKIP = "skip"               # Leave the store untouched


class ReconcileResult(str, Enum):
    """Counted outcome of one row."""
    INSERTED = "inserted"
    UPDATED = "updated"
    SKIPPED = "skipped"


# (mode, stored record exists) -> action
POLICY_TABLE: dict[tuple[ImportMode, bool], ReconcileAction] = {
    (ImportMode.CREATE_NEW, False): ReconcileAction.INSERT,
    (ImportMode.CREATE_NEW, True): ReconcileAction.SKIP,
    (ImportMode.CREATE_UPDATE_NO_OVERWRITE, False): ReconcileAction.INSERT,
    (ImportMode.CREATE_UPDATE_NO_OVERWRITE, True): ReconcileAction.MERGE_FILL,
    (ImportMode.CREATE_UPDATE_OVERWRITE, False): ReconcileAction.INSERT,
    (ImportMode.CREATE_UPDATE_OVERWRITE, True): ReconcileAction.OVERWRITE,
    (ImportMode.UPDATE_NO_OVERWRITE, False): ReconcileAction.SKIP,
    (ImportMode.UPDATE_NO_OVERWRITE, True): ReconcileAction.MERGE_FILL,
    (ImportMode.UPDATE_OVERWRITE, False): ReconcileAction.SKIP,
    (ImportMode.UPDATE_OVERWRITE, True): ReconcileAction.OVERWRITE,
}


def _check_policy_table() -> None:
    missing = [
        (mode.value, exists)
        for mode in ImportMode
        for exists in (False, True)
        if (mode, exists) not in POLICY_TABLE
    ]
    if missing:
        raise RuntimeError(f"POLICY_TABLE has no action for: {missing}")


_check_policy_table()


@dataclass
class ReconcileOutcome:
    """Result of reconcile() with context for logging."""
    result: ReconcileResult
    action: ReconcileAction
    email: Optional[str] = None
    fields: list[str] = field(default_factory=list)
    reason: str = ""


def decide_action(mode: ImportMode, existing: Optional[CompanyResponse]) -> ReconcileAction:
    """Look up the action for a mode given whether a stored record was found."""
    return POLICY_TABLE[(mode, existing is not None)]


def merge_fill_changes(incoming: CompanyFields, existing: CompanyResponse) -> dict[str, Any]:
    """
    Fields to set when only empty stored fields may be filled.

    A field is included when the incoming value is non-blank and the
    stored value is blank. Stored non-blank values are never touched.
    """
    changes = {}
    for key, value in incoming.provided().items():
        if has_value(value) and is_blank(getattr(existing, key, None)):
            changes[key] = to_store_value(value)
    return changes


def overwrite_changes(incoming: CompanyFields) -> dict[str, Any]:
    """Every provided field, rendered for storage."""
    return {key: to_store_value(value) for key, value in incoming.provided().items()}


class ReconciliationService:
    """
    Applies one import mode to one row at a time.

    Each call does the lookup and then at most one write, and returns
    only after both have finished.
    """

    def __init__(self, store: CompanyStore):
        self.store = store

    def reconcile(self, row: FieldMap, mode: ImportMode) -> ReconcileOutcome:
        """
        Reconcile one parsed row against the store.

        Args:
            row: Parsed row (header name -> cell value)
            mode: Merge policy for this run

        Returns:
            ReconcileOutcome with the counted result

        Raises:
            DatabaseError: If the lookup or the write fails
        """
        incoming = CompanyFields.from_row(row)

        if is_blank(incoming.email):
            logger.debug("company_skipped", reason="missing_email")
            return ReconcileOutcome(
                result=ReconcileResult.SKIPPED,
                action=ReconcileAction.SKIP,
                reason="missing_email"
            )

        email = to_store_value(incoming.email)
        existing = self.store.find_by_email(email)
        action = decide_action(mode, existing)

        if action == ReconcileAction.INSERT:
            fields = overwrite_changes(incoming)
            fields[IDENTITY_FIELD] = email
            self.store.insert(fields)
            logger.info("company_inserted", email=email)
            return ReconcileOutcome(
                result=ReconcileResult.INSERTED,
                action=action,
                email=email,
                fields=list(fields.keys())
            )

        if action == ReconcileAction.SKIP:
            reason = "already_exists" if existing else "not_found"
            logger.debug("company_skipped", email=email, reason=reason)
            return ReconcileOutcome(
                result=ReconcileResult.SKIPPED,
                action=action,
                email=email,
                reason=reason
            )

        if action == ReconcileAction.MERGE_FILL:
            changes = merge_fill_changes(incoming, existing)
            if not changes:
                logger.debug("company_skipped", email=email, reason="nothing_to_fill")
                return ReconcileOutcome(
                    result=ReconcileResult.SKIPPED,
                    action=action,
                    email=email,
                    reason="nothing_to_fill"
                )
        else:
            changes = overwrite_changes(incoming)

        self.store.update_fields(email, changes)
        logger.info(
            "company_updated",
            email=email,
            action=action.value,
            fields=list(changes.keys())
        )
        return ReconcileOutcome(
            result=ReconcileResult.UPDATED,
            action=action,
            email=email,
            fields=list(changes.keys())
        )
