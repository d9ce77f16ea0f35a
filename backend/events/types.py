# events/types.py
"""
Event type definitions for CareLedger.

This module defines THE CANONICAL SCHEMA for all audit event payloads.
Every ledger command emits one of these events inside the same database
transaction as its state change, so the audit trail and the ledger can
never disagree.

Naming Convention: {aggregate}.{action}
Examples:
- account.created
- transaction.posted
- report.generated

Events are a stable API: adding optional fields with defaults is safe;
removing or renaming fields is not.
"""

from dataclasses import dataclass, asdict, field, fields as dataclass_fields, MISSING
from typing import Optional, List, Dict, Any
from decimal import Decimal
from datetime import date, datetime


# =============================================================================
# Event Validation
# =============================================================================

class InvalidEventPayload(Exception):
    """
    Raised when an event payload fails validation.

    This exception is raised at emission time when the provided data does
    not match the schema registered for the event type.
    """
    def __init__(self, event_type: str, errors: List[str]):
        self.event_type = event_type
        self.errors = errors
        error_list = "\n  - ".join(errors)
        super().__init__(
            f"Invalid payload for event '{event_type}':\n  - {error_list}"
        )


def validate_event_payload(event_type: str, data: Dict[str, Any]) -> None:
    """
    Validate that a data dict matches the schema for an event type.

    Checks that required fields (fields without defaults) are present and
    that no unexpected fields are provided.

    Raises:
        InvalidEventPayload: If validation fails
        ValueError: If event_type has no registered schema
    """
    data_class = EVENT_DATA_CLASSES.get(event_type)
    if data_class is None:
        raise ValueError(
            f"No schema registered for event type '{event_type}'. "
            f"Add a dataclass to EVENT_DATA_CLASSES."
        )

    errors = []
    dc_fields = {f.name: f for f in dataclass_fields(data_class)}

    for field_name, field_info in dc_fields.items():
        required = (
            field_info.default is MISSING and
            field_info.default_factory is MISSING
        )
        if required and field_name not in data:
            errors.append(f"Missing required field: '{field_name}'")

    unexpected = set(data.keys()) - set(dc_fields.keys())
    if unexpected:
        errors.append(
            f"Unexpected fields: {sorted(unexpected)}. "
            f"Expected: {sorted(dc_fields.keys())}"
        )

    if errors:
        raise InvalidEventPayload(event_type, errors)


# =============================================================================
# Base Event Classes
# =============================================================================

def _jsonable(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


@dataclass
class BaseEventData:
    """Base class for all event data."""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON storage."""
        return {key: _jsonable(value) for key, value in asdict(self).items()}


# =============================================================================
# Account Events
# =============================================================================

@dataclass
class AccountCreatedData(BaseEventData):
    """Data for account.created event."""
    account_public_id: str
    code: str
    name: str
    account_type: str
    region: str
    parent_public_id: Optional[str] = None
    description: str = ""


@dataclass
class AccountUpdatedData(BaseEventData):
    """Data for account.updated event."""
    account_public_id: str
    changes: Dict[str, Dict[str, Any]]  # {"field": {"old": x, "new": y}}


# =============================================================================
# Transaction Events
# =============================================================================

@dataclass
class EntryData(BaseEventData):
    """Entry data for embedding in transaction events."""
    line_no: int
    account_public_id: str
    account_code: str
    debit: str
    credit: str
    description: str = ""


@dataclass
class TransactionCreatedData(BaseEventData):
    """Data for transaction.created event."""
    transaction_public_id: str
    date: str
    description: str
    total_debit: str
    total_credit: str
    entries: List[Dict[str, Any]] = field(default_factory=list)
    reference: str = ""
    service_type: str = ""
    declared_tax: Optional[str] = None
    batch_id: str = ""


@dataclass
class TransactionPostedData(BaseEventData):
    """
    Data for transaction.posted event.

    balance_changes maps account public id to the signed delta applied.
    """
    transaction_public_id: str
    posted_at: str
    balance_changes: Dict[str, str]


@dataclass
class TransactionVoidedData(BaseEventData):
    """Data for transaction.voided event."""
    transaction_public_id: str
    voided_at: str
    balance_changes: Dict[str, str]


# =============================================================================
# Reconciliation & Report Events
# =============================================================================

@dataclass
class ReconciliationCreatedData(BaseEventData):
    reconciliation_public_id: str
    account_public_id: str
    date: str
    matched_transaction_public_ids: List[str]
    adjustment_transaction_public_id: Optional[str] = None


@dataclass
class ReportGeneratedData(BaseEventData):
    report_public_id: str
    report_type: str
    start_date: str
    end_date: str


# =============================================================================
# Registry
# =============================================================================

class EventTypes:
    ACCOUNT_CREATED = "account.created"
    ACCOUNT_UPDATED = "account.updated"

    TRANSACTION_CREATED = "transaction.created"
    TRANSACTION_POSTED = "transaction.posted"
    TRANSACTION_VOIDED = "transaction.voided"

    RECONCILIATION_CREATED = "reconciliation.created"
    REPORT_GENERATED = "report.generated"


EVENT_DATA_CLASSES = {
    EventTypes.ACCOUNT_CREATED: AccountCreatedData,
    EventTypes.ACCOUNT_UPDATED: AccountUpdatedData,
    EventTypes.TRANSACTION_CREATED: TransactionCreatedData,
    EventTypes.TRANSACTION_POSTED: TransactionPostedData,
    EventTypes.TRANSACTION_VOIDED: TransactionVoidedData,
    EventTypes.RECONCILIATION_CREATED: ReconciliationCreatedData,
    EventTypes.REPORT_GENERATED: ReportGeneratedData,
}
