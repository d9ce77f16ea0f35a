# accounting/exceptions.py
"""
Ledger error taxonomy.

Structural and state errors are raised and propagate to the immediate
caller: the operation did not happen. Compliance findings are never
raised here; they are returned as data by the compliance engine.

Each class carries the HTTP status the API layer answers with.
"""


class LedgerError(Exception):
    """Base exception for all ledger failures."""

    http_status = 400


# =============================================================================
# Structural Errors (the request itself is malformed)
# =============================================================================

class StructuralError(LedgerError):
    """Raised when an operation's input violates a ledger invariant."""


class UnbalancedTransactionError(StructuralError):
    """Raised when total debits do not equal total credits."""

    def __init__(self, total_debit, total_credit):
        self.total_debit = total_debit
        self.total_credit = total_credit
        super().__init__(
            f"Transaction debits and credits must be equal. "
            f"Debit={total_debit} Credit={total_credit}"
        )


class InvalidEntryError(StructuralError):
    """Raised when a transaction entry is malformed."""


class ParentNotFound(StructuralError):
    """Raised when a parent account does not exist in the tenant."""


class DuplicateAccountCode(StructuralError):
    """Raised when an account code is already used in the tenant."""


class ReadOnlyFieldError(StructuralError):
    """Raised when an update targets a derived or unknown field."""


# =============================================================================
# Not Found
# =============================================================================

class NotFoundError(LedgerError):
    http_status = 404


class AccountNotFound(NotFoundError):
    pass


class TransactionNotFound(NotFoundError):
    pass


class BatchNotFound(NotFoundError):
    pass


class ReportNotFound(NotFoundError):
    pass


# =============================================================================
# State Errors (the request is valid, the record is in the wrong state)
# =============================================================================

class StateError(LedgerError):
    http_status = 409


class InvalidStateError(StateError):
    """Raised when a transaction is not in the status an operation requires."""

    def __init__(self, transaction_id, status, expected):
        self.transaction_id = transaction_id
        self.status = status
        self.expected = expected
        super().__init__(
            f"Transaction {transaction_id} is {status}; expected {expected}."
        )


class ComplianceBlockedError(StateError):
    """Raised when blocking compliance mode rejects a posting."""

    def __init__(self, transaction_id, issues):
        self.transaction_id = transaction_id
        self.issues = list(issues)
        super().__init__(
            f"Transaction {transaction_id} failed compliance: " + "; ".join(self.issues)
        )


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigError(LedgerError):
    http_status = 500


class ConfigNotFound(ConfigError):
    """Raised when a region key has no configuration."""


class UnknownReportType(ConfigError):
    http_status = 400
