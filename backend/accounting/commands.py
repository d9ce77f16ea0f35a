# accounting/commands.py
"""
Command layer for ledger operations.

Commands are the single point where business operations happen.
Views call commands; commands enforce rules and emit events.

Pattern:
1. Resolve and lock the records involved (select_for_update)
2. Apply business policies (can_*)
3. Perform the operation inside command_writes_allowed()
4. Emit event (emit_event)
5. Return CommandResult

Structural and state failures are raised (see accounting.exceptions);
the surrounding transaction.atomic block guarantees that nothing is
persisted when a command raises.

Balance updates use F() expressions on rows locked in primary-key order,
so two posts touching overlapping accounts serialize instead of
interleaving their read-modify-write steps.
"""

from collections import defaultdict
from datetime import date as date_type
from decimal import Decimal, InvalidOperation
import hashlib
import json
import logging
import uuid

from django.db import transaction, IntegrityError
from django.db.models import F
from django.utils import timezone
from django.utils.dateparse import parse_date

from accounting.exceptions import (
    AccountNotFound,
    ComplianceBlockedError,
    DuplicateAccountCode,
    InvalidEntryError,
    InvalidStateError,
    ParentNotFound,
    ReadOnlyFieldError,
    StructuralError,
    TransactionNotFound,
    UnbalancedTransactionError,
)
from accounting.models import (
    MONEY_Q,
    Account,
    Reconciliation,
    Transaction,
    TransactionEntry,
)
from accounting.policies import (
    can_post_to_account,
    can_post_transaction,
    can_void_transaction,
    passes_compliance_gate,
)
from accounting.write_barrier import command_writes_allowed
from events.emitter import emit_event
from events.types import (
    EventTypes,
    AccountCreatedData,
    AccountUpdatedData,
    EntryData,
    TransactionCreatedData,
    TransactionPostedData,
    TransactionVoidedData,
    ReconciliationCreatedData,
)


logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
RECONCILIATION_AMOUNT_TOLERANCE = Decimal("0.01")
RECONCILIATION_DAY_TOLERANCE = 1
SUSPENSE_ACCOUNT_CODE = "SUSP"


class CommandResult:
    """
    Wrapper for command results.

    Usage:
        result = post_transaction(ctx, tx.id)
        tx = result.data
        event = result.event
    """

    def __init__(self, data=None, event=None):
        self.success = True
        self.data = data
        self.event = event  # The emitted event, if any

    @classmethod
    def ok(cls, data=None, event=None):
        return cls(data=data, event=event)


def _changes_hash(changes: dict) -> str:
    payload = json.dumps(changes, sort_keys=True, separators=(",", ":"), default=str).encode()
    return hashlib.sha256(payload).hexdigest()[:12]


# =============================================================================
# Input Normalization
# =============================================================================

def _money(value, label: str) -> Decimal:
    """Coerce an amount to a 2dp Decimal."""
    if value is None or value == "":
        return ZERO
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidEntryError(f"{label} is not a valid amount: {value!r}")
    if not amount.is_finite():
        raise InvalidEntryError(f"{label} is not a valid amount: {value!r}")
    return amount.quantize(MONEY_Q)


def as_date(value, label: str = "date") -> date_type:
    if isinstance(value, date_type):
        return value
    parsed = parse_date(str(value)) if value else None
    if parsed is None:
        raise StructuralError(f"{label} must be an ISO date (YYYY-MM-DD), got {value!r}.")
    return parsed


def _get_account(ctx, account_id, lock=False) -> Account:
    qs = Account.objects.filter(tenant=ctx.tenant)
    if lock:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=account_id)
    except (Account.DoesNotExist, ValueError, TypeError):
        raise AccountNotFound(f"Account {account_id} not found.")


def _get_transaction(ctx, transaction_id, lock=False) -> Transaction:
    qs = Transaction.objects.filter(tenant=ctx.tenant)
    if lock:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=transaction_id)
    except (Transaction.DoesNotExist, ValueError, TypeError):
        raise TransactionNotFound(f"Transaction {transaction_id} not found.")


def _resolve_entry_account(ctx, raw: dict, line_no: int) -> Account:
    """Entries name their account by id or by chart code."""
    account = None
    if raw.get("account_id") is not None:
        account = Account.objects.filter(tenant=ctx.tenant, pk=raw["account_id"]).first()
    elif raw.get("account_code"):
        account = Account.objects.filter(tenant=ctx.tenant, code=raw["account_code"]).first()
    else:
        raise InvalidEntryError(f"Entry {line_no}: account_id or account_code is required.")

    if account is None:
        ref = raw.get("account_id", raw.get("account_code"))
        raise InvalidEntryError(f"Entry {line_no}: account {ref} not found.")

    allowed, reason = can_post_to_account(account)
    if not allowed:
        raise InvalidEntryError(f"Entry {line_no}: {reason}")
    return account


def _normalize_entries(ctx, entries) -> list[dict]:
    """
    Validate entry shape and the double-entry invariant.

    Each entry carries exactly one non-zero, non-negative side. A
    transaction needs at least two entries and equal debit and credit
    totals.

    Raises:
        InvalidEntryError: On a malformed entry
        UnbalancedTransactionError: If debits and credits differ
    """
    if not isinstance(entries, (list, tuple)) or len(entries) < 2:
        raise InvalidEntryError("A transaction needs at least two entries.")

    normalized = []
    for line_no, raw in enumerate(entries, start=1):
        if not isinstance(raw, dict):
            raise InvalidEntryError(f"Entry {line_no} must be a mapping.")

        debit = _money(raw.get("debit"), f"Entry {line_no} debit")
        credit = _money(raw.get("credit"), f"Entry {line_no} credit")

        if debit < 0 or credit < 0:
            raise InvalidEntryError(f"Entry {line_no}: amounts cannot be negative.")
        if debit and credit:
            raise InvalidEntryError(f"Entry {line_no}: cannot have both debit and credit.")
        if not debit and not credit:
            raise InvalidEntryError(f"Entry {line_no}: needs a debit or a credit amount.")

        normalized.append({
            "line_no": line_no,
            "account": _resolve_entry_account(ctx, raw, line_no),
            "debit": debit,
            "credit": credit,
            "description": (raw.get("description") or "").strip(),
        })

    total_debit = sum((e["debit"] for e in normalized), ZERO)
    total_credit = sum((e["credit"] for e in normalized), ZERO)
    if total_debit != total_credit:
        raise UnbalancedTransactionError(total_debit, total_credit)

    return normalized


# =============================================================================
# Account Commands
# =============================================================================

UPDATABLE_ACCOUNT_FIELDS = {"name", "description", "status", "parent_id"}
DERIVED_ACCOUNT_FIELDS = {"balance"}


@transaction.atomic
def create_account(
    ctx,
    code: str,
    name: str,
    account_type: str,
    parent_id: int = None,
    description: str = "",
) -> CommandResult:
    """
    Create a new account in the tenant's chart of accounts.

    Args:
        ctx: LedgerContext
        code: Account code (unique per tenant)
        name: Account name
        account_type: One of Account.AccountType values (case-insensitive)
        parent_id: Optional parent account ID in the same tenant
        description: Free text

    Returns:
        CommandResult with the created Account; balance starts at 0

    Raises:
        ParentNotFound, DuplicateAccountCode, StructuralError
    """
    code = (code or "").strip()
    name = (name or "").strip()
    account_type = (account_type or "").strip().upper()

    if not code or not name:
        raise StructuralError("Account code and name are required.")
    if account_type not in Account.AccountType.values:
        raise StructuralError(f"Unknown account type: {account_type!r}")

    parent = None
    if parent_id is not None:
        parent = Account.objects.filter(tenant=ctx.tenant, pk=parent_id).first()
        if parent is None:
            raise ParentNotFound(f"Parent account {parent_id} not found.")

    if Account.objects.filter(tenant=ctx.tenant, code=code).exists():
        raise DuplicateAccountCode(f"Account code '{code}' already exists.")

    try:
        with transaction.atomic(), command_writes_allowed():
            account = Account.objects.create(
                tenant=ctx.tenant,
                code=code,
                name=name,
                account_type=account_type,
                parent=parent,
                description=description or "",
                region=ctx.region,
            )
    except IntegrityError:
        raise DuplicateAccountCode(f"Account code '{code}' already exists.")

    event = emit_event(
        ctx,
        EventTypes.ACCOUNT_CREATED,
        aggregate_type="Account",
        aggregate_id=account.public_id,
        idempotency_key=f"account.created:{account.public_id}",
        data=AccountCreatedData(
            account_public_id=str(account.public_id),
            code=account.code,
            name=account.name,
            account_type=account.account_type,
            region=account.region,
            parent_public_id=str(parent.public_id) if parent else None,
            description=account.description,
        ),
    )

    return CommandResult.ok(account, event=event)


@transaction.atomic
def update_account(ctx, account_id: int, **updates) -> CommandResult:
    """
    Update descriptive fields of an account.

    Only name, description, status and parent_id are recognized. The
    balance is derived from posted entries and can never be assigned.

    Raises:
        ReadOnlyFieldError: On balance or any unknown field
        AccountNotFound, ParentNotFound, StructuralError
    """
    derived = DERIVED_ACCOUNT_FIELDS & set(updates)
    if derived:
        raise ReadOnlyFieldError(
            "Account balance is derived from posted transactions and cannot be set."
        )
    unknown = set(updates) - UPDATABLE_ACCOUNT_FIELDS
    if unknown:
        raise ReadOnlyFieldError(f"Unknown or read-only account fields: {sorted(unknown)}")

    account = _get_account(ctx, account_id, lock=True)

    if "status" in updates and updates["status"] not in Account.Status.values:
        raise StructuralError(f"Unknown account status: {updates['status']!r}")

    if "parent_id" in updates and updates["parent_id"] is not None:
        parent = Account.objects.filter(tenant=ctx.tenant, pk=updates["parent_id"]).first()
        if parent is None:
            raise ParentNotFound(f"Parent account {updates['parent_id']} not found.")
        if parent.pk == account.pk or account in parent.get_ancestors():
            raise StructuralError("An account cannot be its own ancestor.")

    changes = {}
    for field, value in updates.items():
        old_value = getattr(account, field)
        if field == "name":
            value = (value or "").strip()
            if not value:
                raise StructuralError("Account name cannot be empty.")
        if old_value != value:
            changes[field] = {"old": old_value, "new": value}
            setattr(account, field, value)

    if not changes:
        return CommandResult.ok(account)  # No changes, no event

    with command_writes_allowed():
        account.save(update_fields=[*changes.keys(), "updated_at"])

    event = emit_event(
        ctx,
        EventTypes.ACCOUNT_UPDATED,
        aggregate_type="Account",
        aggregate_id=account.public_id,
        idempotency_key=f"account.updated:{account.public_id}:{_changes_hash(changes)}:{account.updated_at.isoformat()}",
        data=AccountUpdatedData(
            account_public_id=str(account.public_id),
            changes=changes,
        ),
    )

    return CommandResult.ok(account, event=event)


@transaction.atomic
def seed_chart_of_accounts(ctx) -> CommandResult:
    """
    Create the region's standard chart of accounts.

    Codes the tenant already has are left untouched, so the command can be
    re-run after the regional chart grows.

    Returns:
        CommandResult with the list of newly created accounts
    """
    existing = set(
        Account.objects.filter(tenant=ctx.tenant).values_list("code", flat=True)
    )
    created = []
    chart = ctx.config.accounting_standard.chart_of_accounts
    for code in sorted(chart):
        if code in existing:
            continue
        chart_account = chart[code]
        result = create_account(
            ctx,
            code=chart_account.code,
            name=chart_account.name,
            account_type=chart_account.type.upper(),
            description=chart_account.category,
        )
        created.append(result.data)

    logger.info(
        "Chart of accounts seeded",
        extra={"tenant_id": ctx.tenant_id, "region": ctx.region, "accounts_created": len(created)},
    )
    return CommandResult.ok(created)


# =============================================================================
# Transaction Commands
# =============================================================================

def _create_transaction_rows(
    ctx,
    date,
    description,
    entries,
    reference="",
    service_type="",
    declared_tax=None,
    batch_id="",
):
    """Persist a PENDING transaction and its entries. Caller owns the atomic block."""
    tx_date = as_date(date)
    description = (description or "").strip()
    if not description:
        raise StructuralError("Transaction description is required.")

    normalized = _normalize_entries(ctx, entries)
    declared = _money(declared_tax, "declared_tax") if declared_tax not in (None, "") else None

    with command_writes_allowed():
        tx = Transaction.objects.create(
            tenant=ctx.tenant,
            date=tx_date,
            description=description,
            reference=reference or "",
            batch_id=batch_id,
            service_type=service_type or "",
            declared_tax=declared,
            created_by=ctx.actor,
        )
        for entry in normalized:
            TransactionEntry.objects.create(
                transaction=tx,
                tenant=ctx.tenant,
                line_no=entry["line_no"],
                account=entry["account"],
                debit=entry["debit"],
                credit=entry["credit"],
                description=entry["description"],
            )

    total = sum((e["debit"] for e in normalized), ZERO)
    emit_event(
        ctx,
        EventTypes.TRANSACTION_CREATED,
        aggregate_type="Transaction",
        aggregate_id=tx.public_id,
        idempotency_key=f"transaction.created:{tx.public_id}",
        data=TransactionCreatedData(
            transaction_public_id=str(tx.public_id),
            date=tx.date.isoformat(),
            description=tx.description,
            total_debit=str(total),
            total_credit=str(total),
            entries=[
                EntryData(
                    line_no=e["line_no"],
                    account_public_id=str(e["account"].public_id),
                    account_code=e["account"].code,
                    debit=str(e["debit"]),
                    credit=str(e["credit"]),
                    description=e["description"],
                ).to_dict()
                for e in normalized
            ],
            reference=tx.reference,
            service_type=tx.service_type,
            declared_tax=str(declared) if declared is not None else None,
            batch_id=tx.batch_id,
        ),
    )
    return tx


@transaction.atomic
def create_transaction(
    ctx,
    date,
    description: str,
    entries: list,
    reference: str = "",
    service_type: str = "",
    declared_tax=None,
) -> CommandResult:
    """
    Create a PENDING transaction.

    Account balances are NOT touched until the transaction is posted.

    Args:
        ctx: LedgerContext
        date: Transaction date (date or ISO string)
        description: Transaction description
        entries: List of dicts with account_id (or account_code), debit,
                 credit and optional description
        reference: Producer's reference (invoice number etc.)
        service_type: Service classification checked against tax exemptions
        declared_tax: Tax amount the producer computed, if any

    Raises:
        UnbalancedTransactionError: If total debits != total credits
        InvalidEntryError: On malformed entries
    """
    tx = _create_transaction_rows(
        ctx, date, description, entries,
        reference=reference, service_type=service_type, declared_tax=declared_tax,
    )
    logger.info(
        "Transaction created",
        extra={"tenant_id": ctx.tenant_id, "transaction_id": tx.id, "amount": str(tx.amount)},
    )
    return CommandResult.ok(tx)


def _flip_status(ctx, tx, expected, new_status, **stamps):
    """
    Compare-and-swap the transaction status.

    The UPDATE only matches while the row still has the expected status,
    so of two concurrent callers exactly one sees a row count of 1.
    """
    updated = Transaction.objects.filter(
        pk=tx.pk, tenant=ctx.tenant, status=expected,
    ).update(status=new_status, updated_at=timezone.now(), **stamps)
    if updated != 1:
        current = Transaction.objects.filter(pk=tx.pk).values_list("status", flat=True).first()
        raise InvalidStateError(tx.public_id, current, expected)


def _lock_accounts(ctx, account_ids) -> list[Account]:
    """Lock accounts in primary-key order to avoid lock-order deadlocks."""
    return list(
        Account.objects.select_for_update()
        .filter(tenant=ctx.tenant, pk__in=set(account_ids))
        .order_by("pk")
    )


def _apply_entries(ctx, tx, sign: int) -> dict[str, str]:
    """
    Apply sign * (debit - credit) of every entry to its account.

    Returns:
        {account public id: applied delta} for the event payload
    """
    deltas = defaultdict(lambda: ZERO)
    for entry in tx.entries.all():
        deltas[entry.account_id] += entry.net * sign

    now = timezone.now()
    changes = {}
    for account in _lock_accounts(ctx, deltas.keys()):
        delta = deltas[account.pk]
        Account.objects.filter(pk=account.pk).update(
            balance=F("balance") + delta,
            updated_at=now,
        )
        changes[str(account.public_id)] = str(delta)
    return changes


@transaction.atomic
def post_transaction(ctx, transaction_id: int) -> CommandResult:
    """
    Post a PENDING transaction, applying its entries to account balances.

    The status flip and every balance update commit together or not at
    all. A second post of the same transaction raises InvalidStateError
    and leaves balances untouched.

    Raises:
        TransactionNotFound, InvalidStateError, ComplianceBlockedError
    """
    tx = _get_transaction(ctx, transaction_id, lock=True)

    allowed, reason = can_post_transaction(ctx, tx)
    if not allowed:
        raise InvalidStateError(tx.public_id, tx.status, Transaction.Status.PENDING)

    passed, issues = passes_compliance_gate(ctx, tx)
    if not passed:
        logger.warning(
            "Posting blocked by compliance",
            extra={"tenant_id": ctx.tenant_id, "transaction_id": tx.id, "issues": issues},
        )
        raise ComplianceBlockedError(tx.public_id, issues)

    posted_at = timezone.now()
    _flip_status(ctx, tx, Transaction.Status.PENDING, Transaction.Status.POSTED, posted_at=posted_at)
    balance_changes = _apply_entries(ctx, tx, sign=1)

    event = emit_event(
        ctx,
        EventTypes.TRANSACTION_POSTED,
        aggregate_type="Transaction",
        aggregate_id=tx.public_id,
        idempotency_key=f"transaction.posted:{tx.public_id}",
        occurred_at=posted_at,
        data=TransactionPostedData(
            transaction_public_id=str(tx.public_id),
            posted_at=posted_at.isoformat(),
            balance_changes=balance_changes,
        ),
    )

    logger.info(
        "Transaction posted",
        extra={"tenant_id": ctx.tenant_id, "transaction_id": tx.id, "accounts": len(balance_changes)},
    )
    tx.refresh_from_db()
    return CommandResult.ok(tx, event=event)


@transaction.atomic
def void_transaction(ctx, transaction_id: int) -> CommandResult:
    """
    Void a POSTED transaction by applying the exact inverse of its entries.

    VOIDED is terminal: the transaction stays on record for audit and can
    never be posted or voided again.

    Raises:
        TransactionNotFound, InvalidStateError
    """
    tx = _get_transaction(ctx, transaction_id, lock=True)

    allowed, reason = can_void_transaction(ctx, tx)
    if not allowed:
        raise InvalidStateError(tx.public_id, tx.status, Transaction.Status.POSTED)

    voided_at = timezone.now()
    _flip_status(ctx, tx, Transaction.Status.POSTED, Transaction.Status.VOIDED, voided_at=voided_at)
    balance_changes = _apply_entries(ctx, tx, sign=-1)

    event = emit_event(
        ctx,
        EventTypes.TRANSACTION_VOIDED,
        aggregate_type="Transaction",
        aggregate_id=tx.public_id,
        idempotency_key=f"transaction.voided:{tx.public_id}",
        occurred_at=voided_at,
        data=TransactionVoidedData(
            transaction_public_id=str(tx.public_id),
            voided_at=voided_at.isoformat(),
            balance_changes=balance_changes,
        ),
    )

    logger.info(
        "Transaction voided",
        extra={"tenant_id": ctx.tenant_id, "transaction_id": tx.id},
    )
    tx.refresh_from_db()
    return CommandResult.ok(tx, event=event)


# =============================================================================
# Batch Commands
# =============================================================================

BATCH_FIELDS = {"date", "description", "entries", "reference", "service_type", "declared_tax"}


@transaction.atomic
def create_batch_transactions(ctx, batch: list) -> CommandResult:
    """
    Create several PENDING transactions as one unit of work.

    Every item is validated before anything is written; if any item is
    invalid nothing is created.

    Every transaction gets the same batch_id; items without a reference
    are given BATCH-<batch_id>.

    Args:
        batch: List of dicts with create_transaction's keyword arguments

    Returns:
        CommandResult with the created transactions, in batch order
    """
    if not batch:
        raise StructuralError("Batch is empty.")

    for index, item in enumerate(batch):
        unknown = set(item) - BATCH_FIELDS
        if unknown:
            raise StructuralError(f"Batch item {index}: unknown fields {sorted(unknown)}")
        if not (item.get("description") or "").strip():
            raise StructuralError(f"Batch item {index}: description is required.")
        as_date(item.get("date"))
        _normalize_entries(ctx, item.get("entries"))

    batch_id = uuid.uuid4().hex[:12].upper()
    created = []
    for item in batch:
        item = dict(item)
        item["reference"] = item.get("reference") or f"BATCH-{batch_id}"
        created.append(_create_transaction_rows(ctx, batch_id=batch_id, **item))

    logger.info(
        "Transaction batch created",
        extra={"tenant_id": ctx.tenant_id, "batch_id": batch_id, "count": len(created)},
    )
    return CommandResult.ok(created)


@transaction.atomic
def post_batch_transactions(ctx, transaction_ids: list) -> CommandResult:
    """
    Post several PENDING transactions as one unit of work.

    Any state error rolls back the whole batch.

    Locks are taken in the same order as post_transaction: transaction
    rows first, then accounts, each in primary-key order.
    """
    if not transaction_ids:
        raise StructuralError("Batch is empty.")

    list(
        Transaction.objects.select_for_update()
        .filter(tenant=ctx.tenant, pk__in=set(transaction_ids))
        .order_by("pk")
        .values_list("pk", flat=True)
    )
    account_ids = TransactionEntry.objects.filter(
        tenant=ctx.tenant, transaction_id__in=transaction_ids,
    ).values_list("account_id", flat=True)
    _lock_accounts(ctx, account_ids)

    posted = [post_transaction(ctx, tx_id).data for tx_id in transaction_ids]
    return CommandResult.ok(posted)


# =============================================================================
# Reconciliation Commands
# =============================================================================

def perform_reconciliation(ctx, account_id: int, start_date, end_date, statement_lines: list) -> dict:
    """
    Match posted movements on an account against bank statement lines.

    A movement matches the first unmatched statement line whose amount is
    within 0.01 and whose date is within one day. Statement amounts are
    signed like the ledger: money in is positive.

    Returns:
        {"matched": [...], "unmatched_transactions": [...],
         "unmatched_statement_lines": [...]}
    """
    account = _get_account(ctx, account_id)
    start = as_date(start_date, "start_date")
    end = as_date(end_date, "end_date")

    lines = []
    for index, raw in enumerate(statement_lines or []):
        lines.append({
            "index": index,
            "date": as_date(raw.get("date"), f"statement line {index} date"),
            "amount": _money(raw.get("amount"), f"statement line {index} amount"),
            "description": raw.get("description", ""),
        })

    movements = defaultdict(lambda: ZERO)
    tx_by_id = {}
    entries = (
        TransactionEntry.objects
        .filter(
            tenant=ctx.tenant,
            account=account,
            transaction__status=Transaction.Status.POSTED,
            transaction__date__gte=start,
            transaction__date__lte=end,
        )
        .select_related("transaction")
        .order_by("transaction__date", "transaction_id")
    )
    for entry in entries:
        movements[entry.transaction_id] += entry.net
        tx_by_id[entry.transaction_id] = entry.transaction

    matched, unmatched = [], []
    remaining = list(lines)
    for tx_id, amount in movements.items():
        tx = tx_by_id[tx_id]
        hit = next(
            (
                line for line in remaining
                if abs(line["amount"] - amount) < RECONCILIATION_AMOUNT_TOLERANCE
                and abs((line["date"] - tx.date).days) <= RECONCILIATION_DAY_TOLERANCE
            ),
            None,
        )
        row = {"transaction_id": tx.id, "date": tx.date, "description": tx.description, "amount": amount}
        if hit is None:
            unmatched.append(row)
        else:
            remaining.remove(hit)
            matched.append({**row, "statement_line": hit})

    return {
        "account_id": account.id,
        "start_date": start,
        "end_date": end,
        "matched": matched,
        "unmatched_transactions": unmatched,
        "unmatched_statement_lines": remaining,
    }


def _suspense_account(ctx) -> Account:
    account = Account.objects.filter(tenant=ctx.tenant, code=SUSPENSE_ACCOUNT_CODE).first()
    if account is None:
        account = create_account(
            ctx,
            code=SUSPENSE_ACCOUNT_CODE,
            name="Suspense Account",
            account_type=Account.AccountType.LIABILITY,
            description="Reconciliation adjustments awaiting investigation",
        ).data
    return account


@transaction.atomic
def create_reconciliation(
    ctx,
    account_id: int,
    date,
    description: str,
    matched_transaction_ids: list,
    adjustment_amount=None,
    notes: str = "",
) -> CommandResult:
    """
    Record a completed bank reconciliation.

    When |adjustment_amount| exceeds 0.01 an adjustment transaction between
    the account and the suspense account is created and posted. A positive
    adjustment debits the account.

    Returns:
        CommandResult with {"reconciliation": ..., "adjustment_transaction": ...}
    """
    account = _get_account(ctx, account_id)
    rec_date = as_date(date)

    ids = list(matched_transaction_ids or [])
    matched = list(Transaction.objects.filter(tenant=ctx.tenant, pk__in=ids))
    missing = set(ids) - {tx.pk for tx in matched}
    if missing:
        raise TransactionNotFound(f"Transactions not found: {sorted(missing)}")

    adjustment_tx = None
    adjustment = _money(adjustment_amount, "adjustment_amount")
    if abs(adjustment) > RECONCILIATION_AMOUNT_TOLERANCE:
        suspense = _suspense_account(ctx)
        amount = abs(adjustment)
        account_side = {"debit": amount} if adjustment > 0 else {"credit": amount}
        suspense_side = {"credit": amount} if adjustment > 0 else {"debit": amount}
        adjustment_tx = _create_transaction_rows(
            ctx,
            rec_date,
            f"Reconciliation adjustment: {description}",
            [
                {"account_id": account.id, **account_side},
                {"account_id": suspense.id, **suspense_side},
            ],
            reference="RECONCILIATION",
        )
        adjustment_tx = post_transaction(ctx, adjustment_tx.id).data

    with command_writes_allowed():
        reconciliation = Reconciliation.objects.create(
            tenant=ctx.tenant,
            account=account,
            date=rec_date,
            description=description,
            notes=notes or "",
            adjustment_transaction=adjustment_tx,
        )
        reconciliation.transactions.set(matched)

    event = emit_event(
        ctx,
        EventTypes.RECONCILIATION_CREATED,
        aggregate_type="Reconciliation",
        aggregate_id=reconciliation.public_id,
        idempotency_key=f"reconciliation.created:{reconciliation.public_id}",
        data=ReconciliationCreatedData(
            reconciliation_public_id=str(reconciliation.public_id),
            account_public_id=str(account.public_id),
            date=rec_date.isoformat(),
            matched_transaction_public_ids=[str(tx.public_id) for tx in matched],
            adjustment_transaction_public_id=str(adjustment_tx.public_id) if adjustment_tx else None,
        ),
    )

    return CommandResult.ok(
        {"reconciliation": reconciliation, "adjustment_transaction": adjustment_tx},
        event=event,
    )
