# accounting/queries.py
"""
Read-side functions for the ledger.

Queries never write. Every function takes the LedgerContext first and
only ever sees the context tenant's rows.

Consistency:
- get_trial_balance reads every balance in a single SELECT inside an
  atomic block, so it is a snapshot of committed balances.
- get_account_transactions and verify_account_balances fold posted
  entries with several queries; a post committing concurrently may or
  may not be reflected.
"""

from collections import OrderedDict
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q, Sum, F

from accounting.exceptions import AccountNotFound, BatchNotFound, StructuralError, TransactionNotFound
from accounting.models import MONEY_Q, Account, Transaction, TransactionEntry


ZERO = Decimal("0.00")
DEFAULT_HISTORY_LIMIT = 50


def get_account(ctx, account_id) -> Account:
    try:
        return Account.objects.get(tenant=ctx.tenant, pk=account_id)
    except (Account.DoesNotExist, ValueError, TypeError):
        raise AccountNotFound(f"Account {account_id} not found.")


def list_accounts(ctx, type=None, parent_id=None, search=None, status=None):
    """
    List the tenant's accounts ordered by code.

    Args:
        type: Account type filter (case-insensitive)
        parent_id: Only direct children of this account
        search: Substring matched against code or name
        status: ACTIVE or INACTIVE
    """
    qs = Account.objects.filter(tenant=ctx.tenant)
    if type:
        qs = qs.filter(account_type=type.upper())
    if parent_id is not None:
        qs = qs.filter(parent_id=parent_id)
    if status:
        qs = qs.filter(status=status.upper())
    if search:
        qs = qs.filter(Q(code__icontains=search) | Q(name__icontains=search))
    return qs.order_by("code")


def get_transaction(ctx, transaction_id) -> Transaction:
    try:
        return (
            Transaction.objects
            .prefetch_related("entries__account")
            .get(tenant=ctx.tenant, pk=transaction_id)
        )
    except (Transaction.DoesNotExist, ValueError, TypeError):
        raise TransactionNotFound(f"Transaction {transaction_id} not found.")


def list_transactions(ctx, status=None, start_date=None, end_date=None, reference=None, batch_id=None):
    qs = Transaction.objects.filter(tenant=ctx.tenant)
    if status:
        qs = qs.filter(status=status.upper())
    if start_date:
        qs = qs.filter(date__gte=start_date)
    if end_date:
        qs = qs.filter(date__lte=end_date)
    if reference:
        qs = qs.filter(reference=reference)
    if batch_id:
        qs = qs.filter(batch_id=batch_id)
    return qs.prefetch_related("entries__account").order_by("date", "id")


# =============================================================================
# Trial Balance
# =============================================================================

def get_trial_balance(ctx) -> dict:
    """
    Split every account balance into a debit or credit column.

    Positive balances go to the debit column; negative balances go to the
    credit column as absolute values. Since every posted transaction is
    balanced, total_debits == total_credits always holds.
    """
    with transaction.atomic():
        rows = list(
            Account.objects
            .filter(tenant=ctx.tenant)
            .order_by("code")
            .values("id", "code", "name", "account_type", "balance")
        )

    accounts = []
    total_debits = ZERO
    total_credits = ZERO
    for row in rows:
        balance = row["balance"]
        debit = balance if balance > 0 else ZERO
        credit = -balance if balance < 0 else ZERO
        total_debits += debit
        total_credits += credit
        accounts.append({
            "account_id": row["id"],
            "code": row["code"],
            "name": row["name"],
            "type": row["account_type"],
            "balance": balance,
            "debit": debit,
            "credit": credit,
        })

    return {
        "accounts": accounts,
        "total_debits": total_debits,
        "total_credits": total_credits,
        "is_balanced": total_debits == total_credits,
    }


# =============================================================================
# Account History
# =============================================================================

def _history_limit(limit) -> int:
    max_limit = getattr(settings, "LEDGER_ACCOUNT_HISTORY_MAX_LIMIT", 500)
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        raise StructuralError(f"limit must be an integer, got {limit!r}")
    if limit < 1:
        raise StructuralError("limit must be at least 1.")
    return min(limit, max_limit)


def get_account_transactions(
    ctx,
    account_id,
    start_date=None,
    end_date=None,
    page: int = 1,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> dict:
    """
    Posted activity on one account with opening, running and closing balances.

    opening_balance is the account balance just before start_date.
    Transactions in the window are ordered by date ascending; each row
    carries the running balance after it. closing_balance folds the
    whole window, not just the returned page.
    """
    account = get_account(ctx, account_id)
    limit = _history_limit(limit)
    try:
        page = max(int(page), 1)
    except (TypeError, ValueError):
        raise StructuralError(f"page must be an integer, got {page!r}")

    posted = TransactionEntry.objects.filter(
        tenant=ctx.tenant,
        account=account,
        transaction__status=Transaction.Status.POSTED,
    )

    opening_balance = ZERO
    if start_date:
        opening_balance = posted.filter(transaction__date__lt=start_date).aggregate(
            total=Sum(F("debit") - F("credit"))
        )["total"] or ZERO
        opening_balance = opening_balance.quantize(MONEY_Q)

    window = posted
    if start_date:
        window = window.filter(transaction__date__gte=start_date)
    if end_date:
        window = window.filter(transaction__date__lte=end_date)

    grouped = OrderedDict()
    for entry in window.select_related("transaction").order_by("transaction__date", "transaction_id", "line_no"):
        tx = entry.transaction
        row = grouped.get(tx.id)
        if row is None:
            row = grouped[tx.id] = {
                "transaction_id": tx.id,
                "public_id": str(tx.public_id),
                "date": tx.date,
                "description": tx.description,
                "reference": tx.reference,
                "debit": ZERO,
                "credit": ZERO,
            }
        row["debit"] += entry.debit
        row["credit"] += entry.credit

    running = opening_balance
    rows = []
    for row in grouped.values():
        running += row["debit"] - row["credit"]
        row["running_balance"] = running
        rows.append(row)

    total = len(rows)
    offset = (page - 1) * limit
    return {
        "account": {"id": account.id, "code": account.code, "name": account.name},
        "opening_balance": opening_balance,
        "closing_balance": running,
        "transactions": rows[offset:offset + limit],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
    }


# =============================================================================
# Balance Audit
# =============================================================================

def verify_account_balances(ctx) -> dict:
    """
    Recompute each balance from posted entries and report any drift.

    Voided transactions are excluded: their post and void cancel out.
    """
    computed = dict(
        TransactionEntry.objects
        .filter(tenant=ctx.tenant, transaction__status=Transaction.Status.POSTED)
        .order_by()
        .values("account_id")
        .annotate(total=Sum(F("debit") - F("credit")))
        .values_list("account_id", "total")
    )

    discrepancies = []
    accounts = Account.objects.filter(tenant=ctx.tenant).order_by("code")
    for account in accounts:
        expected = (computed.get(account.id) or ZERO).quantize(MONEY_Q)
        if expected != account.balance:
            discrepancies.append({
                "account_id": account.id,
                "code": account.code,
                "recorded": account.balance,
                "computed": expected,
                "difference": account.balance - expected,
            })

    return {
        "accounts_checked": accounts.count(),
        "discrepancies": discrepancies,
        "is_consistent": not discrepancies,
    }


# =============================================================================
# Batch Report
# =============================================================================

def generate_batch_report(ctx, batch_id: str) -> dict:
    """
    Summarize the transactions created together in one batch.

    Totals cover every transaction in the batch whatever its status;
    status_counts shows how many have been posted or voided since.
    Per-account figures sum the batch's entries.

    Raises:
        BatchNotFound: If the tenant has no transaction with this batch_id
    """
    transactions = Transaction.objects.filter(tenant=ctx.tenant, batch_id=batch_id or "")
    if not batch_id or not transactions.exists():
        raise BatchNotFound(f"Batch {batch_id} not found.")

    status_counts = {status: 0 for status in Transaction.Status.values}
    for row in transactions.order_by().values("status").annotate(count=Count("id")):
        status_counts[row["status"]] = row["count"]

    rows = (
        TransactionEntry.objects
        .filter(tenant=ctx.tenant, transaction__batch_id=batch_id)
        .values("account_id", "account__code", "account__name")
        .annotate(debit=Sum("debit"), credit=Sum("credit"))
        .order_by("account__code")
    )
    accounts = []
    total_amount = ZERO
    for row in rows:
        debit = (row["debit"] or ZERO).quantize(MONEY_Q)
        credit = (row["credit"] or ZERO).quantize(MONEY_Q)
        total_amount += debit
        accounts.append({
            "account_id": row["account_id"],
            "code": row["account__code"],
            "name": row["account__name"],
            "total_debits": debit,
            "total_credits": credit,
            "net_change": debit - credit,
        })

    return {
        "batch_id": batch_id,
        "total_transactions": sum(status_counts.values()),
        "total_amount": total_amount,
        "status_counts": status_counts,
        "accounts": accounts,
    }
