# reporting/builders.py
"""
Report builders.

Each builder reads committed ledger data and returns a plain dict of
Decimals, dates and strings. Builders never write; persisting the result
is reporting.engine's job.

Sign handling: account balances are stored as debit - credit. Builders
flip credit-normal accounts (liabilities, equity, revenue) to positive
amounts for presentation only.
"""

from collections import defaultdict
from decimal import Decimal

from django.db.models import F, Sum

from accounting.exceptions import ConfigError
from accounting.models import MONEY_Q, Account, Invoice, Transaction, TransactionEntry
from reporting.cash_flow import (
    ACTIVITIES,
    cash_account_prefixes,
    get_classifier,
    is_cash_account,
)


ZERO = Decimal("0.00")

CREDIT_NORMAL = {
    Account.AccountType.LIABILITY,
    Account.AccountType.EQUITY,
    Account.AccountType.REVENUE,
}


def _money(value) -> Decimal:
    # Aggregates come back unquantized on some backends
    return (value or ZERO).quantize(MONEY_Q)


def _account_movements(ctx, start_date=None, end_date=None) -> list[dict]:
    """Per-account debit and credit totals of POSTED entries in the date range."""
    qs = TransactionEntry.objects.filter(
        tenant=ctx.tenant,
        transaction__status=Transaction.Status.POSTED,
    )
    if start_date:
        qs = qs.filter(transaction__date__gte=start_date)
    if end_date:
        qs = qs.filter(transaction__date__lte=end_date)

    rows = (
        qs.values("account_id", "account__code", "account__name", "account__account_type")
        .annotate(debit=Sum("debit"), credit=Sum("credit"))
        .order_by("account__code")
    )
    movements = []
    for row in rows:
        debit = _money(row["debit"])
        credit = _money(row["credit"])
        account_type = row["account__account_type"]
        net = debit - credit
        movements.append({
            "account_id": row["account_id"],
            "code": row["account__code"],
            "name": row["account__name"],
            "type": account_type,
            "amount": -net if account_type in CREDIT_NORMAL else net,
        })
    return movements


def _section(movements, account_type) -> tuple[list[dict], Decimal]:
    lines = [
        {"account_id": m["account_id"], "code": m["code"], "name": m["name"], "amount": m["amount"]}
        for m in movements
        if m["type"] == account_type and m["amount"]
    ]
    return lines, sum((line["amount"] for line in lines), ZERO)


# =============================================================================
# Profit and Loss
# =============================================================================

def build_profit_loss(ctx, start_date, end_date) -> dict:
    """Revenue and expense movements strictly within [start_date, end_date]."""
    movements = _account_movements(ctx, start_date, end_date)
    revenue, revenue_total = _section(movements, Account.AccountType.REVENUE)
    expenses, expense_total = _section(movements, Account.AccountType.EXPENSE)
    return {
        "revenue": revenue,
        "expenses": expenses,
        "revenue_total": revenue_total,
        "expense_total": expense_total,
        "net_income": revenue_total - expense_total,
    }


# =============================================================================
# Balance Sheet
# =============================================================================

def build_balance_sheet(ctx, start_date, end_date) -> dict:
    """
    Position as of end_date, over every posted transaction dated on or before it.

    Unclosed revenue and expense are carried into equity as current
    earnings, which makes assets == liabilities + equity hold for any
    consistent ledger.
    """
    movements = _account_movements(ctx, end_date=end_date)
    assets, total_assets = _section(movements, Account.AccountType.ASSET)
    liabilities, total_liabilities = _section(movements, Account.AccountType.LIABILITY)
    equity, equity_accounts_total = _section(movements, Account.AccountType.EQUITY)
    _, revenue_total = _section(movements, Account.AccountType.REVENUE)
    _, expense_total = _section(movements, Account.AccountType.EXPENSE)

    current_earnings = revenue_total - expense_total
    total_equity = equity_accounts_total + current_earnings

    return {
        "as_of": end_date,
        "assets": assets,
        "liabilities": liabilities,
        "equity": equity,
        "current_earnings": current_earnings,
        "total_assets": total_assets,
        "total_liabilities": total_liabilities,
        "total_equity": total_equity,
        "balanced": total_assets == total_liabilities + total_equity,
    }


# =============================================================================
# Cash Flow
# =============================================================================

def _cash_balance_before(ctx, prefixes, start_date) -> Decimal:
    total = ZERO
    rows = (
        TransactionEntry.objects
        .filter(
            tenant=ctx.tenant,
            transaction__status=Transaction.Status.POSTED,
            transaction__date__lt=start_date,
        )
        .order_by()
        .values("account__code")
        .annotate(net=Sum(F("debit") - F("credit")))
    )
    for row in rows:
        if is_cash_account(row["account__code"], prefixes):
            total += _money(row["net"])
    return total


def build_cash_flow(ctx, start_date, end_date) -> dict:
    """
    Cash movements within [start_date, end_date] by activity.

    Only posted transactions touching a cash account count. Transfers
    between two cash accounts net to zero and are left out.
    """
    prefixes = cash_account_prefixes()
    classify = get_classifier()

    entries = (
        TransactionEntry.objects
        .filter(
            tenant=ctx.tenant,
            transaction__status=Transaction.Status.POSTED,
            transaction__date__gte=start_date,
            transaction__date__lte=end_date,
        )
        .select_related("transaction", "account")
        .order_by("transaction__date", "transaction_id", "line_no")
    )
    by_transaction = defaultdict(list)
    for entry in entries:
        by_transaction[entry.transaction_id].append(entry)

    activities = {
        name: {"inflows": ZERO, "outflows": ZERO, "net": ZERO, "items": []}
        for name in ACTIVITIES
    }
    for tx_entries in by_transaction.values():
        cash = [e for e in tx_entries if is_cash_account(e.account.code, prefixes)]
        if not cash:
            continue
        delta = sum((e.net for e in cash), ZERO)
        if not delta:
            continue

        tx = tx_entries[0].transaction
        counterparts = [e for e in tx_entries if e not in cash]
        activity = classify(ctx, tx, counterparts)
        if activity not in activities:
            raise ConfigError(f"Cash flow classifier returned unknown activity {activity!r}.")
        bucket = activities[activity]
        if delta > 0:
            bucket["inflows"] += delta
        else:
            bucket["outflows"] += -delta
        bucket["net"] += delta
        bucket["items"].append({
            "transaction_id": tx.id,
            "date": tx.date,
            "description": tx.description,
            "amount": delta,
        })

    opening = _cash_balance_before(ctx, prefixes, start_date)
    net_change = sum((bucket["net"] for bucket in activities.values()), ZERO)
    return {
        **activities,
        "cash_account_prefixes": list(prefixes),
        "opening_cash": opening,
        "net_change": net_change,
        "closing_cash": opening + net_change,
    }


# =============================================================================
# Aged Receivables / Payables
# =============================================================================

AGING_BUCKETS = ("current", "thirty", "sixty", "ninety", "older")


def aging_bucket(days_overdue: int) -> str:
    if days_overdue <= 0:
        return "current"
    if days_overdue <= 30:
        return "thirty"
    if days_overdue <= 60:
        return "sixty"
    if days_overdue <= 90:
        return "ninety"
    return "older"


def build_aged(ctx, kind, as_of) -> dict:
    """
    Bucket outstanding invoices of one kind by days overdue at as_of.

    Cancelled invoices, invoices issued after as_of and fully paid ones
    are left out.
    """
    invoices = (
        Invoice.objects
        .filter(tenant=ctx.tenant, kind=kind, issue_date__lte=as_of)
        .exclude(status=Invoice.Status.CANCELLED)
        .order_by("due_date", "number")
    )

    buckets = {name: ZERO for name in AGING_BUCKETS}
    lines = []
    for invoice in invoices:
        outstanding = invoice.outstanding
        if outstanding <= 0:
            continue
        days_overdue = (as_of - invoice.due_date).days
        bucket = aging_bucket(days_overdue)
        buckets[bucket] += outstanding
        lines.append({
            "number": invoice.number,
            "counterparty": invoice.counterparty,
            "issue_date": invoice.issue_date,
            "due_date": invoice.due_date,
            "days_overdue": max(days_overdue, 0),
            "bucket": bucket,
            "outstanding": outstanding,
        })

    return {
        "as_of": as_of,
        "kind": kind,
        "buckets": buckets,
        "total": sum(buckets.values(), ZERO),
        "invoices": lines,
    }


def build_aged_receivables(ctx, start_date, end_date) -> dict:
    return build_aged(ctx, Invoice.Kind.RECEIVABLE, end_date)


def build_aged_payables(ctx, start_date, end_date) -> dict:
    return build_aged(ctx, Invoice.Kind.PAYABLE, end_date)
