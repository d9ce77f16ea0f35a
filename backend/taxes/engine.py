# taxes/engine.py
"""
Table-driven tax evaluation.

Every rule here reads the tenant's RegionalConfig: which taxes apply,
their rates, revenue thresholds and exempt service types. There is no
per-region branching, so a new jurisdiction only needs a new config
record.

The tax basis is pluggable through settings.LEDGER_TAX_BASIS, a dotted
path to a callable (ctx, transaction) -> Decimal. The default is the
transaction amount.
"""

from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
import logging

from django.conf import settings
from django.db.models import F, Sum
from django.utils import timezone
from django.utils.module_loading import import_string

from accounting.models import MONEY_Q, Account, Transaction, TransactionEntry
from taxes.models import TaxRate, TaxRegistration


logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
HUNDRED = Decimal("100")
TRAILING_REVENUE_DAYS = 365
DEFAULT_TAX_BASIS = "taxes.engine.transaction_amount_basis"


# =============================================================================
# Basis and Applicability
# =============================================================================

def transaction_amount_basis(ctx, tx) -> Decimal:
    """Default basis: the total moved by the transaction."""
    return tx.amount


def get_tax_basis_function():
    return import_string(getattr(settings, "LEDGER_TAX_BASIS", DEFAULT_TAX_BASIS))


def trailing_revenue(ctx, as_of) -> Decimal:
    """
    Net revenue the tenant earned in the 365 days up to and including as_of.

    Revenue accounts are credit-normal, so revenue is credit - debit over
    POSTED transactions.
    """
    window_start = as_of - timedelta(days=TRAILING_REVENUE_DAYS)
    total = TransactionEntry.objects.filter(
        tenant=ctx.tenant,
        account__account_type=Account.AccountType.REVENUE,
        transaction__status=Transaction.Status.POSTED,
        transaction__date__gt=window_start,
        transaction__date__lte=as_of,
    ).aggregate(total=Sum(F("credit") - F("debit")))["total"]
    return (total or ZERO).quantize(MONEY_Q)


def is_taxable(ctx, tx, tax, revenue=None) -> bool:
    """
    Decide whether one regional tax applies to a transaction.

    A tax does not apply when the transaction's service type is exempt, or
    when the tax has a revenue threshold the tenant's trailing-12-month
    revenue has not reached.
    """
    if tax.is_exempt(tx.service_type):
        return False
    if tax.threshold is not None:
        if revenue is None:
            revenue = trailing_revenue(ctx, tx.date)
        if revenue < tax.threshold:
            return False
    return True


def _tax_amount(basis: Decimal, rate: Decimal) -> Decimal:
    return (basis * rate / HUNDRED).quantize(MONEY_Q, rounding=ROUND_HALF_UP)


def calculate_transaction_tax(ctx, tx, revenue=None) -> dict:
    """
    Compute every applicable tax for a transaction.

    Returns:
        {tax_code: {"amount": Decimal, "rate": Decimal, "basis": Decimal}}

        Taxes that do not apply are absent from the result; there are no
        zero-amount entries.
    """
    basis_fn = get_tax_basis_function()
    result = {}
    for tax in ctx.config.taxes:
        if tax.threshold is not None and revenue is None and not tax.is_exempt(tx.service_type):
            revenue = trailing_revenue(ctx, tx.date)
        if not is_taxable(ctx, tx, tax, revenue=revenue):
            continue
        basis = Decimal(basis_fn(ctx, tx)).quantize(MONEY_Q)
        result[tax.code] = {
            "amount": _tax_amount(basis, tax.rate),
            "rate": tax.rate,
            "basis": basis,
        }
    return result


# =============================================================================
# Reporting
# =============================================================================

def generate_tax_report(ctx, start_date, end_date) -> dict:
    """
    Aggregate tax over POSTED transactions dated within [start_date, end_date].

    Returns:
        {"period": {...}, "taxes": {code: {taxable_amount, tax_amount,
         transaction_count}}, "summary": {...}}
    """
    transactions = (
        Transaction.objects
        .filter(
            tenant=ctx.tenant,
            status=Transaction.Status.POSTED,
            date__gte=start_date,
            date__lte=end_date,
        )
        .order_by("date", "id")
    )

    taxes = {
        tax.code: {
            "name": tax.name,
            "rate": tax.rate,
            "taxable_amount": ZERO,
            "tax_amount": ZERO,
            "transaction_count": 0,
        }
        for tax in ctx.config.taxes
    }

    # Trailing revenue only changes with the date; reuse it within a day
    revenue_by_date = {}
    scanned = 0
    taxed = 0
    for tx in transactions:
        scanned += 1
        if tx.date not in revenue_by_date:
            revenue_by_date[tx.date] = trailing_revenue(ctx, tx.date)
        computed = calculate_transaction_tax(ctx, tx, revenue=revenue_by_date[tx.date])
        if computed:
            taxed += 1
        for code, tax in computed.items():
            bucket = taxes[code]
            bucket["taxable_amount"] += tax["basis"]
            bucket["tax_amount"] += tax["amount"]
            bucket["transaction_count"] += 1

    summary = {
        "transaction_count": scanned,
        "taxable_transaction_count": taxed,
        "total_taxable_amount": sum((t["taxable_amount"] for t in taxes.values()), ZERO),
        "total_tax_amount": sum((t["tax_amount"] for t in taxes.values()), ZERO),
        "currency": ctx.currency,
    }

    logger.info(
        "Tax report generated",
        extra={"tenant_id": ctx.tenant_id, "transactions": scanned, "total_tax": str(summary["total_tax_amount"])},
    )

    return {
        "period": {"start_date": start_date, "end_date": end_date},
        "region": ctx.region,
        "taxes": taxes,
        "summary": summary,
    }


# =============================================================================
# Settings Validation
# =============================================================================

def current_tax_rate(ctx, tax_code, as_of=None):
    """Latest configured TaxRate for a code effective on as_of, or None."""
    as_of = as_of or timezone.localdate()
    return (
        TaxRate.objects
        .filter(tenant=ctx.tenant, tax_code=tax_code, effective_from__lte=as_of)
        .order_by("-effective_from")
        .first()
    )


def validate_tax_settings(ctx, as_of=None) -> list[str]:
    """
    Compare the tenant's tax records with the region's requirements.

    Never raises; every problem is returned as a human-readable issue.
    """
    issues = []

    registrations = TaxRegistration.objects.filter(tenant=ctx.tenant)
    if not registrations.exists():
        issues.append("No tax registration found for this organisation.")
    elif not registrations.filter(region=ctx.region).exists():
        issues.append(f"No tax registration found for region {ctx.region}.")

    for tax in ctx.config.taxes:
        configured = current_tax_rate(ctx, tax.code, as_of=as_of)
        if configured is None:
            issues.append(f"Missing tax rate configuration for {tax.code}.")
        elif configured.rate != tax.rate:
            issues.append(
                f"{tax.code} rate mismatch: configured {configured.rate}%, "
                f"region requires {tax.rate}%."
            )

    return issues
