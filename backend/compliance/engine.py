# compliance/engine.py
"""
Regional compliance checks.

Compliance findings are data, not errors: validate_transaction() and
generate_compliance_report() return issue lists and never raise for a
non-conforming transaction. Whether an issue blocks posting is decided
by settings.LEDGER_COMPLIANCE_MODE in accounting.policies.

Checks, all driven by the tenant's RegionalConfig:
1. Structural: debits equal credits
2. Fiscal year: the transaction date falls in the current fiscal year
3. Chart of accounts: every account code exists in the regional
   standard with the same type
4. Tax cross-check: a declared tax amount matches the recomputed one
"""

import calendar
from datetime import date, timedelta
from decimal import Decimal
import logging

from django.conf import settings
from django.utils import timezone

from accounting.models import Account, Transaction
from reporting.models import FinancialReport
from taxes.engine import calculate_transaction_tax, generate_tax_report, validate_tax_settings


logger = logging.getLogger(__name__)

DEFAULT_TAX_TOLERANCE = Decimal("0.01")

# Stored report types that back each mandatory filing, matched on the
# filing name in lower case. Regulator returns all end in "financial return".
SUPPORTING_REPORT_TYPES = {
    "vat return": (FinancialReport.ReportType.TAX,),
    "annual accounts": (
        FinancialReport.ReportType.PROFIT_LOSS,
        FinancialReport.ReportType.BALANCE_SHEET,
    ),
    "corporation tax return": (FinancialReport.ReportType.PROFIT_LOSS,),
    "financial return": (
        FinancialReport.ReportType.PROFIT_LOSS,
        FinancialReport.ReportType.BALANCE_SHEET,
        FinancialReport.ReportType.COMPLIANCE,
    ),
}


# =============================================================================
# Fiscal Year
# =============================================================================

def _anniversary(year: int, month: int, day: int) -> date:
    """date(year, month, day), clamping 29 February in non-leap years."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def fiscal_year_window(config, today: date) -> tuple[date, date]:
    """
    The fiscal year containing today, as an inclusive (start, end) pair.

    If today precedes this calendar year's fiscal start, the window
    starts in the previous year. The end is one year minus one day after
    the start.
    """
    fy = config.fiscal_year
    start = _anniversary(today.year, fy.start_month, fy.start_day)
    if today < start:
        start = _anniversary(today.year - 1, fy.start_month, fy.start_day)
    end = _anniversary(start.year + 1, fy.start_month, fy.start_day) - timedelta(days=1)
    return start, end


# =============================================================================
# Individual Checks
# =============================================================================

def _check_balanced(tx) -> list[str]:
    total_debit, total_credit = tx.total_debit, tx.total_credit
    if total_debit != total_credit:
        return [f"Transaction is unbalanced: debits {total_debit} != credits {total_credit}."]
    return []


def _check_fiscal_year(ctx, tx, today) -> list[str]:
    start, end = fiscal_year_window(ctx.config, today)
    if not (start <= tx.date <= end):
        return [
            f"Transaction date {tx.date.isoformat()} is outside the current fiscal year "
            f"({start.isoformat()} to {end.isoformat()})."
        ]
    return []


def check_account_conformance(config, account) -> str:
    """Return an issue for an account that breaks the regional chart, or ""."""
    standard = config.accounting_standard
    chart_account = standard.lookup(account.code)
    if chart_account is None:
        return f"Account {account.code} is not defined in the {standard.code} chart of accounts."
    if chart_account.type.upper() != account.account_type:
        return (
            f"Account {account.code} has type {account.account_type} but the "
            f"{standard.code} chart defines it as {chart_account.type.upper()}."
        )
    return ""


def _check_chart(ctx, tx) -> list[str]:
    issues = []
    seen = set()
    for entry in tx.entries.select_related("account"):
        if entry.account_id in seen:
            continue
        seen.add(entry.account_id)
        issue = check_account_conformance(ctx.config, entry.account)
        if issue:
            issues.append(issue)
    return issues


def _check_declared_tax(ctx, tx) -> list[str]:
    if tx.declared_tax is None:
        return []
    tolerance = Decimal(str(getattr(settings, "LEDGER_TAX_TOLERANCE", DEFAULT_TAX_TOLERANCE)))
    computed = calculate_transaction_tax(ctx, tx)
    expected = sum((tax["amount"] for tax in computed.values()), Decimal("0.00"))
    if abs(tx.declared_tax - expected) > tolerance:
        return [
            f"Declared tax {tx.declared_tax} does not match calculated tax {expected}."
        ]
    return []


# =============================================================================
# Public API
# =============================================================================

def validate_transaction(ctx, tx, today=None) -> dict:
    """
    Run every regional check against one transaction.

    Args:
        ctx: LedgerContext
        tx: Transaction instance
        today: Reference date for the fiscal-year window (defaults to today)

    Returns:
        {"valid": bool, "issues": [str, ...]}
    """
    today = today or timezone.localdate()
    issues = []
    issues += _check_balanced(tx)
    issues += _check_fiscal_year(ctx, tx, today)
    issues += _check_chart(ctx, tx)
    issues += _check_declared_tax(ctx, tx)

    if issues:
        logger.debug(
            "Compliance issues found",
            extra={"tenant_id": ctx.tenant_id, "transaction_id": tx.id, "issues": issues},
        )
    return {"valid": not issues, "issues": issues}


def _chart_adherence(ctx) -> dict:
    accounts = Account.objects.filter(tenant=ctx.tenant).order_by("code")
    non_conforming = []
    checked = 0
    for account in accounts:
        checked += 1
        issue = check_account_conformance(ctx.config, account)
        if issue:
            non_conforming.append({"code": account.code, "name": account.name, "issue": issue})
    conforming = checked - len(non_conforming)
    rate = (Decimal(conforming) * 100 / checked).quantize(Decimal("0.01")) if checked else Decimal("100.00")
    return {
        "standard": ctx.config.accounting_standard.code,
        "accounts_checked": checked,
        "non_conforming": non_conforming,
        "adherence_rate": rate,
    }


def _supporting_types(report_name: str) -> tuple:
    name = report_name.lower()
    for suffix, report_types in SUPPORTING_REPORT_TYPES.items():
        if name.endswith(suffix):
            return report_types
    return ()


def _mandatory_report_checklist(ctx, start_date, end_date) -> list[dict]:
    """
    One row per mandatory filing with the stored reports that back it.

    A filing is "prepared" when a FinancialReport of every supporting type
    exists for exactly this period, "missing" when any is absent, and
    "manual" when no stored report type backs it.
    """
    requirements = ctx.config.reporting_requirements
    stored = {}
    reports = (
        FinancialReport.objects
        .filter(tenant=ctx.tenant, start_date=start_date, end_date=end_date)
        .order_by("-generated_at", "-id")
        .values_list("report_type", "id")
    )
    for report_type, report_id in reports:
        stored.setdefault(report_type, report_id)

    checklist = []
    for name in requirements.mandatory_reports:
        report_types = _supporting_types(name)
        missing = [t for t in report_types if t not in stored]
        if not report_types:
            status = "manual"
        elif missing:
            status = "missing"
        else:
            status = "prepared"
        checklist.append({
            "name": name,
            "frequency": requirements.frequency,
            "status": status,
            "report_ids": {t: stored[t] for t in report_types if t in stored},
            "missing_report_types": missing,
        })
    return checklist


def generate_compliance_report(ctx, start_date, end_date, today=None) -> dict:
    """
    Bundle the compliance position of a period.

    The fiscal-year check for each transaction is evaluated against
    end_date unless today is given, so a report over a closed period
    reads the same whenever it is generated.
    """
    reference = today or end_date
    config = ctx.config
    requirements = config.reporting_requirements

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
    flagged = []
    checked = 0
    for tx in transactions:
        checked += 1
        result = validate_transaction(ctx, tx, today=reference)
        if not result["valid"]:
            flagged.append({"transaction_id": tx.id, "date": tx.date, "issues": result["issues"]})

    tax_issues = validate_tax_settings(ctx)
    tax_summary = generate_tax_report(ctx, start_date, end_date)["summary"]
    chart = _chart_adherence(ctx)
    checklist = _mandatory_report_checklist(ctx, start_date, end_date)
    outstanding = [item for item in checklist if item["status"] == "missing"]

    recommendations = []
    if tax_issues:
        recommendations.append("Resolve the tax settings issues before the next return is due.")
    if chart["non_conforming"]:
        recommendations.append(
            f"Map the {len(chart['non_conforming'])} non-conforming accounts to the "
            f"{chart['standard']} chart of accounts."
        )
    if flagged:
        recommendations.append(
            f"Review the {len(flagged)} transactions with compliance issues."
        )
    if outstanding:
        recommendations.append(
            f"Generate the reports backing {len(outstanding)} mandatory filings for this period."
        )
    if not recommendations:
        recommendations.append("No compliance actions required for this period.")

    return {
        "period": {"start_date": start_date, "end_date": end_date},
        "region": config.region,
        "regulatory_body": {
            "name": config.regulatory_body.name,
            "code": config.regulatory_body.code,
            "requirements": list(config.regulatory_body.requirements),
        },
        "mandatory_reports": checklist,
        "deadlines": dict(requirements.deadlines),
        "tax_compliance": {
            "issues": tax_issues,
            "compliant": not tax_issues,
            "summary": tax_summary,
        },
        "chart_of_accounts": chart,
        "transactions": {
            "checked": checked,
            "with_issues": len(flagged),
            "flagged": flagged,
        },
        "recommendations": recommendations,
    }
