# reporting/engine.py
"""
Report generation entry point.

generate_report() dispatches on the report type, runs the builder and
persists the result as an immutable FinancialReport snapshot. Stored
reports are never recomputed; generating again creates a new snapshot.

Consistency: builders read posted entries with several queries and are
not isolated from concurrent posts. A post committing while a report
runs may or may not be included; uncommitted work never is.
"""

import json
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from accounting.exceptions import ReportNotFound, StructuralError, UnknownReportType
from accounting.commands import CommandResult, as_date
from compliance.engine import generate_compliance_report
from events.emitter import emit_event
from events.types import EventTypes, ReportGeneratedData
from reporting import builders
from reporting.models import FinancialReport
from taxes.engine import generate_tax_report


logger = logging.getLogger(__name__)

ReportType = FinancialReport.ReportType

REPORT_BUILDERS = {
    ReportType.PROFIT_LOSS: builders.build_profit_loss,
    ReportType.BALANCE_SHEET: builders.build_balance_sheet,
    ReportType.CASH_FLOW: builders.build_cash_flow,
    ReportType.AGED_RECEIVABLES: builders.build_aged_receivables,
    ReportType.AGED_PAYABLES: builders.build_aged_payables,
    ReportType.TAX: generate_tax_report,
    ReportType.COMPLIANCE: generate_compliance_report,
}


def build_report_data(ctx, report_type, start_date, end_date) -> dict:
    """Run a builder without persisting anything."""
    report_type = (report_type or "").strip().upper()
    builder = REPORT_BUILDERS.get(report_type)
    if builder is None:
        raise UnknownReportType(f"Unknown report type: {report_type!r}")
    return builder(ctx, start_date, end_date)


@transaction.atomic
def generate_report(ctx, report_type, start_date, end_date) -> CommandResult:
    """
    Generate and store a report snapshot.

    Args:
        ctx: LedgerContext
        report_type: One of FinancialReport.ReportType
        start_date, end_date: Inclusive period (date or ISO string)

    Returns:
        CommandResult with the stored FinancialReport

    Raises:
        UnknownReportType, StructuralError
    """
    start = as_date(start_date, "start_date")
    end = as_date(end_date, "end_date")
    if start > end:
        raise StructuralError("start_date must not be after end_date.")

    report_type = (report_type or "").strip().upper()
    data = build_report_data(ctx, report_type, start, end)

    # Store the JSON form so a fresh report reads the same as a reloaded one
    data = json.loads(json.dumps(data, cls=DjangoJSONEncoder))

    report = FinancialReport.objects.create(
        tenant=ctx.tenant,
        report_type=report_type,
        start_date=start,
        end_date=end,
        data=data,
        region=ctx.region,
        currency=ctx.currency,
        generated_by=ctx.actor,
    )

    event = emit_event(
        ctx,
        EventTypes.REPORT_GENERATED,
        aggregate_type="FinancialReport",
        aggregate_id=report.public_id,
        idempotency_key=f"report.generated:{report.public_id}",
        data=ReportGeneratedData(
            report_public_id=str(report.public_id),
            report_type=report_type,
            start_date=start.isoformat(),
            end_date=end.isoformat(),
        ),
    )

    logger.info(
        "Report generated",
        extra={"tenant_id": ctx.tenant_id, "report_type": report_type, "report_id": report.id},
    )
    return CommandResult.ok(report, event=event)


def get_report(ctx, report_id) -> FinancialReport:
    try:
        return FinancialReport.objects.get(tenant=ctx.tenant, pk=report_id)
    except (FinancialReport.DoesNotExist, ValueError, TypeError):
        raise ReportNotFound(f"Report {report_id} not found.")


def list_reports(ctx, report_type=None):
    qs = FinancialReport.objects.filter(tenant=ctx.tenant)
    if report_type:
        qs = qs.filter(report_type=report_type.upper())
    return qs.order_by("-generated_at", "-id")
