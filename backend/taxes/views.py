# taxes/views.py
"""
Tax API.

GET /api/tax/transactions/<pk>/ -> tax due on one transaction
GET /api/tax/report/?start_date=&end_date= -> period tax report
GET /api/tax/settings/validate/ -> issues with the tenant's tax setup
"""

from rest_framework.response import Response

from accounting.queries import get_transaction
from accounting.serializers import PeriodQuerySerializer
from accounting.views import LedgerAPIView, json_safe
from .engine import calculate_transaction_tax, generate_tax_report, validate_tax_settings


class TransactionTaxView(LedgerAPIView):

    def get(self, request, pk):
        ctx = self.context(request)
        tx = get_transaction(ctx, pk)
        return Response(json_safe({
            "transaction_id": tx.id,
            "currency": ctx.currency,
            "taxes": calculate_transaction_tax(ctx, tx),
        }))


class TaxReportView(LedgerAPIView):

    def get(self, request):
        ctx = self.context(request)

        query = PeriodQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        report = generate_tax_report(ctx, **query.validated_data)
        return Response(json_safe(report))


class TaxSettingsValidationView(LedgerAPIView):

    def get(self, request):
        ctx = self.context(request)
        issues = validate_tax_settings(ctx)
        return Response({"valid": not issues, "issues": issues})
