# compliance/views.py
"""
Compliance API.

GET /api/compliance/transactions/<pk>/?today= -> advisory validation of one transaction
GET /api/compliance/report/?start_date=&end_date= -> period compliance report
"""

from rest_framework.response import Response

from accounting.commands import as_date
from accounting.queries import get_transaction
from accounting.serializers import PeriodQuerySerializer
from accounting.views import LedgerAPIView, json_safe
from .engine import generate_compliance_report, validate_transaction


class TransactionComplianceView(LedgerAPIView):

    def get(self, request, pk):
        ctx = self.context(request)
        tx = get_transaction(ctx, pk)
        today = request.query_params.get("today")
        today = as_date(today, "today") if today else None
        return Response(validate_transaction(ctx, tx, today=today))


class ComplianceReportView(LedgerAPIView):

    def get(self, request):
        ctx = self.context(request)

        query = PeriodQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        report = generate_compliance_report(ctx, **query.validated_data)
        return Response(json_safe(report))
