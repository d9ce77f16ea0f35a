# reporting/views.py
"""
Report API.

GET /api/reports/?type= -> stored snapshots, newest first
POST /api/reports/ -> generate and store a snapshot
GET /api/reports/<pk>/ -> one stored snapshot, exactly as generated
"""

from rest_framework import status
from rest_framework.response import Response

from accounting.views import LedgerAPIView
from .engine import generate_report, get_report, list_reports
from .serializers import FinancialReportSerializer, ReportRequestSerializer


class ReportListCreateView(LedgerAPIView):

    def get(self, request):
        ctx = self.context(request)
        reports = list_reports(ctx, report_type=request.query_params.get("type"))
        return Response(FinancialReportSerializer(reports, many=True).data)

    def post(self, request):
        ctx = self.context(request)

        input_serializer = ReportRequestSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        result = generate_report(ctx, data["type"], data["start_date"], data["end_date"])
        return Response(
            FinancialReportSerializer(result.data).data,
            status=status.HTTP_201_CREATED,
        )


class ReportDetailView(LedgerAPIView):

    def get(self, request, pk):
        ctx = self.context(request)
        return Response(FinancialReportSerializer(get_report(ctx, pk)).data)
