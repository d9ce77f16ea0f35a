# reporting/serializers.py
from rest_framework import serializers

from accounting.serializers import PeriodQuerySerializer
from .models import FinancialReport


class FinancialReportSerializer(serializers.ModelSerializer):
    class Meta:
        model = FinancialReport
        fields = [
            "id", "public_id", "report_type", "start_date", "end_date",
            "region", "currency", "data", "generated_by", "generated_at",
        ]
        read_only_fields = fields


class ReportRequestSerializer(PeriodQuerySerializer):
    type = serializers.ChoiceField(choices=FinancialReport.ReportType.choices)
