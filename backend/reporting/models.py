# reporting/models.py
"""
Persisted report snapshots.

A FinancialReport is written once when generated and never recomputed or
edited afterwards. Reading a report returns exactly what was generated,
even if the ledger has moved on since.
"""

import uuid

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from tenant.models import Tenant


class FinancialReport(models.Model):

    class ReportType(models.TextChoices):
        PROFIT_LOSS = "PROFIT_LOSS", "Profit and Loss"
        BALANCE_SHEET = "BALANCE_SHEET", "Balance Sheet"
        CASH_FLOW = "CASH_FLOW", "Cash Flow"
        AGED_RECEIVABLES = "AGED_RECEIVABLES", "Aged Receivables"
        AGED_PAYABLES = "AGED_PAYABLES", "Aged Payables"
        TAX = "TAX", "Tax"
        COMPLIANCE = "COMPLIANCE", "Compliance"

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="financial_reports",
    )

    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)

    report_type = models.CharField(max_length=30, choices=ReportType.choices)
    start_date = models.DateField()
    end_date = models.DateField()

    data = models.JSONField(encoder=DjangoJSONEncoder)

    region = models.CharField(max_length=20)
    currency = models.CharField(max_length=3)

    generated_by = models.CharField(max_length=255, blank=True, default="")
    generated_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-generated_at", "-id"]
        indexes = [
            models.Index(fields=["tenant", "report_type", "end_date"], name="reporting_f_tenant__7e2d14_idx"),
        ]

    def __str__(self):
        return f"{self.report_type} {self.start_date}..{self.end_date}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("FinancialReport snapshots are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("FinancialReport snapshots cannot be deleted.")
