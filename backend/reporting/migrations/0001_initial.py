"""
Initial migration for reporting app.

Creates:
- FinancialReport: Immutable report snapshot
"""
import uuid

import django.core.serializers.json
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenant", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="FinancialReport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                (
                    "report_type",
                    models.CharField(
                        choices=[
                            ("PROFIT_LOSS", "Profit and Loss"),
                            ("BALANCE_SHEET", "Balance Sheet"),
                            ("CASH_FLOW", "Cash Flow"),
                            ("AGED_RECEIVABLES", "Aged Receivables"),
                            ("AGED_PAYABLES", "Aged Payables"),
                            ("TAX", "Tax"),
                            ("COMPLIANCE", "Compliance"),
                        ],
                        max_length=30,
                    ),
                ),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("data", models.JSONField(encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ("region", models.CharField(max_length=20)),
                ("currency", models.CharField(max_length=3)),
                ("generated_by", models.CharField(blank=True, default="", max_length=255)),
                ("generated_at", models.DateTimeField(auto_now_add=True)),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="financial_reports",
                        to="tenant.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["-generated_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["tenant", "report_type", "end_date"],
                        name="reporting_f_tenant__7e2d14_idx",
                    ),
                ],
            },
        ),
    ]
