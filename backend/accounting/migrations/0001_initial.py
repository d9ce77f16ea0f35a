"""
Initial migration for accounting app.

Creates:
- Account: Hierarchical chart of accounts with signed running balance
- Transaction / TransactionEntry: Double-entry transactions
- Invoice: Receivable/payable documents read by the aging reports
- Reconciliation: Bank reconciliation records
"""
from decimal import Decimal
import uuid

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenant", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("code", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=255)),
                (
                    "account_type",
                    models.CharField(
                        choices=[
                            ("ASSET", "Asset"),
                            ("LIABILITY", "Liability"),
                            ("EQUITY", "Equity"),
                            ("REVENUE", "Revenue"),
                            ("EXPENSE", "Expense"),
                        ],
                        db_column="type",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("INACTIVE", "Inactive")],
                        default="ACTIVE",
                        max_length=20,
                    ),
                ),
                ("description", models.TextField(blank=True, default="")),
                ("region", models.CharField(max_length=20)),
                (
                    "balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Signed debit - credit of all posted entries. Never assigned directly.",
                        max_digits=18,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="accounting.account",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="accounts",
                        to="tenant.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["tenant", "account_type"], name="accounting__tenant__b6a1c2_idx"),
                    models.Index(fields=["tenant", "parent"], name="accounting__tenant__5d8e41_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("tenant", "code"), name="uniq_account_code_per_tenant"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("date", models.DateField()),
                ("description", models.CharField(max_length=255)),
                ("reference", models.CharField(blank=True, default="", max_length=100)),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("POSTED", "Posted"), ("VOIDED", "Voided")],
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                (
                    "service_type",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Producer-supplied service classification used for tax exemptions.",
                        max_length=50,
                    ),
                ),
                (
                    "declared_tax",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Tax amount the producer declared; cross-checked by compliance.",
                        max_digits=18,
                        null=True,
                    ),
                ),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("voided_at", models.DateTimeField(blank=True, null=True)),
                ("created_by", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="tenant.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["date", "id"],
                "indexes": [
                    models.Index(fields=["tenant", "status", "date"], name="accounting__tenant__0f3b7a_idx"),
                    models.Index(fields=["tenant", "reference"], name="accounting__tenant__9c42de_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TransactionEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField()),
                ("debit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("credit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="entries",
                        to="accounting.account",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transaction_entries",
                        to="tenant.tenant",
                    ),
                ),
                (
                    "transaction",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="entries",
                        to="accounting.transaction",
                    ),
                ),
            ],
            options={
                "ordering": ["transaction_id", "line_no"],
                "indexes": [
                    models.Index(fields=["tenant", "account"], name="accounting__tenant__e7a915_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("transaction", "line_no"),
                        name="uniq_entry_line_per_transaction",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                (
                    "kind",
                    models.CharField(
                        choices=[("RECEIVABLE", "Receivable"), ("PAYABLE", "Payable")],
                        max_length=20,
                    ),
                ),
                ("number", models.CharField(max_length=50)),
                ("counterparty", models.CharField(max_length=255)),
                ("issue_date", models.DateField()),
                ("due_date", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                (
                    "status",
                    models.CharField(
                        choices=[("OPEN", "Open"), ("PAID", "Paid"), ("CANCELLED", "Cancelled")],
                        default="OPEN",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="tenant.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["due_date", "number"],
                "indexes": [
                    models.Index(fields=["tenant", "kind", "status"], name="accounting__tenant__41b0c8_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tenant", "kind", "number"),
                        name="uniq_invoice_number_per_tenant_kind",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Reconciliation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("date", models.DateField()),
                ("description", models.CharField(max_length=255)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reconciliations",
                        to="accounting.account",
                    ),
                ),
                (
                    "adjustment_transaction",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="adjusted_reconciliation",
                        to="accounting.transaction",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reconciliations",
                        to="tenant.tenant",
                    ),
                ),
                (
                    "transactions",
                    models.ManyToManyField(
                        blank=True,
                        related_name="reconciliations",
                        to="accounting.transaction",
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-id"],
            },
        ),
    ]
