"""
Initial migration for taxes app.

Creates:
- TaxRegistration: The tenant's registration with its tax authority
- TaxRate: Effective-dated rate per tax code
"""
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenant", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="TaxRegistration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("registration_number", models.CharField(max_length=50)),
                ("region", models.CharField(max_length=20)),
                ("registered_on", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="tax_registrations",
                        to="tenant.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["-registered_on"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tenant", "registration_number"),
                        name="uniq_tax_registration_per_tenant",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TaxRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tax_code", models.CharField(max_length=20)),
                (
                    "rate",
                    models.DecimalField(
                        decimal_places=3,
                        help_text="Percentage, e.g. 20.000",
                        max_digits=6,
                    ),
                ),
                ("effective_from", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="tax_rates",
                        to="tenant.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["tax_code", "-effective_from"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tenant", "tax_code", "effective_from"),
                        name="uniq_tax_rate_per_tenant_code_date",
                    ),
                ],
            },
        ),
    ]
