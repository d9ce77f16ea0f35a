# taxes/models.py
"""
Tenant tax settings.

The regional configuration says which taxes a jurisdiction levies and at
what rate. These records say what the tenant has actually registered and
configured; validate_tax_settings() compares the two.
"""

from django.db import models

from tenant.models import Tenant


class TaxRegistration(models.Model):
    """The tenant's registration with the tax authority of its region."""

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="tax_registrations",
    )
    registration_number = models.CharField(max_length=50)
    region = models.CharField(max_length=20)
    registered_on = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-registered_on"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "registration_number"],
                name="uniq_tax_registration_per_tenant",
            ),
        ]

    def __str__(self):
        return f"{self.registration_number} ({self.region})"


class TaxRate(models.Model):
    """
    A configured rate for one tax code.

    Rates are effective-dated; the latest rate effective on a given day
    applies.
    """

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="tax_rates",
    )
    tax_code = models.CharField(max_length=20)
    rate = models.DecimalField(
        max_digits=6,
        decimal_places=3,
        help_text="Percentage, e.g. 20.000",
    )
    effective_from = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["tax_code", "-effective_from"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "tax_code", "effective_from"],
                name="uniq_tax_rate_per_tenant_code_date",
            ),
        ]

    def __str__(self):
        return f"{self.tax_code} {self.rate}% from {self.effective_from}"

