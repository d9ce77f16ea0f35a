"""
Tenant - one care-home operator using the ledger.

Every ledger record is scoped by tenant. The region selects which
RegionalConfig applies to the tenant's books.
"""
import uuid

from django.db import models


class Tenant(models.Model):
    """
    A care-home operator with its own set of books.

    The region key is validated against the regional configuration when a
    LedgerContext is built, not when the row is saved, so an unknown region
    fails fast at service construction.
    """

    class Region(models.TextChoices):
        ENGLAND = "england", "England"
        SCOTLAND = "scotland", "Scotland"
        WALES = "wales", "Wales"
        BELFAST = "belfast", "Northern Ireland"
        DUBLIN = "dublin", "Ireland"

    id = models.BigAutoField(primary_key=True)

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        help_text="Public identifier for API exposure.",
    )

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=100, unique=True)

    region = models.CharField(
        max_length=20,
        choices=Region.choices,
        help_text="Region key selecting the regional configuration.",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "tenant"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.region})"
