# events/models.py
"""
Audit event store for CareLedger.

BusinessEvent rows are written by ledger commands in the same database
transaction as the change they describe. They are immutable once created
and are never deleted, so voided transactions and generated reports keep
a complete audit history.
"""

import uuid

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from tenant.models import Tenant


class BusinessEvent(models.Model):
    """
    Immutable event record.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="events",
    )

    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Event type name (e.g., 'transaction.posted')",
    )

    aggregate_type = models.CharField(
        max_length=50,
        db_index=True,
        help_text="Entity type (e.g., 'Account', 'Transaction')",
    )

    aggregate_id = models.CharField(
        max_length=64,
        db_index=True,
    )

    idempotency_key = models.CharField(
        max_length=255,
        editable=False,
        help_text="Unique idempotency key per tenant",
    )

    data = models.JSONField(
        default=dict,
        encoder=DjangoJSONEncoder,
        help_text="Event data payload",
    )

    metadata = models.JSONField(
        default=dict,
        blank=True,
        encoder=DjangoJSONEncoder,
    )

    actor = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Who triggered this event",
    )

    occurred_at = models.DateTimeField(db_index=True)
    recorded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["occurred_at", "recorded_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "idempotency_key"],
                name="uniq_event_tenant_idempotency_key",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant", "aggregate_type", "aggregate_id"], name="events_busi_tenant__a3c9f0_idx"),
        ]

    def __str__(self):
        return f"{self.event_type} {self.aggregate_type}:{self.aggregate_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("BusinessEvent records are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("BusinessEvent records cannot be deleted.")
