"""
Initial migration for events app.

Creates:
- BusinessEvent: Immutable audit event, unique per tenant idempotency key
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
            name="BusinessEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "event_type",
                    models.CharField(
                        db_index=True,
                        help_text="Event type name (e.g., 'transaction.posted')",
                        max_length=100,
                    ),
                ),
                (
                    "aggregate_type",
                    models.CharField(
                        db_index=True,
                        help_text="Entity type (e.g., 'Account', 'Transaction')",
                        max_length=50,
                    ),
                ),
                ("aggregate_id", models.CharField(db_index=True, max_length=64)),
                (
                    "idempotency_key",
                    models.CharField(
                        editable=False,
                        help_text="Unique idempotency key per tenant",
                        max_length=255,
                    ),
                ),
                (
                    "data",
                    models.JSONField(
                        default=dict,
                        encoder=django.core.serializers.json.DjangoJSONEncoder,
                        help_text="Event data payload",
                    ),
                ),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        encoder=django.core.serializers.json.DjangoJSONEncoder,
                    ),
                ),
                (
                    "actor",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Who triggered this event",
                        max_length=255,
                    ),
                ),
                ("occurred_at", models.DateTimeField(db_index=True)),
                ("recorded_at", models.DateTimeField(auto_now_add=True)),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="events",
                        to="tenant.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["occurred_at", "recorded_at"],
                "indexes": [
                    models.Index(
                        fields=["tenant", "aggregate_type", "aggregate_id"],
                        name="events_busi_tenant__a3c9f0_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tenant", "idempotency_key"),
                        name="uniq_event_tenant_idempotency_key",
                    ),
                ],
            },
        ),
    ]
