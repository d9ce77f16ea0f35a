# events/admin.py
"""
Django admin configuration for the audit event store.

Events are read-only in admin (they're immutable).
"""

import json

from django.contrib import admin
from django.utils.html import format_html

from .models import BusinessEvent


@admin.register(BusinessEvent)
class BusinessEventAdmin(admin.ModelAdmin):
    """
    Admin interface for BusinessEvents.
    Read-only since events are immutable.
    """

    list_display = [
        "id_short", "event_type", "aggregate_display",
        "actor", "occurred_at", "tenant",
    ]
    list_filter = ["tenant", "event_type", "aggregate_type", "occurred_at"]
    search_fields = ["event_type", "aggregate_type", "aggregate_id", "actor", "idempotency_key"]
    date_hierarchy = "occurred_at"
    list_select_related = ["tenant"]
    ordering = ["-occurred_at"]

    readonly_fields = [
        "id", "tenant", "event_type", "aggregate_type", "aggregate_id",
        "idempotency_key", "data_formatted", "metadata_formatted", "actor",
        "occurred_at", "recorded_at",
    ]

    fieldsets = (
        ("Event Identity", {
            "fields": ("id", "event_type", "idempotency_key"),
        }),
        ("Aggregate", {
            "fields": ("aggregate_type", "aggregate_id"),
        }),
        ("Payload", {
            "fields": ("data_formatted",),
        }),
        ("Context", {
            "fields": ("tenant", "actor"),
        }),
        ("Metadata", {
            "fields": ("metadata_formatted",),
            "classes": ("collapse",),
        }),
        ("Timestamps", {
            "fields": ("occurred_at", "recorded_at"),
        }),
    )

    def id_short(self, obj):
        """Display shortened UUID."""
        return str(obj.id)[:8] + "..."
    id_short.short_description = "ID"

    def aggregate_display(self, obj):
        return f"{obj.aggregate_type}#{obj.aggregate_id}"
    aggregate_display.short_description = "Aggregate"

    def data_formatted(self, obj):
        return format_html(
            "<pre style='white-space: pre-wrap; max-width: 600px;'>{}</pre>",
            json.dumps(obj.data, indent=2, default=str),
        )
    data_formatted.short_description = "Data"

    def metadata_formatted(self, obj):
        return format_html(
            "<pre style='white-space: pre-wrap; max-width: 600px;'>{}</pre>",
            json.dumps(obj.metadata, indent=2, default=str),
        )
    metadata_formatted.short_description = "Metadata"

    def has_add_permission(self, request):
        return False  # Events are emitted by commands only

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
