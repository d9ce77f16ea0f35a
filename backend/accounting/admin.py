# accounting/admin.py
"""
Django admin configuration for ledger models.

The admin is for viewing only. Accounts and transactions are written
through accounting.commands, which emits the audit events and keeps
account balances in step with posted entries. Invoices feed the aged
receivables and payables reports and are listed here for lookup.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Account, Invoice, Transaction, TransactionEntry


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """Base admin class for ledger-owned models."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class ReadOnlyInline(admin.TabularInline):

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class TransactionEntryInline(ReadOnlyInline):
    model = TransactionEntry
    extra = 0
    readonly_fields = ["line_no", "account", "description", "debit", "credit"]
    fields = ["line_no", "account", "description", "debit", "credit"]


# =============================================================================
# Account Admin
# =============================================================================

@admin.register(Account)
class AccountAdmin(ReadOnlyModelAdmin):
    """Chart of accounts per tenant (read-only)."""

    list_display = [
        "code", "name", "account_type", "normal_balance",
        "status", "balance", "region", "tenant",
    ]
    list_filter = ["tenant", "region", "account_type", "status"]
    search_fields = ["code", "name", "description"]
    list_select_related = ["tenant", "parent"]
    ordering = ["tenant", "code"]

    fieldsets = (
        (None, {
            "fields": ("tenant", "public_id", "code", "name", "region"),
        }),
        ("Classification", {
            "fields": ("account_type", "status", "parent"),
        }),
        ("Balance", {
            "fields": ("balance",),
        }),
        ("Description", {
            "fields": ("description",),
        }),
        ("Timestamps", {
            "fields": ("created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    readonly_fields = [
        "tenant", "public_id", "code", "name", "region", "account_type",
        "status", "parent", "balance", "description", "created_at", "updated_at",
    ]


# =============================================================================
# Transaction Admin
# =============================================================================

@admin.register(Transaction)
class TransactionAdmin(ReadOnlyModelAdmin):
    """Ledger transactions with their entries (read-only)."""

    list_display = [
        "id", "date", "description_truncated", "reference", "batch_id",
        "status_colored", "service_type", "tenant",
    ]
    list_filter = ["tenant", "status", "service_type", "date"]
    search_fields = ["description", "reference", "batch_id"]
    date_hierarchy = "date"
    list_select_related = ["tenant"]
    ordering = ["-date", "-id"]

    fieldsets = (
        (None, {
            "fields": ("tenant", "public_id", "date", "description"),
        }),
        ("Source", {
            "fields": ("reference", "batch_id", "service_type", "declared_tax"),
        }),
        ("Status", {
            "fields": ("status", "posted_at", "voided_at"),
        }),
        ("Audit", {
            "fields": ("created_by", "created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    readonly_fields = [
        "tenant", "public_id", "date", "description", "reference", "batch_id",
        "service_type", "declared_tax", "status", "posted_at", "voided_at",
        "created_by", "created_at", "updated_at",
    ]
    inlines = [TransactionEntryInline]

    def description_truncated(self, obj):
        if len(obj.description) > 50:
            return f"{obj.description[:50]}..."
        return obj.description
    description_truncated.short_description = "Description"

    def status_colored(self, obj):
        """Show status with color coding."""
        colors = {
            Transaction.Status.PENDING: "#007bff",
            Transaction.Status.POSTED: "#28a745",
            Transaction.Status.VOIDED: "#dc3545",
        }
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            colors.get(obj.status, "#000"),
            obj.get_status_display(),
        )
    status_colored.short_description = "Status"
    status_colored.admin_order_field = "status"


@admin.register(Invoice)
class InvoiceAdmin(ReadOnlyModelAdmin):
    list_display = [
        "number", "kind", "counterparty", "issue_date", "due_date",
        "amount", "amount_paid", "status", "tenant",
    ]
    list_filter = ["tenant", "kind", "status"]
    search_fields = ["number", "counterparty"]
    ordering = ["tenant", "due_date"]
    readonly_fields = [
        "tenant", "public_id", "kind", "number", "counterparty", "issue_date",
        "due_date", "amount", "amount_paid", "status", "created_at",
    ]
