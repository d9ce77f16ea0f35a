# accounting/serializers.py
"""
Serializers for the ledger API.

These serializers are used for:
1. Input validation (shape and types)
2. Output formatting

Business rules (balanced entries, state transitions, derived balances)
are enforced by accounting.commands, not here.
"""

from decimal import Decimal

from rest_framework import serializers

from .models import Account, Transaction, TransactionEntry


ZERO = Decimal("0.00")


def _reject_unknown_fields(serializer):
    unknown = set(getattr(serializer, "initial_data", {}) or {}) - set(serializer.fields)
    if unknown:
        raise serializers.ValidationError(
            {field: "Unknown or read-only field." for field in sorted(unknown)}
        )


# =============================================================================
# Accounts
# =============================================================================

class AccountSerializer(serializers.ModelSerializer):
    parent_code = serializers.CharField(source="parent.code", read_only=True, default=None)

    class Meta:
        model = Account
        fields = [
            "id", "public_id", "code", "name",
            "account_type", "status", "normal_balance",
            "parent", "parent_code", "description", "region",
            "balance", "created_at", "updated_at",
        ]
        read_only_fields = [f for f in fields if f != "parent_code"]


class AccountCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=255)
    account_type = serializers.CharField(max_length=20)
    parent_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_account_type(self, value):
        value = value.upper()
        if value not in Account.AccountType.values:
            raise serializers.ValidationError(f"Must be one of {Account.AccountType.values}.")
        return value


class AccountUpdateSerializer(serializers.Serializer):
    """
    Partial update of descriptive fields.

    balance is derived from posted transactions; any attempt to send it
    (or any other unknown field) is rejected.
    """
    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Account.Status.choices, required=False)
    parent_id = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, attrs):
        _reject_unknown_fields(self)
        return attrs


class AccountHistoryQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, default=50)


# =============================================================================
# Transactions
# =============================================================================

class TransactionEntrySerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)

    class Meta:
        model = TransactionEntry
        fields = ["line_no", "account", "account_code", "debit", "credit", "description"]
        read_only_fields = ["line_no", "account", "debit", "credit", "description"]


class TransactionSerializer(serializers.ModelSerializer):
    entries = TransactionEntrySerializer(many=True, read_only=True)
    total_debit = serializers.SerializerMethodField()
    total_credit = serializers.SerializerMethodField()

    class Meta:
        model = Transaction
        fields = [
            "id", "public_id", "date", "description", "reference", "batch_id", "status",
            "service_type", "declared_tax",
            "total_debit", "total_credit", "entries",
            "posted_at", "voided_at", "created_by", "created_at",
        ]
        read_only_fields = [
            f for f in fields if f not in ("entries", "total_debit", "total_credit")
        ]

    # Sum over prefetched entries instead of one aggregate query per row
    def get_total_debit(self, obj):
        return str(sum((e.debit for e in obj.entries.all()), ZERO))

    def get_total_credit(self, obj):
        return str(sum((e.credit for e in obj.entries.all()), ZERO))


class EntryInputSerializer(serializers.Serializer):
    account_id = serializers.IntegerField(required=False)
    account_code = serializers.CharField(required=False)
    debit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=ZERO)
    credit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=ZERO)
    description = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs.get("account_id") is None and not attrs.get("account_code"):
            raise serializers.ValidationError("account_id or account_code is required.")
        return attrs


class TransactionCreateSerializer(serializers.Serializer):
    date = serializers.DateField()
    description = serializers.CharField(max_length=255)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    service_type = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    declared_tax = serializers.DecimalField(
        max_digits=18, decimal_places=2, required=False, allow_null=True, default=None,
    )
    entries = EntryInputSerializer(many=True)

    def to_command_kwargs(self) -> dict:
        data = dict(self.validated_data)
        data["entries"] = [dict(entry) for entry in data["entries"]]
        return data


class BatchCreateSerializer(serializers.Serializer):
    transactions = TransactionCreateSerializer(many=True)

    def to_command_batch(self) -> list:
        batch = []
        for item in self.validated_data["transactions"]:
            item = dict(item)
            item["entries"] = [dict(entry) for entry in item["entries"]]
            batch.append(item)
        return batch


class BatchPostSerializer(serializers.Serializer):
    transaction_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


# =============================================================================
# Reconciliation
# =============================================================================

class StatementLineSerializer(serializers.Serializer):
    date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=18, decimal_places=2)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class ReconciliationMatchSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    statement_lines = StatementLineSerializer(many=True)


class ReconciliationCreateSerializer(serializers.Serializer):
    date = serializers.DateField()
    description = serializers.CharField(max_length=255)
    matched_transaction_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    adjustment_amount = serializers.DecimalField(
        max_digits=18, decimal_places=2, required=False, allow_null=True, default=None,
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


# =============================================================================
# Periods
# =============================================================================

class PeriodQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError("start_date must not be after end_date.")
        return attrs
