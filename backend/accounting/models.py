# accounting/models.py
"""
Ledger models for CareLedger.

Account balances are DERIVED state.
=================================================================
An account's balance always equals the cumulative (debit - credit) of
every entry belonging to a POSTED transaction that references it.
Credit-normal accounts (LIABILITY, EQUITY, REVENUE) therefore carry a
NEGATIVE balance when they increase. This sign convention is kept as is
everywhere; reports flip signs for presentation only.

DO NOT:
- Assign Account.balance directly
- Call .save() on ledger models outside accounting.commands

All mutations go through the command layer (accounting/commands.py),
which runs inside command_writes_allowed() and a database transaction.

Models:
- Account: Chart of accounts entry with hierarchy and running balance
- Transaction: Double-entry transaction header (PENDING/POSTED/VOIDED)
- TransactionEntry: One debit or credit row of a transaction
- Invoice: Outstanding receivable/payable documents written by producers
- Reconciliation: Bank reconciliation record
"""

from decimal import Decimal
import uuid

from django.db import models
from django.db.models import Sum

from accounting.write_barrier import write_context_allowed
from tenant.models import Tenant


MONEY_Q = Decimal("0.01")


class LedgerModel(models.Model):
    """Abstract base for models only the ledger commands may write."""

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not write_context_allowed({"command"}):
            raise RuntimeError(
                f"{self.__class__.__name__} is ledger-owned. "
                "Use accounting.commands to modify it."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError(
            f"{self.__class__.__name__} records are never deleted."
        )


class Account(LedgerModel):
    """
    Chart of Accounts entry.

    Supports:
    - Hierarchical structure (parent/child within one tenant)
    - Signed running balance (debit - credit)
    - Soft status (ACTIVE/INACTIVE); accounts are never deleted
    """

    class AccountType(models.TextChoices):
        ASSET = "ASSET", "Asset"
        LIABILITY = "LIABILITY", "Liability"
        EQUITY = "EQUITY", "Equity"
        REVENUE = "REVENUE", "Revenue"
        EXPENSE = "EXPENSE", "Expense"

    class NormalBalance(models.TextChoices):
        DEBIT = "DEBIT", "Debit"
        CREDIT = "CREDIT", "Credit"

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        INACTIVE = "INACTIVE", "Inactive"

    NORMAL_BALANCE_MAP = {
        AccountType.ASSET: NormalBalance.DEBIT,
        AccountType.EXPENSE: NormalBalance.DEBIT,
        AccountType.LIABILITY: NormalBalance.CREDIT,
        AccountType.EQUITY: NormalBalance.CREDIT,
        AccountType.REVENUE: NormalBalance.CREDIT,
    }

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="accounts",
    )

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
    )

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=255)

    account_type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
        db_column="type",
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )

    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="children",
    )

    description = models.TextField(blank=True, default="")

    region = models.CharField(max_length=20)

    balance = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Signed debit - credit of all posted entries. Never assigned directly.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "code"],
                name="uniq_account_code_per_tenant",
            )
        ]
        ordering = ["code"]
        indexes = [
            models.Index(fields=["tenant", "account_type"], name="accounting__tenant__b6a1c2_idx"),
            models.Index(fields=["tenant", "parent"], name="accounting__tenant__5d8e41_idx"),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def normal_balance(self) -> str:
        return self.NORMAL_BALANCE_MAP[self.account_type]

    @property
    def full_code(self) -> str:
        """Returns the full hierarchical code (e.g., '1000.1010')."""
        if self.parent:
            return f"{self.parent.full_code}.{self.code}"
        return self.code

    def get_ancestors(self) -> list["Account"]:
        """Returns list of ancestor accounts from root to immediate parent."""
        ancestors = []
        current = self.parent
        while current:
            ancestors.insert(0, current)
            current = current.parent
        return ancestors


class Transaction(LedgerModel):
    """
    Double-entry transaction header.

    Lifecycle: PENDING --post--> POSTED --void--> VOIDED.
    Entries never change after creation; corrections are new transactions.
    """

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        POSTED = "POSTED", "Posted"
        VOIDED = "VOIDED", "Voided"

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="transactions",
    )

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
    )

    date = models.DateField()
    description = models.CharField(max_length=255)
    reference = models.CharField(max_length=100, blank=True, default="")
    batch_id = models.CharField(
        max_length=40,
        blank=True,
        default="",
        db_index=True,
        help_text="Shared by every transaction created in one batch.",
    )

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
    )

    service_type = models.CharField(
        max_length=50,
        blank=True,
        default="",
        help_text="Producer-supplied service classification used for tax exemptions.",
    )

    declared_tax = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Tax amount the producer declared; cross-checked by compliance.",
    )

    posted_at = models.DateTimeField(null=True, blank=True)
    voided_at = models.DateTimeField(null=True, blank=True)

    created_by = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date", "id"]
        indexes = [
            models.Index(fields=["tenant", "status", "date"], name="accounting__tenant__0f3b7a_idx"),
            models.Index(fields=["tenant", "reference"], name="accounting__tenant__9c42de_idx"),
        ]

    def __str__(self):
        return f"TX-{self.id} {self.date} {self.description} [{self.status}]"

    @property
    def total_debit(self) -> Decimal:
        return (self.entries.aggregate(total=Sum("debit"))["total"] or Decimal("0.00")).quantize(MONEY_Q)

    @property
    def total_credit(self) -> Decimal:
        return (self.entries.aggregate(total=Sum("credit"))["total"] or Decimal("0.00")).quantize(MONEY_Q)

    @property
    def amount(self) -> Decimal:
        """Transaction amount: the total moved on either side."""
        return self.total_debit

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit


class TransactionEntry(LedgerModel):
    """One row of a transaction; exactly one of debit/credit is non-zero."""

    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.PROTECT,
        related_name="entries",
    )

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="transaction_entries",
    )

    line_no = models.PositiveIntegerField()

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="entries",
    )

    debit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["transaction_id", "line_no"]
        constraints = [
            models.UniqueConstraint(
                fields=["transaction", "line_no"],
                name="uniq_entry_line_per_transaction",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant", "account"], name="accounting__tenant__e7a915_idx"),
        ]

    def __str__(self):
        return f"{self.account_id} Dr {self.debit} Cr {self.credit}"

    @property
    def net(self) -> Decimal:
        """Signed effect on the account balance when posted."""
        return self.debit - self.credit


class Invoice(models.Model):
    """
    Outstanding document feeding the aged receivables/payables reports.

    Invoices are written by the invoicing and purchasing producers; the
    ledger only reads them.
    """

    class Kind(models.TextChoices):
        RECEIVABLE = "RECEIVABLE", "Receivable"
        PAYABLE = "PAYABLE", "Payable"

    class Status(models.TextChoices):
        OPEN = "OPEN", "Open"
        PAID = "PAID", "Paid"
        CANCELLED = "CANCELLED", "Cancelled"

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="invoices",
    )

    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)

    kind = models.CharField(max_length=20, choices=Kind.choices)
    number = models.CharField(max_length=50)
    counterparty = models.CharField(max_length=255)

    issue_date = models.DateField()
    due_date = models.DateField()

    amount = models.DecimalField(max_digits=18, decimal_places=2)
    amount_paid = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.OPEN)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["due_date", "number"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "kind", "number"],
                name="uniq_invoice_number_per_tenant_kind",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant", "kind", "status"], name="accounting__tenant__41b0c8_idx"),
        ]

    def __str__(self):
        return f"{self.kind} {self.number} due {self.due_date}"

    @property
    def outstanding(self) -> Decimal:
        return self.amount - self.amount_paid


class Reconciliation(LedgerModel):
    """A bank reconciliation of one account against a statement."""

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="reconciliations",
    )

    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="reconciliations",
    )

    date = models.DateField()
    description = models.CharField(max_length=255)
    notes = models.TextField(blank=True, default="")

    transactions = models.ManyToManyField(
        Transaction,
        related_name="reconciliations",
        blank=True,
    )

    adjustment_transaction = models.OneToOneField(
        Transaction,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="adjusted_reconciliation",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-id"]

    def __str__(self):
        return f"Reconciliation {self.id} of {self.account_id} on {self.date}"
