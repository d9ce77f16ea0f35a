# tests/test_ledger.py
"""
Tests for the transaction lifecycle.

Tests cover:
- Creation and the double-entry invariant
- Entry shape rules
- Posting and voiding (including the credit-normal sign convention)
- Trial balance and balance verification
- Account history with running balances
- Batches and bank reconciliation
"""

from datetime import date
from decimal import Decimal

import pytest

from accounting.commands import (
    create_batch_transactions,
    create_reconciliation,
    create_transaction,
    perform_reconciliation,
    post_batch_transactions,
    post_transaction,
    void_transaction,
)
from accounting.exceptions import (
    BatchNotFound,
    InvalidEntryError,
    InvalidStateError,
    StructuralError,
    TransactionNotFound,
    UnbalancedTransactionError,
)
from accounting.models import Account, Transaction
from accounting.queries import (
    generate_batch_report,
    get_account_transactions,
    get_trial_balance,
    verify_account_balances,
)


def _entries(accounts, *lines):
    """Build entry dicts from (code, debit, credit) tuples."""
    return [
        {"account_id": accounts[code].id, "debit": debit, "credit": credit}
        for code, debit, credit in lines
    ]


# =============================================================================
# Creation
# =============================================================================

@pytest.mark.django_db
class TestCreateTransaction:

    def test_created_pending_without_touching_balances(self, ctx, accounts, balance_of):
        tx = create_transaction(
            ctx,
            date="2024-05-01",
            description="Care fees May",
            entries=_entries(accounts, ("1100", "2400.00", "0"), ("4000", "0", "2400.00")),
            reference="INV-0001",
        ).data

        assert tx.status == Transaction.Status.PENDING
        assert tx.entries.count() == 2
        assert tx.total_debit == tx.total_credit == Decimal("2400.00")
        assert tx.created_by == ctx.actor
        assert balance_of("1100") == Decimal("0.00")
        assert balance_of("4000") == Decimal("0.00")

    def test_entries_by_account_code(self, ctx, accounts):
        tx = create_transaction(
            ctx,
            date=date(2024, 5, 1),
            description="Catering invoice",
            entries=[
                {"account_code": "5200", "debit": "120.50"},
                {"account_code": "2000", "credit": "120.50"},
            ],
        ).data

        assert [e.account.code for e in tx.entries.all()] == ["5200", "2000"]

    def test_unbalanced_raises_and_creates_nothing(self, ctx, accounts):
        with pytest.raises(UnbalancedTransactionError) as exc_info:
            create_transaction(
                ctx,
                date="2024-05-01",
                description="Typo",
                entries=_entries(accounts, ("1000", "100.00", "0"), ("4000", "0", "99.99")),
            )

        assert exc_info.value.total_debit == Decimal("100.00")
        assert exc_info.value.total_credit == Decimal("99.99")
        assert not Transaction.objects.filter(tenant=ctx.tenant).exists()

    @pytest.mark.parametrize(
        "lines",
        [
            (("1000", "100.00", "100.00"), ("4000", "0", "0")),  # both sides set
            (("1000", "-100.00", "0"), ("4000", "0", "-100.00")),  # negative
            (("1000", "0", "0"), ("4000", "0", "0")),  # empty entries
            (("1000", "abc", "0"), ("4000", "0", "100.00")),  # not a number
        ],
    )
    def test_malformed_entries_rejected(self, ctx, accounts, lines):
        with pytest.raises(InvalidEntryError):
            create_transaction(
                ctx, date="2024-05-01", description="Bad", entries=_entries(accounts, *lines),
            )

    def test_single_entry_rejected(self, ctx, accounts):
        with pytest.raises(InvalidEntryError):
            create_transaction(
                ctx, date="2024-05-01", description="Lonely",
                entries=_entries(accounts, ("1000", "0", "0")),
            )

    def test_account_of_other_tenant_rejected(self, ctx, other_ctx, accounts):
        with pytest.raises(InvalidEntryError, match="not found"):
            create_transaction(
                other_ctx, date="2024-05-01", description="Cross tenant",
                entries=_entries(accounts, ("1000", "10.00", "0"), ("4000", "0", "10.00")),
            )

    def test_invalid_date_rejected(self, ctx, accounts):
        with pytest.raises(StructuralError):
            create_transaction(
                ctx, date="31/05/2024", description="Wrong date format",
                entries=_entries(accounts, ("1000", "10.00", "0"), ("4000", "0", "10.00")),
            )


# =============================================================================
# Posting & Voiding
# =============================================================================

@pytest.mark.django_db
class TestPostAndVoid:

    def test_credit_normal_sign_convention(self, ctx, book, balance_of):
        """Posting Dr cash / Cr revenue leaves revenue with a negative balance."""
        tx = book("1000", "4000", "100")

        assert tx.status == Transaction.Status.POSTED
        assert tx.posted_at is not None
        assert balance_of("1000") == Decimal("100.00")
        assert balance_of("4000") == Decimal("-100.00")

    def test_second_post_raises_and_leaves_balances(self, ctx, book, balance_of):
        tx = book("1000", "4000", "100")

        with pytest.raises(InvalidStateError):
            post_transaction(ctx, tx.id)

        assert balance_of("1000") == Decimal("100.00")
        assert balance_of("4000") == Decimal("-100.00")

    def test_void_restores_balances(self, ctx, book, balance_of):
        book("1000", "4000", "250.00")
        tx = book("1000", "4100", "75.25")

        void_transaction(ctx, tx.id)

        tx.refresh_from_db()
        assert tx.status == Transaction.Status.VOIDED
        assert tx.voided_at is not None
        assert balance_of("1000") == Decimal("250.00")
        assert balance_of("4100") == Decimal("0.00")

    def test_round_trip_returns_every_balance_to_start(self, ctx, accounts, book):
        book("1000", "3000", "10000.00")
        book("5000", "1000", "2200.00")
        before = dict(Account.objects.filter(tenant=ctx.tenant).values_list("code", "balance"))

        tx = create_transaction(
            ctx,
            date="2024-05-20",
            description="Split receipt",
            entries=_entries(
                accounts,
                ("1000", "900.00", "0"),
                ("1100", "100.00", "0"),
                ("4000", "0", "600.00"),
                ("4100", "0", "400.00"),
            ),
        ).data
        post_transaction(ctx, tx.id)
        void_transaction(ctx, tx.id)

        after = dict(Account.objects.filter(tenant=ctx.tenant).values_list("code", "balance"))
        assert after == before

    def test_voided_is_terminal(self, ctx, book):
        tx = book("1000", "4000", "100")
        void_transaction(ctx, tx.id)

        with pytest.raises(InvalidStateError):
            void_transaction(ctx, tx.id)
        with pytest.raises(InvalidStateError):
            post_transaction(ctx, tx.id)

    def test_pending_cannot_be_voided(self, ctx, book):
        tx = book("1000", "4000", "100", post=False)

        with pytest.raises(InvalidStateError) as exc_info:
            void_transaction(ctx, tx.id)

        assert exc_info.value.status == Transaction.Status.PENDING

    def test_other_tenant_cannot_post(self, ctx, other_ctx, book):
        tx = book("1000", "4000", "100", post=False)

        with pytest.raises(TransactionNotFound):
            post_transaction(other_ctx, tx.id)

    def test_repeated_account_in_one_transaction(self, ctx, accounts, balance_of):
        tx = create_transaction(
            ctx,
            date="2024-05-01",
            description="Two receipts",
            entries=_entries(
                accounts,
                ("1000", "30.00", "0"),
                ("1000", "20.00", "0"),
                ("4000", "0", "50.00"),
            ),
        ).data
        post_transaction(ctx, tx.id)

        assert balance_of("1000") == Decimal("50.00")


# =============================================================================
# Trial Balance & Verification
# =============================================================================

@pytest.mark.django_db
class TestTrialBalance:

    def test_debits_equal_credits(self, ctx, book):
        book("1000", "3000", "50000.00")
        book("1500", "2500", "120000.00")
        book("1100", "4000", "8150.40")
        book("5000", "1000", "3999.99")
        tx = book("5200", "2000", "410.00")
        void_transaction(ctx, tx.id)
        book("1000", "4100", "1234.56", post=False)

        trial = get_trial_balance(ctx)

        assert trial["is_balanced"] is True
        assert trial["total_debits"] == trial["total_credits"]
        assert trial["total_debits"] == Decimal("50000.00") - Decimal("3999.99") + Decimal("120000.00") \
            + Decimal("8150.40") + Decimal("3999.99")

    def test_credit_column_is_absolute(self, ctx, book):
        book("1000", "4000", "100")

        rows = {row["code"]: row for row in get_trial_balance(ctx)["accounts"]}
        assert rows["1000"]["debit"] == Decimal("100.00")
        assert rows["1000"]["credit"] == Decimal("0.00")
        assert rows["4000"]["debit"] == Decimal("0.00")
        assert rows["4000"]["credit"] == Decimal("100.00")
        assert rows["4000"]["balance"] == Decimal("-100.00")

    def test_verify_balances(self, ctx, book):
        book("1000", "4000", "100")
        tx = book("5200", "1000", "40")
        void_transaction(ctx, tx.id)

        assert verify_account_balances(ctx)["is_consistent"] is True

        # Simulate drift introduced outside the ledger
        Account.objects.filter(tenant=ctx.tenant, code="1000").update(balance=Decimal("90.00"))

        result = verify_account_balances(ctx)
        assert result["is_consistent"] is False
        assert result["discrepancies"] == [{
            "account_id": result["discrepancies"][0]["account_id"],
            "code": "1000",
            "recorded": Decimal("90.00"),
            "computed": Decimal("100.00"),
            "difference": Decimal("-10.00"),
        }]


# =============================================================================
# Account History
# =============================================================================

@pytest.mark.django_db
class TestAccountTransactions:

    def test_opening_running_and_closing_balances(self, ctx, accounts, book):
        book("1000", "3000", "1000.00", on=date(2024, 3, 31))
        book("1000", "4000", "200.00", on=date(2024, 4, 5))
        book("5200", "1000", "50.00", on=date(2024, 4, 10))
        voided = book("1000", "4000", "999.00", on=date(2024, 4, 12))
        void_transaction(ctx, voided.id)
        book("1000", "4000", "25.00", on=date(2024, 5, 2))

        history = get_account_transactions(
            ctx, accounts["1000"].id, start_date=date(2024, 4, 1), end_date=date(2024, 4, 30),
        )

        assert history["opening_balance"] == Decimal("1000.00")
        assert [row["running_balance"] for row in history["transactions"]] == [
            Decimal("1200.00"),
            Decimal("1150.00"),
        ]
        assert history["closing_balance"] == Decimal("1150.00")
        assert history["pagination"]["total"] == 2

    def test_pagination_keeps_window_closing_balance(self, ctx, accounts, book):
        for day in range(1, 6):
            book("1000", "4000", "10.00", on=date(2024, 5, day))

        page = get_account_transactions(ctx, accounts["1000"].id, page=2, limit=2)

        assert page["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}
        assert [row["running_balance"] for row in page["transactions"]] == [
            Decimal("30.00"),
            Decimal("40.00"),
        ]
        assert page["closing_balance"] == Decimal("50.00")

    def test_invalid_limit(self, ctx, accounts):
        with pytest.raises(StructuralError):
            get_account_transactions(ctx, accounts["1000"].id, limit=0)


# =============================================================================
# Batches
# =============================================================================

def _batch_item(accounts, amount, description="Batch item", on="2024-05-01"):
    return {
        "date": on,
        "description": description,
        "entries": [
            {"account_id": accounts["1100"].id, "debit": amount},
            {"account_id": accounts["4000"].id, "credit": amount},
        ],
    }


@pytest.mark.django_db
class TestBatches:

    def test_batch_create_all_or_nothing(self, ctx, accounts):
        bad = _batch_item(accounts, "10.00")
        bad["entries"][1]["credit"] = "9.00"

        with pytest.raises(UnbalancedTransactionError):
            create_batch_transactions(ctx, [_batch_item(accounts, "10.00"), bad])

        assert not Transaction.objects.filter(tenant=ctx.tenant).exists()

    def test_batch_create_and_post(self, ctx, accounts, balance_of):
        created = create_batch_transactions(
            ctx, [_batch_item(accounts, "10.00"), _batch_item(accounts, "15.00")],
        ).data

        post_batch_transactions(ctx, [tx.id for tx in created])

        assert balance_of("1100") == Decimal("25.00")
        assert balance_of("4000") == Decimal("-25.00")

    def test_batch_post_rolls_back_on_state_error(self, ctx, accounts, book, balance_of):
        first = book("1100", "4000", "10.00", post=False)
        already_posted = book("1100", "4000", "5.00")

        with pytest.raises(InvalidStateError):
            post_batch_transactions(ctx, [first.id, already_posted.id])

        first.refresh_from_db()
        assert first.status == Transaction.Status.PENDING
        assert balance_of("1100") == Decimal("5.00")

    def test_batch_shares_batch_id(self, ctx, accounts):
        own_reference = {**_batch_item(accounts, "15.00"), "reference": "INV-77"}
        created = create_batch_transactions(
            ctx, [_batch_item(accounts, "10.00"), own_reference],
        ).data

        batch_id = created[0].batch_id
        assert batch_id
        assert {tx.batch_id for tx in created} == {batch_id}
        assert [tx.reference for tx in created] == [f"BATCH-{batch_id}", "INV-77"]

    def test_batch_report(self, ctx, accounts):
        created = create_batch_transactions(
            ctx, [_batch_item(accounts, "10.00"), _batch_item(accounts, "15.00")],
        ).data
        post_batch_transactions(ctx, [created[0].id])
        create_batch_transactions(ctx, [_batch_item(accounts, "99.00")])

        report = generate_batch_report(ctx, created[0].batch_id)

        assert report["total_transactions"] == 2
        assert report["total_amount"] == Decimal("25.00")
        assert report["status_counts"] == {"PENDING": 1, "POSTED": 1, "VOIDED": 0}
        assert report["accounts"] == [
            {
                "account_id": accounts["1100"].id,
                "code": "1100",
                "name": accounts["1100"].name,
                "total_debits": Decimal("25.00"),
                "total_credits": Decimal("0.00"),
                "net_change": Decimal("25.00"),
            },
            {
                "account_id": accounts["4000"].id,
                "code": "4000",
                "name": accounts["4000"].name,
                "total_debits": Decimal("0.00"),
                "total_credits": Decimal("25.00"),
                "net_change": Decimal("-25.00"),
            },
        ]

    def test_batch_report_unknown_batch(self, ctx, other_ctx, accounts):
        created = create_batch_transactions(ctx, [_batch_item(accounts, "10.00")]).data

        with pytest.raises(BatchNotFound):
            generate_batch_report(ctx, "NOPE")
        with pytest.raises(BatchNotFound):
            generate_batch_report(other_ctx, created[0].batch_id)

    def test_single_transactions_have_no_batch(self, ctx, book):
        assert book("1100", "4000", "10.00", post=False).batch_id == ""

    def test_unknown_batch_field(self, ctx, accounts):
        item = _batch_item(accounts, "10.00")
        item["status"] = "POSTED"

        with pytest.raises(StructuralError):
            create_batch_transactions(ctx, [item])


# =============================================================================
# Reconciliation
# =============================================================================

@pytest.mark.django_db
class TestReconciliation:

    def test_match_by_amount_and_date(self, ctx, accounts, book):
        received = book("1000", "4000", "250.00", on=date(2024, 5, 10))
        paid = book("5200", "1000", "80.00", on=date(2024, 5, 12))

        result = perform_reconciliation(
            ctx,
            accounts["1000"].id,
            "2024-05-01",
            "2024-05-31",
            [
                {"date": "2024-05-11", "amount": "250.00", "description": "BACS"},
                {"date": "2024-05-15", "amount": "-80.00", "description": "Card"},
            ],
        )

        assert [m["transaction_id"] for m in result["matched"]] == [received.id]
        assert [u["transaction_id"] for u in result["unmatched_transactions"]] == [paid.id]
        assert [line["description"] for line in result["unmatched_statement_lines"]] == ["Card"]

    def test_create_with_adjustment_posts_to_suspense(self, ctx, accounts, book, balance_of):
        received = book("1000", "4000", "250.00", on=date(2024, 5, 10))

        result = create_reconciliation(
            ctx,
            accounts["1000"].id,
            date="2024-05-31",
            description="May bank statement",
            matched_transaction_ids=[received.id],
            adjustment_amount="-12.50",
        ).data

        adjustment = result["adjustment_transaction"]
        assert adjustment.status == Transaction.Status.POSTED
        assert list(result["reconciliation"].transactions.all()) == [received]
        assert balance_of("1000") == Decimal("237.50")
        assert balance_of("SUSP") == Decimal("12.50")

    def test_small_adjustment_is_ignored(self, ctx, accounts):
        result = create_reconciliation(
            ctx,
            accounts["1000"].id,
            date="2024-05-31",
            description="May bank statement",
            matched_transaction_ids=[],
            adjustment_amount="0.01",
        ).data

        assert result["adjustment_transaction"] is None

    def test_unknown_matched_transaction(self, ctx, accounts):
        with pytest.raises(TransactionNotFound):
            create_reconciliation(
                ctx,
                accounts["1000"].id,
                date="2024-05-31",
                description="May bank statement",
                matched_transaction_ids=[424242],
            )
