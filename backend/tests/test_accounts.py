# tests/test_accounts.py
"""
Tests for the account registry.

Tests cover:
- Account creation, parents and duplicate codes
- Listing and search
- Updates, including the derived balance guard
- Chart of accounts seeding
- Write barrier and tenant isolation
"""

from decimal import Decimal
import logging

import pytest

from accounting.commands import (
    create_account,
    create_transaction,
    seed_chart_of_accounts,
    update_account,
)
from accounting.exceptions import (
    AccountNotFound,
    DuplicateAccountCode,
    InvalidEntryError,
    ParentNotFound,
    ReadOnlyFieldError,
    StructuralError,
)
from accounting.models import Account
from accounting.queries import get_account, list_accounts
from events.models import BusinessEvent
from events.types import EventTypes


# =============================================================================
# Creation
# =============================================================================

@pytest.mark.django_db
class TestCreateAccount:

    def test_new_account_starts_at_zero(self, ctx):
        account = create_account(ctx, code="1000", name="Cash", account_type="asset").data

        assert account.balance == Decimal("0.00")
        assert account.account_type == Account.AccountType.ASSET
        assert account.region == "england"
        assert account.normal_balance == Account.NormalBalance.DEBIT

    def test_child_account(self, ctx):
        parent = create_account(ctx, code="1000", name="Cash", account_type="ASSET").data
        child = create_account(
            ctx, code="1010", name="Petty Cash", account_type="ASSET", parent_id=parent.id,
        ).data

        assert child.parent_id == parent.id
        assert child.full_code == "1000.1010"
        assert child.get_ancestors() == [parent]

    def test_missing_parent_raises(self, ctx):
        with pytest.raises(ParentNotFound):
            create_account(ctx, code="1010", name="Petty Cash", account_type="ASSET", parent_id=999999)

        assert not Account.objects.filter(tenant=ctx.tenant).exists()

    def test_parent_from_another_tenant_is_not_found(self, ctx, other_ctx):
        foreign = create_account(other_ctx, code="1000", name="Cash", account_type="ASSET").data

        with pytest.raises(ParentNotFound):
            create_account(ctx, code="1010", name="Petty Cash", account_type="ASSET", parent_id=foreign.id)

    def test_duplicate_code_raises(self, ctx):
        create_account(ctx, code="1000", name="Cash", account_type="ASSET")

        with pytest.raises(DuplicateAccountCode):
            create_account(ctx, code="1000", name="Other Cash", account_type="ASSET")

    def test_same_code_in_two_tenants(self, ctx, other_ctx):
        create_account(ctx, code="1000", name="Cash", account_type="ASSET")
        create_account(other_ctx, code="1000", name="Cash", account_type="ASSET")

        assert Account.objects.filter(code="1000").count() == 2

    def test_unknown_type_raises(self, ctx):
        with pytest.raises(StructuralError):
            create_account(ctx, code="1000", name="Cash", account_type="CASH")

    def test_creation_emits_event(self, ctx):
        account = create_account(ctx, code="1000", name="Cash", account_type="ASSET").data

        event = BusinessEvent.objects.get(
            tenant=ctx.tenant, event_type=EventTypes.ACCOUNT_CREATED,
        )
        assert event.aggregate_id == str(account.public_id)
        assert event.data["code"] == "1000"
        assert event.actor == ctx.actor


# =============================================================================
# Reads
# =============================================================================

@pytest.mark.django_db
class TestListAccounts:

    def test_filters(self, ctx, accounts):
        revenue = list_accounts(ctx, type="revenue")
        assert [a.code for a in revenue] == ["4000", "4100", "4200", "4900"]

        by_code = list_accounts(ctx, search="50")
        assert {"5000", "5010"} <= {a.code for a in by_code}

        by_name = list_accounts(ctx, search="petty")
        assert [a.code for a in by_name] == ["1010"]

    def test_parent_filter(self, ctx, accounts):
        child = create_account(
            ctx, code="1001", name="Operating Account", account_type="ASSET",
            parent_id=accounts["1000"].id,
        ).data

        assert list(list_accounts(ctx, parent_id=accounts["1000"].id)) == [child]

    def test_tenant_scoping(self, ctx, other_ctx, accounts):
        assert list_accounts(other_ctx).count() == 0

        with pytest.raises(AccountNotFound):
            get_account(other_ctx, accounts["1000"].id)


# =============================================================================
# Updates
# =============================================================================

@pytest.mark.django_db
class TestUpdateAccount:

    def test_rename(self, ctx, accounts):
        account = update_account(ctx, accounts["1000"].id, name="Main Bank").data

        assert account.name == "Main Bank"
        event = BusinessEvent.objects.get(tenant=ctx.tenant, event_type=EventTypes.ACCOUNT_UPDATED)
        assert event.data["changes"] == {"name": {"old": "Cash and Bank", "new": "Main Bank"}}

    def test_no_change_emits_no_event(self, ctx, accounts):
        update_account(ctx, accounts["1000"].id, name="Cash and Bank")

        assert not BusinessEvent.objects.filter(event_type=EventTypes.ACCOUNT_UPDATED).exists()

    def test_balance_cannot_be_set(self, ctx, accounts):
        with pytest.raises(ReadOnlyFieldError):
            update_account(ctx, accounts["1000"].id, balance=Decimal("500.00"))

        assert get_account(ctx, accounts["1000"].id).balance == Decimal("0.00")

    def test_unknown_field_rejected(self, ctx, accounts):
        with pytest.raises(ReadOnlyFieldError):
            update_account(ctx, accounts["1000"].id, region="dublin")

    def test_parent_cycle_rejected(self, ctx, accounts):
        update_account(ctx, accounts["1010"].id, parent_id=accounts["1000"].id)

        with pytest.raises(StructuralError):
            update_account(ctx, accounts["1000"].id, parent_id=accounts["1010"].id)
        with pytest.raises(StructuralError):
            update_account(ctx, accounts["1000"].id, parent_id=accounts["1000"].id)

    def test_inactive_account_cannot_take_entries(self, ctx, accounts):
        update_account(ctx, accounts["1010"].id, status="INACTIVE")

        with pytest.raises(InvalidEntryError, match="inactive"):
            create_transaction(
                ctx,
                date="2024-05-01",
                description="Float top-up",
                entries=[
                    {"account_id": accounts["1010"].id, "debit": "50.00"},
                    {"account_id": accounts["1000"].id, "credit": "50.00"},
                ],
            )


# =============================================================================
# Chart Seeding
# =============================================================================

@pytest.mark.django_db
class TestSeedChart:

    def test_seed_creates_whole_chart(self, ctx):
        created = seed_chart_of_accounts(ctx).data
        chart = ctx.config.accounting_standard.chart_of_accounts

        assert len(created) == len(chart)
        cash = Account.objects.get(tenant=ctx.tenant, code="1000")
        assert cash.account_type == Account.AccountType.ASSET
        assert cash.description == "current-asset"

    def test_seed_logs_count_at_info(self, ctx, caplog, monkeypatch):
        # App loggers do not propagate to the root handler caplog listens on
        monkeypatch.setattr(logging.getLogger("accounting"), "propagate", True)
        caplog.set_level(logging.INFO, logger="accounting")

        created = seed_chart_of_accounts(ctx).data

        records = [r for r in caplog.records if r.getMessage() == "Chart of accounts seeded"]
        assert len(records) == 1
        assert records[0].accounts_created == len(created)
        assert records[0].tenant_id == ctx.tenant_id

    def test_seed_is_idempotent(self, ctx, accounts):
        assert seed_chart_of_accounts(ctx).data == []
        assert Account.objects.filter(tenant=ctx.tenant).count() == len(accounts)

    def test_management_command(self, tenant):
        from django.core.management import call_command

        call_command("seed_chart_of_accounts", tenant.slug)

        assert Account.objects.filter(tenant=tenant, code="4000").exists()


# =============================================================================
# Write Barrier
# =============================================================================

@pytest.mark.django_db
class TestWriteBarrier:

    def test_direct_save_raises(self, accounts):
        account = accounts["1000"]
        account.balance = Decimal("1000000.00")

        with pytest.raises(RuntimeError, match="accounting.commands"):
            account.save()

    def test_direct_create_raises(self, ctx):
        with pytest.raises(RuntimeError):
            Account.objects.create(
                tenant=ctx.tenant, code="1000", name="Cash",
                account_type="ASSET", region="england",
            )

    def test_delete_raises(self, accounts):
        with pytest.raises(RuntimeError, match="never deleted"):
            accounts["1000"].delete()
