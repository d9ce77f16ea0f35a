# tests/conftest.py
"""
Pytest fixtures for CareLedger tests.

Most tests run against an England tenant whose books are seeded with the
regional chart of accounts, so every account code used below (1000 cash,
1100 debtors, 4000 care fees, ...) conforms to the chart.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from rest_framework.test import APIClient

from accounting.commands import create_transaction, post_transaction, seed_chart_of_accounts
from accounting.models import Account
from tenant.context import build_context
from tenant.models import Tenant


# =============================================================================
# Tenant & Context Fixtures
# =============================================================================

@pytest.fixture
def tenant(db):
    """An England care-home operator."""
    return Tenant.objects.create(
        public_id=uuid4(),
        name="Rosewood Care Homes",
        slug="rosewood",
        region=Tenant.Region.ENGLAND,
    )


@pytest.fixture
def second_tenant(db):
    """A second operator, in Ireland, for isolation tests."""
    return Tenant.objects.create(
        public_id=uuid4(),
        name="Liffey Nursing",
        slug="liffey",
        region=Tenant.Region.DUBLIN,
    )


@pytest.fixture
def ctx(tenant):
    return build_context(tenant, actor="finance@rosewood.test")


@pytest.fixture
def other_ctx(second_tenant):
    return build_context(second_tenant, actor="finance@liffey.test")


# =============================================================================
# Ledger Fixtures
# =============================================================================

@pytest.fixture
def accounts(ctx):
    """The seeded regional chart, keyed by account code."""
    result = seed_chart_of_accounts(ctx)
    return {account.code: account for account in result.data}


@pytest.fixture
def balance_of(ctx, accounts):
    """Read an account's current balance from the database."""
    def _balance(code):
        return Account.objects.get(tenant=ctx.tenant, code=code).balance
    return _balance


@pytest.fixture
def book(ctx, accounts):
    """
    Create (and by default post) a two-line transaction.

    Usage:
        tx = book("1000", "4000", "100.00", on=date(2024, 5, 1))
    """
    def _book(debit_code, credit_code, amount, on=date(2024, 5, 1), post=True, **kwargs):
        amount = Decimal(str(amount))
        result = create_transaction(
            ctx,
            date=on,
            description=kwargs.pop("description", f"{debit_code} / {credit_code}"),
            entries=[
                {"account_id": accounts[debit_code].id, "debit": amount},
                {"account_id": accounts[credit_code].id, "credit": amount},
            ],
            **kwargs,
        )
        tx = result.data
        if post:
            tx = post_transaction(ctx, tx.id).data
        return tx
    return _book


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def api_client(tenant):
    """API client identifying the England tenant."""
    client = APIClient()
    client.credentials(HTTP_X_TENANT_ID=str(tenant.public_id))
    return client
