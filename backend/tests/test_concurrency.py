# tests/test_concurrency.py
"""
Tests for mutual exclusion of posting and voiding.

The compare-and-swap tests run everywhere by replaying the loser's view
of the row. The threaded tests need real row locks and only run on
PostgreSQL; they also cover lock ordering between batch and single posts
and the snapshot consistency of the trial balance.
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
import threading

import pytest
from django.db import connection

from accounting.commands import (
    _flip_status,
    post_batch_transactions,
    post_transaction,
    void_transaction,
)
from accounting.exceptions import InvalidStateError
from accounting.models import Account, Transaction
from accounting.queries import get_trial_balance
from events.models import BusinessEvent
from events.types import EventTypes


@pytest.mark.django_db
class TestCompareAndSwap:

    def test_stale_writer_loses(self, ctx, book):
        """A caller that read PENDING before the winner committed cannot flip the status."""
        tx = book("1000", "4000", "100", post=False)
        stale = Transaction.objects.get(pk=tx.pk)

        post_transaction(ctx, tx.id)

        with pytest.raises(InvalidStateError) as exc_info:
            _flip_status(ctx, stale, Transaction.Status.PENDING, Transaction.Status.POSTED)

        assert exc_info.value.status == Transaction.Status.POSTED

    def test_loser_applies_no_balance_change(self, ctx, book, balance_of):
        tx = book("1000", "4000", "100")

        for _ in range(3):
            with pytest.raises(InvalidStateError):
                post_transaction(ctx, tx.id)

        assert balance_of("1000") == Decimal("100.00")
        assert BusinessEvent.objects.filter(
            tenant=ctx.tenant, event_type=EventTypes.TRANSACTION_POSTED,
        ).count() == 1

    def test_void_race_loser(self, ctx, book, balance_of):
        tx = book("1000", "4000", "100")
        stale = Transaction.objects.get(pk=tx.pk)

        void_transaction(ctx, tx.id)

        with pytest.raises(InvalidStateError):
            _flip_status(ctx, stale, Transaction.Status.POSTED, Transaction.Status.VOIDED)
        assert balance_of("1000") == Decimal("0.00")


@pytest.mark.postgres
@pytest.mark.skipif(connection.vendor == "sqlite", reason="needs row-level locking")
@pytest.mark.django_db(transaction=True)
def test_concurrent_posts_of_one_transaction(ctx, book, balance_of):
    """Of several threads posting the same transaction, exactly one succeeds."""
    tx = book("1000", "4000", "100", post=False)
    workers = 4
    barrier = threading.Barrier(workers)

    def attempt():
        try:
            barrier.wait()
            post_transaction(ctx, tx.id)
            return "posted"
        except InvalidStateError:
            return "rejected"
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(lambda _: attempt(), range(workers)))

    assert outcomes.count("posted") == 1
    assert outcomes.count("rejected") == workers - 1
    assert balance_of("1000") == Decimal("100.00")
    assert balance_of("4000") == Decimal("-100.00")


@pytest.mark.postgres
@pytest.mark.skipif(connection.vendor == "sqlite", reason="needs row-level locking")
@pytest.mark.django_db(transaction=True)
def test_concurrent_posts_on_shared_accounts(ctx, book):
    """Posts touching the same accounts serialize; no update is lost."""
    pending = [book("1000", "4000", "10.00", post=False) for _ in range(8)]

    def attempt(tx):
        try:
            post_transaction(ctx, tx.id)
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(attempt, pending))

    cash = Account.objects.get(tenant=ctx.tenant, code="1000")
    assert cash.balance == Decimal("80.00")


@pytest.mark.postgres
@pytest.mark.skipif(connection.vendor == "sqlite", reason="needs row-level locking")
@pytest.mark.django_db(transaction=True)
def test_batch_post_races_single_post(ctx, accounts, book, balance_of):
    """
    A batch and a standalone post of the same transaction take locks in the
    same order, so the loser sees InvalidStateError rather than a deadlock.
    """
    for _ in range(5):
        shared = book("1000", "4000", "10.00", post=False)
        other = book("1000", "4000", "20.00", post=False)
        before = balance_of("1000")
        barrier = threading.Barrier(2)

        def single():
            try:
                barrier.wait()
                post_transaction(ctx, shared.id)
                return "single"
            except InvalidStateError:
                return None
            finally:
                connection.close()

        def batch():
            try:
                barrier.wait()
                post_batch_transactions(ctx, [other.id, shared.id])
                return "batch"
            except InvalidStateError:
                return None
            finally:
                connection.close()

        with ThreadPoolExecutor(max_workers=2) as pool:
            outcomes = [f.result() for f in [pool.submit(single), pool.submit(batch)]]

        winners = [o for o in outcomes if o]
        assert len(winners) == 1
        expected = Decimal("10.00") if winners == ["single"] else Decimal("30.00")
        assert balance_of("1000") - before == expected


@pytest.mark.postgres
@pytest.mark.skipif(connection.vendor == "sqlite", reason="needs row-level locking")
@pytest.mark.django_db(transaction=True)
def test_trial_balance_snapshots_stay_balanced(ctx, book):
    """Trial balances read while posts commit are always balanced."""
    pending = [
        book("1000", "4000", "10.00", post=False) if i % 2 else book("5000", "1000", "3.00", post=False)
        for i in range(20)
    ]
    done = threading.Event()
    snapshots = []

    def post(tx):
        try:
            post_transaction(ctx, tx.id)
        finally:
            connection.close()

    def read():
        try:
            while not done.is_set():
                snapshots.append(get_trial_balance(ctx))
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=4) as pool:
        reader = pool.submit(read)
        list(pool.map(post, pending))
        done.set()
        reader.result()

    snapshots.append(get_trial_balance(ctx))
    assert all(s["total_debits"] == s["total_credits"] for s in snapshots)
    assert all(s["is_balanced"] for s in snapshots)
    final = snapshots[-1]
    assert final["total_debits"] == Decimal("100.00")
