# tests/test_events.py
"""
Tests for the audit event store.

Tests cover:
- Commands emit typed events inside their transaction
- Idempotency keys
- Payload validation
- Immutability
"""

from datetime import date

import pytest

from accounting.commands import create_transaction, void_transaction
from accounting.exceptions import UnbalancedTransactionError
from events.emitter import emit_event
from events.models import BusinessEvent
from events.types import EventTypes, InvalidEventPayload, ReportGeneratedData


def _report_payload(report_id="r-1"):
    return ReportGeneratedData(
        report_public_id=report_id,
        report_type="PROFIT_LOSS",
        start_date="2024-04-01",
        end_date="2024-04-30",
    )


@pytest.mark.django_db
class TestCommandEvents:

    def test_lifecycle_events(self, ctx, accounts, book):
        tx = book("1000", "4000", "100.00", on=date(2024, 5, 1))
        void_transaction(ctx, tx.id)

        events = {
            e.event_type: e
            for e in BusinessEvent.objects.filter(
                tenant=ctx.tenant, aggregate_type="Transaction", aggregate_id=str(tx.public_id),
            )
        }

        assert set(events) == {
            EventTypes.TRANSACTION_CREATED,
            EventTypes.TRANSACTION_POSTED,
            EventTypes.TRANSACTION_VOIDED,
        }
        posted = events[EventTypes.TRANSACTION_POSTED]
        assert posted.actor == "finance@rosewood.test"
        assert posted.data["balance_changes"] == {
            str(accounts["1000"].public_id): "100.00",
            str(accounts["4000"].public_id): "-100.00",
        }
        voided = events[EventTypes.TRANSACTION_VOIDED]
        assert voided.data["balance_changes"][str(accounts["1000"].public_id)] == "-100.00"

    def test_created_event_lists_entries(self, ctx, book):
        tx = book("1000", "4000", "42.00", post=False)

        event = BusinessEvent.objects.get(
            tenant=ctx.tenant, event_type=EventTypes.TRANSACTION_CREATED, aggregate_id=str(tx.public_id),
        )
        assert event.data["total_debit"] == "42.00"
        assert [e["account_code"] for e in event.data["entries"]] == ["1000", "4000"]

    def test_failed_command_leaves_no_event(self, ctx, accounts):
        with pytest.raises(UnbalancedTransactionError):
            create_transaction(
                ctx,
                date="2024-05-01",
                description="Unbalanced",
                entries=[
                    {"account_id": accounts["1000"].id, "debit": "10"},
                    {"account_id": accounts["4000"].id, "credit": "9"},
                ],
            )

        assert not BusinessEvent.objects.filter(event_type=EventTypes.TRANSACTION_CREATED).exists()


@pytest.mark.django_db
class TestEmitEvent:

    def test_idempotency_key_returns_existing(self, ctx):
        first = emit_event(
            ctx, EventTypes.REPORT_GENERATED, "FinancialReport", "r-1",
            _report_payload(), idempotency_key="report.generated:r-1",
        )
        second = emit_event(
            ctx, EventTypes.REPORT_GENERATED, "FinancialReport", "r-1",
            _report_payload(), idempotency_key="report.generated:r-1",
        )

        assert first.id == second.id
        assert BusinessEvent.objects.filter(tenant=ctx.tenant).count() == 1

    def test_same_key_in_two_tenants(self, ctx, other_ctx):
        emit_event(
            ctx, EventTypes.REPORT_GENERATED, "FinancialReport", "r-1",
            _report_payload(), idempotency_key="report.generated:r-1",
        )
        emit_event(
            other_ctx, EventTypes.REPORT_GENERATED, "FinancialReport", "r-1",
            _report_payload(), idempotency_key="report.generated:r-1",
        )

        assert BusinessEvent.objects.count() == 2

    def test_missing_key(self, ctx):
        with pytest.raises(ValueError):
            emit_event(
                ctx, EventTypes.REPORT_GENERATED, "FinancialReport", "r-1",
                _report_payload(), idempotency_key="",
            )

    def test_invalid_payload(self, ctx):
        with pytest.raises(InvalidEventPayload) as exc_info:
            emit_event(
                ctx, EventTypes.REPORT_GENERATED, "FinancialReport", "r-1",
                {"report_public_id": "r-1", "colour": "blue"},
                idempotency_key="report.generated:r-1",
            )

        errors = "\n".join(exc_info.value.errors)
        assert "Missing required field: 'report_type'" in errors
        assert "Unexpected fields" in errors

    def test_unregistered_type(self, ctx):
        with pytest.raises(ValueError, match="No schema registered"):
            emit_event(
                ctx, "report.shredded", "FinancialReport", "r-1", {},
                idempotency_key="report.shredded:r-1",
            )

    def test_events_are_immutable(self, ctx):
        event = emit_event(
            ctx, EventTypes.REPORT_GENERATED, "FinancialReport", "r-1",
            _report_payload(), idempotency_key="report.generated:r-1",
        )

        event.actor = "someone else"
        with pytest.raises(ValueError):
            event.save()
        with pytest.raises(ValueError):
            event.delete()
