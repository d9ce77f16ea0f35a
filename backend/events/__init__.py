# events/__init__.py
"""
Events app - audit trail for CareLedger.

This app provides:
- BusinessEvent: Immutable event records
- emit_event: the single emission entry point
- Event type definitions with CANONICAL SCHEMAS

Usage:
    from events.emitter import emit_event
    from events.types import EventTypes, TransactionPostedData

    emit_event(
        ctx,
        EventTypes.TRANSACTION_POSTED,
        aggregate_type="Transaction",
        aggregate_id=tx.public_id,
        data=TransactionPostedData(...),
        idempotency_key=f"transaction.posted:{tx.public_id}",
    )
"""
