# events/emitter.py
"""
Event emission functions.

All audit events MUST be emitted through emit_event() to ensure:
1. Payload validation against canonical schemas (events/types.py)
2. Idempotency handling (one row per tenant + idempotency key)
3. Actor attribution from the LedgerContext

Call emit_event() inside the command's transaction.atomic block so the
event commits or rolls back together with the state change.
"""

from __future__ import annotations

import logging
from typing import Optional, Any, Dict, Union
from datetime import datetime

from django.db import IntegrityError, transaction
from django.utils import timezone

from events.models import BusinessEvent
from events.types import validate_event_payload, BaseEventData


logger = logging.getLogger(__name__)


def emit_event(
    ctx,
    event_type: str,
    aggregate_type: str,
    aggregate_id: Any,
    data: Union[Dict[str, Any], BaseEventData],
    *,
    idempotency_key: str,
    occurred_at: Optional[datetime] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> BusinessEvent:
    """
    Emit an audit event for the context's tenant.

    Args:
        ctx: LedgerContext of the tenant
        event_type: Registered event type (EventTypes.*)
        aggregate_type: Entity type, e.g. "Transaction"
        aggregate_id: Entity identifier (public id)
        data: Payload dict or BaseEventData instance
        idempotency_key: Unique key per tenant; re-emitting returns the existing event
        occurred_at: When the change happened (defaults to now)
        metadata: Optional free-form context

    Returns:
        The created (or existing, if idempotent) BusinessEvent

    Raises:
        InvalidEventPayload: If data doesn't match the schema
        ValueError: If idempotency_key is missing
    """
    if not idempotency_key or not str(idempotency_key).strip():
        raise ValueError("idempotency_key is required")

    if isinstance(data, BaseEventData):
        data = data.to_dict()

    validate_event_payload(event_type, data)

    existing = BusinessEvent.objects.filter(
        tenant=ctx.tenant, idempotency_key=idempotency_key,
    ).first()
    if existing:
        return existing

    try:
        with transaction.atomic():
            event = BusinessEvent.objects.create(
                tenant=ctx.tenant,
                event_type=event_type,
                aggregate_type=aggregate_type,
                aggregate_id=str(aggregate_id),
                idempotency_key=idempotency_key,
                data=data,
                metadata=metadata or {},
                actor=ctx.actor,
                occurred_at=occurred_at or timezone.now(),
            )
    except IntegrityError:
        # Another worker inserted the same key between the check and the insert
        existing = BusinessEvent.objects.filter(
            tenant=ctx.tenant, idempotency_key=idempotency_key,
        ).first()
        if existing:
            return existing
        raise

    logger.debug(
        "Event emitted",
        extra={
            "event_type": event_type,
            "aggregate_id": str(aggregate_id),
            "tenant_id": ctx.tenant_id,
        },
    )
    return event
