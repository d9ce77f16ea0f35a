# accounting/policies.py
"""
Business policy functions for ledger operations.

Policies answer: "Is this action allowed given the current state?"
They do NOT perform the action; that's the command's job.

Workflow Rules vs Model Invariants
==================================
Status transitions (PENDING -> POSTED -> VOIDED) are workflow rules and
are enforced HERE. The write barrier in accounting.models only decides
WHO may write ledger rows, not which transitions are legal.

Usage:
    allowed, reason = can_post_transaction(ctx, tx)
    if not allowed:
        raise InvalidStateError(tx.public_id, tx.status, Transaction.Status.PENDING)

Design Principles:
1. Policies are pure functions (no side effects)
2. Policies return (bool, str) tuples for clear error messages
3. Commands compose policies as needed
"""

from django.conf import settings


COMPLIANCE_ADVISORY = "advisory"
COMPLIANCE_BLOCKING = "blocking"


# =============================================================================
# Tenant Boundary Policies
# =============================================================================

def check_tenant_boundary(ctx, entity) -> bool:
    """
    Verify entity belongs to the context's tenant.
    This is the fundamental multi-tenant check.
    """
    return getattr(entity, "tenant_id", None) == ctx.tenant_id


# =============================================================================
# Account Policies
# =============================================================================

def can_post_to_account(account) -> tuple[bool, str]:
    """
    Check if transaction entries can reference this account.

    Rules:
    - Cannot use inactive accounts
    """
    if account.status != account.Status.ACTIVE:
        return False, f"Cannot post to inactive account: {account.code}"
    return True, ""


# =============================================================================
# Transaction Status Transition Policies (Workflow Rules)
# =============================================================================

def validate_status_transition(old_status, new_status) -> tuple[bool, str]:
    """
    Validate a status transition is allowed.

    Allowed transitions:
    - PENDING -> POSTED (posting)
    - POSTED -> VOIDED (voiding, terminal)
    """
    from accounting.models import Transaction

    allowed_transitions = {
        (Transaction.Status.PENDING, Transaction.Status.POSTED),
        (Transaction.Status.POSTED, Transaction.Status.VOIDED),
    }

    if (old_status, new_status) in allowed_transitions:
        return True, ""

    return False, f"Invalid status transition: {old_status} -> {new_status}"


def can_post_transaction(ctx, tx) -> tuple[bool, str]:
    """
    Check if a transaction can be posted.

    Rules:
    - Must belong to the context's tenant
    - Must be in PENDING status
    """
    if not check_tenant_boundary(ctx, tx):
        return False, "Cross-tenant action denied."

    from accounting.models import Transaction

    return validate_status_transition(tx.status, Transaction.Status.POSTED)


def can_void_transaction(ctx, tx) -> tuple[bool, str]:
    """
    Check if a transaction can be voided.

    Rules:
    - Must belong to the context's tenant
    - Must be in POSTED status; VOIDED is terminal
    """
    if not check_tenant_boundary(ctx, tx):
        return False, "Cross-tenant action denied."

    from accounting.models import Transaction

    return validate_status_transition(tx.status, Transaction.Status.VOIDED)


# =============================================================================
# Compliance Gate
# =============================================================================

def compliance_mode() -> str:
    mode = getattr(settings, "LEDGER_COMPLIANCE_MODE", COMPLIANCE_ADVISORY)
    return (mode or COMPLIANCE_ADVISORY).strip().lower()


def passes_compliance_gate(ctx, tx) -> tuple[bool, list[str]]:
    """
    Run the compliance checks a posting must pass in blocking mode.

    In advisory mode the gate is open and no checks run; callers that want
    advisory findings call compliance.engine.validate_transaction directly.

    Returns:
        (True, []) if posting may proceed
        (False, issues) if blocking mode found issues
    """
    if compliance_mode() != COMPLIANCE_BLOCKING:
        return True, []

    from compliance.engine import validate_transaction

    result = validate_transaction(ctx, tx)
    return result["valid"], result["issues"]
