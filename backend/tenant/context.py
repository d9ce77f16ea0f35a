"""
Ledger context passed explicitly into every ledger operation.

Long-lived services never capture tenant or region state. Instead every
command, query and engine function receives a LedgerContext as its first
argument, the same way the request actor used to be threaded through
commands.

Usage:
    ctx = build_context(tenant)          # raises ConfigNotFound early
    create_account(ctx, code="1000", name="Cash", account_type="ASSET")

    # In API views
    ctx = resolve_context(request)
"""
from dataclasses import dataclass

from django.core.exceptions import ValidationError

from regional import RegionalConfig, get_config
from tenant.models import Tenant


TENANT_HEADER = "X-Tenant-ID"


@dataclass(frozen=True)
class LedgerContext:
    """
    Immutable context for one tenant's books.

    Attributes:
        tenant: The tenant whose ledger is being read or written
        config: The tenant's regional configuration, resolved once
        actor: Free-text label of who is acting (user email, service name)
    """
    tenant: Tenant
    config: RegionalConfig
    actor: str = "system"

    @property
    def tenant_id(self) -> int:
        return self.tenant.id

    @property
    def region(self) -> str:
        return self.config.region

    @property
    def currency(self) -> str:
        return self.config.currency.code


def build_context(tenant: Tenant, actor: str = "system") -> LedgerContext:
    """
    Build the context for a tenant.

    Raises:
        ConfigNotFound: If the tenant's region has no configuration.
    """
    return LedgerContext(tenant=tenant, config=get_config(tenant.region), actor=actor)


class TenantNotResolved(Exception):
    """Raised when a request does not identify an active tenant."""


def resolve_context(request) -> LedgerContext:
    """
    Build the LedgerContext for an API request.

    Authentication happens upstream; the gateway forwards the tenant's
    public id in the X-Tenant-ID header.

    Raises:
        TenantNotResolved: If the header is missing or names no active tenant
        ConfigNotFound: If the tenant's region has no configuration
    """
    public_id = request.headers.get(TENANT_HEADER)
    if not public_id:
        raise TenantNotResolved(f"Missing {TENANT_HEADER} header.")

    try:
        tenant = Tenant.objects.get(public_id=public_id, is_active=True)
    except (Tenant.DoesNotExist, ValidationError, ValueError):
        raise TenantNotResolved("Unknown or inactive tenant.")

    user = getattr(request, "user", None)
    actor = getattr(user, "email", "") or request.headers.get("X-Actor", "api")
    return build_context(tenant, actor=actor)
