"""
Create the regional standard chart of accounts for a tenant.

Usage:
    python manage.py seed_chart_of_accounts <tenant-slug>
    python manage.py seed_chart_of_accounts <tenant-slug> --dry-run

Codes the tenant already has are skipped, so the command is idempotent.
"""
from django.core.management.base import BaseCommand, CommandError

from accounting.commands import seed_chart_of_accounts
from accounting.exceptions import LedgerError
from accounting.models import Account
from tenant.context import build_context
from tenant.models import Tenant


class Command(BaseCommand):
    help = "Create the region's standard chart of accounts for a tenant"

    def add_arguments(self, parser):
        parser.add_argument("tenant", help="Tenant slug")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be created without making changes",
        )

    def handle(self, *args, **options):
        try:
            tenant = Tenant.objects.get(slug=options["tenant"])
        except Tenant.DoesNotExist:
            raise CommandError(f"Tenant {options['tenant']!r} does not exist.")

        try:
            ctx = build_context(tenant, actor="manage.py")
        except LedgerError as exc:
            raise CommandError(str(exc))

        chart = ctx.config.accounting_standard.chart_of_accounts

        if options["dry_run"]:
            self.stdout.write(self.style.WARNING("DRY RUN - no changes will be made\n"))
            existing = set(
                Account.objects.filter(tenant=tenant).values_list("code", flat=True)
            )
            missing = [code for code in sorted(chart) if code not in existing]
            for code in missing:
                self.stdout.write(f"  WOULD CREATE: {code} {chart[code].name}")
            self.stdout.write(f"\n{len(missing)} accounts would be created.")
            return

        result = seed_chart_of_accounts(ctx)
        for account in result.data:
            self.stdout.write(self.style.SUCCESS(f"  CREATED: {account.code} {account.name}"))

        self.stdout.write(
            self.style.SUCCESS(
                f"\nDone. {len(result.data)} created, "
                f"{len(chart) - len(result.data)} already present "
                f"({ctx.config.accounting_standard.code}, {ctx.region})."
            )
        )
