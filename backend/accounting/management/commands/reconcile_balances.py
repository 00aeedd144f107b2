# accounting/management/commands/reconcile_balances.py
"""
Management command to rebuild account balances from movements.

Account.balance is a cache; the active movements are the source of truth.
This is the maintenance tool for fixing drift left by manual balance
overrides or writes made outside the command layer.

Usage:
    # Report and fix every drifted account
    python manage.py reconcile_balances

    # One account only
    python manage.py reconcile_balances --account 42

    # Show what would change without writing
    python manage.py reconcile_balances --dry-run
"""

import logging

from django.core.management.base import BaseCommand, CommandError

from accounting.balances import recalculate_account_balance, recalculate_all_balances

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Recalculate cached account balances."""

    help = "Recalculate account balances from their active movements"

    def add_arguments(self, parser):
        parser.add_argument(
            "--account",
            type=int,
            help="ID of a single account to reconcile",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would change without making changes",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]

        if options["account"] is not None:
            result = recalculate_account_balance(options["account"], dry_run=dry_run)
            if not result.success:
                raise CommandError(result.error)
            report = result.data
            rows = [report] if report["difference"] else []
        else:
            result = recalculate_all_balances(dry_run=dry_run)
            if not result.success:
                raise CommandError(result.error)
            rows = result.data

        if not rows:
            self.stdout.write(self.style.SUCCESS("All balances match their movements."))
            return

        self.stdout.write(f"\n{'ID':>6}  {'Account':<30} {'Stored':>15} {'Computed':>15} {'Difference':>15}")
        self.stdout.write("-" * 86)
        for row in rows:
            self.stdout.write(
                f"{row['account_id']:>6}  {row['account_name'][:30]:<30} "
                f"{row['stored']:>15} {row['computed']:>15} {row['difference']:>15}"
            )

        if dry_run:
            self.stdout.write(
                self.style.WARNING(f"\n[DRY RUN] {len(rows)} account(s) drifted. No changes made.")
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(f"\n{len(rows)} account(s) corrected.")
            )
