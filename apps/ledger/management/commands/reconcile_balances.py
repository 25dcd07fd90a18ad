"""
Management command to rebuild partner and pairwise balances from history.

Usage:
    python manage.py reconcile_balances
    python manage.py reconcile_balances --dry-run
"""

from django.core.management.base import BaseCommand, CommandError
from apps.ledger.services import (
    find_balance_drift,
    reconcile_all_balances,
    StorageError,
)


class Command(BaseCommand):
    help = 'Recompute every stored balance from sales and approved transactions'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show drift without making changes',
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            drift = find_balance_drift()
            if not drift['partners'] and not drift['pairs']:
                self.stdout.write(self.style.SUCCESS('No drift found. All balances match history.'))
                return

            for item in drift['partners']:
                self.stdout.write(
                    f"  - {item['email']}: stored {item['stored']}, expected {item['expected']}"
                )
            for item in drift['pairs']:
                self.stdout.write(
                    f"  - pair {item['partner_a_id']} / {item['partner_b_id']}: "
                    f"stored {item['stored']}, expected {item['expected']}"
                )
            self.stdout.write(self.style.WARNING('\n--dry-run mode: No changes made.'))
            return

        try:
            report = reconcile_all_balances()
        except StorageError as e:
            raise CommandError(str(e)) from e

        corrections = len(report['partner_corrections']) + len(report['pairwise_corrections'])
        for item in report['partner_corrections']:
            self.stdout.write(f"  - {item['email']}: {item['previous']} -> {item['corrected']}")
        for item in report['pairwise_corrections']:
            self.stdout.write(
                f"  - pair {item['partner_a_id']} / {item['partner_b_id']}: "
                f"{item['previous']} -> {item['corrected']}"
            )
        self.stdout.write(self.style.SUCCESS(
            f"Reconciled {report['partners_checked']} partner(s), applied {corrections} correction(s)."
        ))
