"""
Management command to generate pending transactions from due recurring rules.

Meant to run once a day from cron.

Usage:
    python manage.py run_recurring_transactions
    python manage.py run_recurring_transactions --date 2025-07-01
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError
from apps.ledger.services import run_due_rules, StorageError


class Command(BaseCommand):
    help = 'Create pending personal transactions for every due recurring rule'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            type=date.fromisoformat,
            default=None,
            help='Run as if today were this date (YYYY-MM-DD)',
        )

    def handle(self, *args, **options):
        try:
            created = run_due_rules(today=options['date'])
        except StorageError as e:
            raise CommandError(str(e)) from e

        for txn in created:
            self.stdout.write(
                f'  - {txn.transaction_date} | {txn.from_partner_id} -> {txn.to_partner_id} | {txn.amount}'
            )
        self.stdout.write(self.style.SUCCESS(f'Created {len(created)} pending transaction(s).'))
