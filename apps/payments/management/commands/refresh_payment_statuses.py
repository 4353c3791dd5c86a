"""
Management command to re-derive the status of open payments.

Payments whose due date has passed become overdue.

Usage:
    python manage.py refresh_payment_statuses
"""

from django.core.management.base import BaseCommand

from apps.payments.services import refresh_overdue_statuses


class Command(BaseCommand):
    help = 'Re-derive the status of every open payment'

    def handle(self, *args, **options):
        changed = refresh_overdue_statuses()
        if changed:
            self.stdout.write(self.style.SUCCESS(f'✓ Updated {changed} payment(s).'))
        else:
            self.stdout.write(self.style.SUCCESS('All payment statuses are up to date.'))
