"""
Management command to e-mail reminders for payments due soon.

Meant to run once a day (the HTTP cron endpoint does the same).

Usage:
    python manage.py send_payment_reminders
    python manage.py send_payment_reminders --days 7 --dry-run
"""

from django.core.management.base import BaseCommand

from apps.payments.services import send_payment_reminders


class Command(BaseCommand):
    help = 'Send reminders for open payments due in a few days'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=None,
            help='Days before the due date (default: PAYMENT_REMINDER_DAYS_AHEAD)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Count reminders without sending them',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        result = send_payment_reminders(days_ahead=options['days'], dry_run=dry_run)

        self.stdout.write(
            f"Payments due {result['reminder_date']}: "
            f"{result['sent']} to send, {result['skipped']} skipped, {result['errors']} failed"
        )

        if dry_run:
            self.stdout.write(self.style.WARNING('--dry-run mode: No e-mails sent.'))
        elif result['errors']:
            self.stdout.write(self.style.WARNING(f"{result['errors']} reminder(s) could not be sent."))
        else:
            self.stdout.write(self.style.SUCCESS(f"✓ Sent {result['sent']} reminder(s)."))
