"""
Management command to remind admins about expenses waiting for review.

Meant to run from cron.

Usage:
    python manage.py send_reminders
    python manage.py send_reminders --hours 24
"""

from django.core.management.base import BaseCommand

from apps.expenses.services.reminders import get_stale_expenses, send_pending_reminders


class Command(BaseCommand):
    help = 'Email active admins the number of pending expense requests'

    def add_arguments(self, parser):
        parser.add_argument(
            '--hours',
            type=int,
            default=None,
            help='Only remind when an expense has waited at least this long (default REMINDER_HOURS)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be sent without sending',
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            stale = get_stale_expenses(hours=options['hours'])
            self.stdout.write(f'\nFound {stale.count()} stale expense(s):\n')
            for expense in stale.select_related('requester'):
                self.stdout.write(
                    f'  - {expense.title} | ${expense.amount_cents / 100:.2f} | '
                    f'{expense.requester.email} | {expense.created_at:%Y-%m-%d}'
                )
            self.stdout.write(self.style.WARNING('\n--dry-run mode: No reminders sent.'))
            return

        result = send_pending_reminders(hours=options['hours'])

        if result['stale_count'] == 0:
            self.stdout.write(self.style.SUCCESS('No stale expenses. No reminders sent.'))
            return

        self.stdout.write(
            self.style.SUCCESS(
                f"Reminded {result['notified']} admin(s) about {result['pending_count']} pending expense(s)."
            )
        )
