"""Reminders to admins about expenses waiting for review."""

from datetime import datetime, timedelta
from typing import Optional
import logging

from django.conf import settings
from django.utils import timezone

from apps.accounts.models import User, Role, UserStatus
from apps.expenses.models import ExpenseRequest, ExpenseStatus
from apps.notifications.mailer import send_email
from apps.notifications.sms import send_sms, reminder_sms
from apps.notifications.templates import reminder_email

logger = logging.getLogger(__name__)


def get_stale_expenses(*, hours: Optional[int] = None, now: Optional[datetime] = None):
    """SUBMITTED expenses created at least `hours` ago (default REMINDER_HOURS)."""
    hours = settings.REMINDER_HOURS if hours is None else hours
    cutoff = (now or timezone.now()) - timedelta(hours=hours)
    return ExpenseRequest.objects.filter(status=ExpenseStatus.SUBMITTED, created_at__lte=cutoff)


def send_pending_reminders(*, hours: Optional[int] = None, now: Optional[datetime] = None) -> dict:
    """
    Email every active admin the number of submitted expenses.

    Nothing is sent unless at least one submitted expense is older than the
    reminder window. Campus pastors are not reminded.

    Returns:
        dict with stale_count, pending_count and notified (admins emailed)
    """
    stale_count = get_stale_expenses(hours=hours, now=now).count()
    pending_count = ExpenseRequest.objects.filter(status=ExpenseStatus.SUBMITTED).count()

    result = {'stale_count': stale_count, 'pending_count': pending_count, 'notified': 0}
    if stale_count == 0:
        return result

    admins = User.objects.filter(role=Role.ADMIN, status=UserStatus.ACTIVE)
    for admin in admins:
        template = reminder_email(approver_name=admin.get_display_name(), pending_count=pending_count)
        if send_email(template, admin.email):
            result['notified'] += 1
        if admin.phone:
            send_sms(reminder_sms(pending_count), admin.phone)

    logger.info(
        "Sent pending-expense reminders to %s admin(s) (%s stale, %s pending)",
        result['notified'], stale_count, pending_count
    )
    return result
