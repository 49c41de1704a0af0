"""Report notifications, sent after the surrounding transaction commits."""

import logging

from django.db import transaction

from apps.accounts.models import User, Role, UserStatus
from apps.notifications.mailer import send_email
from apps.notifications.templates import (
    report_submitted_email,
    report_approved_email,
    report_change_requested_email,
)

logger = logging.getLogger(__name__)


def notify_report_submitted(report, submitted_by):
    def _send():
        admins = User.objects.filter(role=Role.ADMIN, status=UserStatus.ACTIVE)
        failed = 0
        for admin in admins:
            template = report_submitted_email(
                approver_name=admin.get_display_name(),
                report_title=report.title,
                expense_title=report.expense.title,
                requester_name=submitted_by.get_display_name(),
            )
            if not send_email(template, admin.email):
                failed += 1
        if failed:
            logger.warning("Failed to send %s report notification email(s) for report %s", failed, report.id)

    transaction.on_commit(_send, robust=True)


def notify_report_approved(report):
    def _send():
        requester = report.expense.requester
        send_email(
            report_approved_email(
                requester_name=requester.get_display_name(),
                report_title=report.title,
                expense_title=report.expense.title,
            ),
            requester.email,
        )

    transaction.on_commit(_send, robust=True)


def notify_report_change_requested(report, comment):
    def _send():
        requester = report.expense.requester
        send_email(
            report_change_requested_email(
                requester_name=requester.get_display_name(),
                report_title=report.title,
                comment=comment,
            ),
            requester.email,
        )

    transaction.on_commit(_send, robust=True)
