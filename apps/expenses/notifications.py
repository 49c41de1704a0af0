"""
Expense notifications.

Every helper schedules its sends with transaction.on_commit so that nothing
is sent for a transition that rolls back, and a failed send never undoes
a committed transition.
"""

import logging

from django.db import transaction
from django.db.models import Q

from apps.accounts.models import User, Role, UserStatus
from apps.notifications.mailer import send_email
from apps.notifications.sms import (
    send_sms,
    expense_submitted_sms,
    expense_approved_sms,
    expense_denied_sms,
    expense_paid_sms,
)
from apps.notifications.templates import (
    expense_submitted_email,
    expense_approved_email,
    expense_denied_email,
    expense_paid_email,
    expense_change_requested_by_admin_email,
    expense_change_requested_by_requester_email,
)

logger = logging.getLogger(__name__)


def get_campus_approvers(campus):
    """Active admins plus active campus pastors of the given campus."""
    return User.objects.filter(status=UserStatus.ACTIVE).filter(
        Q(role=Role.ADMIN) | Q(role=Role.CAMPUS_PASTOR, campus=campus)
    )


def _text_user(user, message):
    if user.phone:
        send_sms(message, user.phone)


def notify_expense_submitted(expense):
    def _send():
        requester_name = expense.requester.get_display_name()
        urgency_label = expense.get_urgency_display()
        sent = failed = 0
        for approver in get_campus_approvers(expense.campus):
            template = expense_submitted_email(
                approver_name=approver.get_display_name(),
                title=expense.title,
                amount_cents=expense.amount_cents,
                requester_name=requester_name,
                urgency_label=urgency_label,
            )
            if send_email(template, approver.email):
                sent += 1
            else:
                failed += 1
            _text_user(approver, expense_submitted_sms(expense.title, expense.amount_cents, requester_name))
        if failed:
            logger.warning(
                "Failed to send %s of %s submission emails for expense %s",
                failed, sent + failed, expense.id
            )

    transaction.on_commit(_send, robust=True)


def notify_expense_approved(expense, approver):
    def _send():
        requester = expense.requester
        send_email(
            expense_approved_email(
                requester_name=requester.get_display_name(),
                title=expense.title,
                amount_cents=expense.amount_cents,
                approver_name=approver.get_display_name(),
            ),
            requester.email,
        )
        _text_user(requester, expense_approved_sms(expense.title, expense.amount_cents))

    transaction.on_commit(_send, robust=True)


def notify_expense_denied(expense, reason):
    def _send():
        requester = expense.requester
        send_email(
            expense_denied_email(
                requester_name=requester.get_display_name(),
                title=expense.title,
                amount_cents=expense.amount_cents,
                reason=reason,
            ),
            requester.email,
        )
        _text_user(requester, expense_denied_sms(expense.title, expense.amount_cents, reason))

    transaction.on_commit(_send, robust=True)


def notify_expense_paid(expense, amount_cents):
    requester = expense.requester
    # Suspended requesters are not contacted
    if requester.status != UserStatus.ACTIVE:
        return

    def _send():
        send_email(
            expense_paid_email(
                requester_name=requester.get_display_name(),
                title=expense.title,
                amount_cents=amount_cents,
                report_required=expense.report_required,
            ),
            requester.email,
        )
        _text_user(requester, expense_paid_sms(expense.title, amount_cents))

    transaction.on_commit(_send, robust=True)


def notify_admin_change_request(expense, admin, comment):
    def _send():
        send_email(
            expense_change_requested_by_admin_email(
                requester_name=expense.requester.get_display_name(),
                title=expense.title,
                comment=comment,
                admin_name=admin.get_display_name(),
            ),
            expense.requester.email,
        )

    transaction.on_commit(_send, robust=True)


def notify_requester_change_request(expense, comment):
    def _send():
        requester_name = expense.requester.get_display_name()
        for approver in get_campus_approvers(expense.campus):
            send_email(
                expense_change_requested_by_requester_email(
                    approver_name=approver.get_display_name(),
                    title=expense.title,
                    requester_name=requester_name,
                    comment=comment,
                ),
                approver.email,
            )

    transaction.on_commit(_send, robust=True)
