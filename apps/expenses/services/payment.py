"""Payment of approved expenses."""

from datetime import datetime
from typing import Optional
from uuid import UUID
import logging

from django.db import transaction
from django.utils import timezone

from apps.expenses.models import ExpenseRequest, ExpenseStatus, ApprovalStatus
from apps.expenses.notifications import notify_expense_paid

from .exceptions import (
    AlreadyPaidError,
    InvalidStatusTransitionError,
    NoAdditionalPaymentError,
)
from .expense_queries import get_expense_for_update
from .status_tracking import change_status

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = (ExpenseStatus.APPROVED, ExpenseStatus.PARTIALLY_APPROVED)
REPAYABLE_STATUSES = (ExpenseStatus.PAID, ExpenseStatus.EXPENSE_REPORT_REQUESTED)


def approved_item_amount(item) -> int:
    """
    Approved amount of one item, or 0 when its latest decision is not an approval.

    Uses prefetched approvals when available.
    """
    approvals = sorted(item.approvals.all(), key=lambda a: a.updated_at, reverse=True)
    if not approvals or approvals[0].status != ApprovalStatus.APPROVED:
        return 0
    latest = approvals[0]
    if latest.approved_amount_cents is not None:
        return latest.approved_amount_cents
    return item.amount_cents


def calculate_approved_amount(expense: ExpenseRequest) -> int:
    """
    Amount owed for an expense.

    The sum of approved item amounts; an expense without items is owed in full.
    """
    items = list(expense.items.prefetch_related('approvals'))
    if not items:
        return expense.amount_cents
    return sum(approved_item_amount(item) for item in items)


def _additional_payment(expense: ExpenseRequest) -> int:
    """Overage from the latest report, less any donation; raises if nothing is owed."""
    report = expense.reports.order_by('-created_at').first()
    if report is None:
        raise AlreadyPaidError("Expense request has already been marked as paid")

    reported = report.total_actual_amount_cents or report.total_approved_amount_cents
    if not reported:
        raise NoAdditionalPaymentError(
            "No report found with spending amount. Cannot process additional payment."
        )

    overage = max(0, reported - (expense.paid_amount_cents or 0))
    adjusted = max(0, overage - (report.donation_amount_cents or 0))
    if adjusted <= 0:
        raise NoAdditionalPaymentError("No additional payment needed based on the latest report.")
    return adjusted


@transaction.atomic
def mark_expense_paid(
    *,
    expense_id: UUID,
    actor,
    report_required: bool = True,
    payment_date: Optional[datetime] = None,
    paid_by: Optional[str] = None
) -> dict:
    """
    Mark an approved expense as paid.

    A paid expense can be paid again only to cover an overage shown by its
    latest report; paid_amount_cents accumulates across payments.

    Args:
        expense_id: Expense to pay
        actor: User recording the payment
        report_required: Whether the requester must file a report afterwards
        payment_date: Date the money went out, defaults to now
        paid_by: Free-text payer reference

    Returns:
        dict with expense, payment_amount_cents, total_paid_amount_cents and is_repayment

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        AlreadyPaidError: If the expense was paid and no report asks for more
        NoAdditionalPaymentError: If the latest report shows nothing more is owed
        InvalidStatusTransitionError: If the expense has not been approved
    """
    expense = get_expense_for_update(expense_id)

    is_repayment = expense.status in REPAYABLE_STATUSES and expense.paid_at is not None
    if is_repayment:
        payment_amount = _additional_payment(expense)
    elif expense.status in PAYABLE_STATUSES:
        payment_amount = calculate_approved_amount(expense)
    elif expense.paid_at is not None:
        raise AlreadyPaidError("Expense request has already been marked as paid")
    else:
        raise InvalidStatusTransitionError("Expense request must be approved before marking as paid")

    now = timezone.now()
    if expense.paid_at is None:
        expense.paid_at = now
    expense.payment_date = payment_date or now
    expense.paid_by = paid_by or None
    expense.report_required = report_required
    expense.paid_amount_cents = (expense.paid_amount_cents or 0) + payment_amount

    new_status = ExpenseStatus.EXPENSE_REPORT_REQUESTED if report_required else ExpenseStatus.PAID
    if is_repayment:
        reason = f"Additional payment of ${payment_amount / 100:.2f}"
    else:
        reason = f"Paid ${payment_amount / 100:.2f}"

    change_status(
        expense=expense,
        to_status=new_status,
        actor=actor,
        reason=reason,
        update_fields=['paid_at', 'payment_date', 'paid_by', 'report_required', 'paid_amount_cents'],
    )

    notify_expense_paid(expense, payment_amount)

    logger.info("Expense %s paid %s cents (repayment=%s)", expense.id, payment_amount, is_repayment)
    return {
        'expense': expense,
        'payment_amount_cents': payment_amount,
        'total_paid_amount_cents': expense.paid_amount_cents,
        'is_repayment': is_repayment,
    }
