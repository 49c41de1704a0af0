"""
Expense approval workflow.

Every function locks the expense row, checks that its current status
allows the action, applies the change together with a StatusEvent, and
schedules notifications for after the commit.
"""

from typing import Optional, Tuple
from uuid import UUID
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.expenses.models import (
    ExpenseRequest,
    ExpenseStatus,
    ExpenseNote,
    Approval,
    ApprovalStatus,
)
from apps.expenses.notifications import (
    notify_expense_approved,
    notify_expense_denied,
    notify_admin_change_request,
    notify_requester_change_request,
)

from .exceptions import ExpensePermissionError, InvalidStatusTransitionError
from .expense_queries import get_expense_for_update
from .payment import calculate_approved_amount
from .status_tracking import change_status

logger = logging.getLogger(__name__)

APPROVABLE_STATUSES = (ExpenseStatus.SUBMITTED, ExpenseStatus.APPROVED, ExpenseStatus.DENIED)
UNDOABLE_STATUSES = (ExpenseStatus.APPROVED, ExpenseStatus.DENIED)
ADMIN_SET_STATUSES = (ExpenseStatus.PARTIALLY_APPROVED, ExpenseStatus.CHANGE_REQUESTED)
CLOSABLE_STATUSES = (
    ExpenseStatus.APPROVED,
    ExpenseStatus.PARTIALLY_APPROVED,
    ExpenseStatus.PAID,
    ExpenseStatus.EXPENSE_REPORT_REQUESTED,
)

STATUS_REASONS = {
    ExpenseStatus.PARTIALLY_APPROVED: 'Mixed item approvals - some approved, some denied',
    ExpenseStatus.CHANGE_REQUESTED: 'All items require changes',
}


def _record_decision(expense, approver, status, comment=None, stage=None):
    """Replace the approver's live decision on the expense."""
    defaults = {
        'status': status,
        'comment': comment or None,
        'decided_at': timezone.now(),
    }
    if stage is not None:
        defaults['stage'] = stage
    approval, _ = Approval.objects.update_or_create(
        expense=expense,
        approver=approver,
        defaults=defaults,
    )
    return approval


@transaction.atomic
def approve_expense(
    *,
    expense_id: UUID,
    approver,
    stage: int = 1,
    comment: Optional[str] = None
) -> ExpenseRequest:
    """
    Record an approval and approve the expense.

    With two-stage approval enabled a stage 1 approval is recorded but the
    expense stays SUBMITTED until a stage 2 approval arrives.

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        InvalidStatusTransitionError: If the expense is not SUBMITTED, APPROVED or DENIED
    """
    expense = get_expense_for_update(expense_id)

    if expense.status not in APPROVABLE_STATUSES:
        raise InvalidStatusTransitionError(
            "Expense request must be in submitted, approved, or denied status"
        )

    _record_decision(expense, approver, ApprovalStatus.APPROVED, comment, stage=stage)

    if settings.EXPENSE_REQUIRE_TWO_STAGE and stage == 1:
        new_status = ExpenseStatus.SUBMITTED
        reason = comment or 'Stage 1 approval recorded'
    else:
        new_status = ExpenseStatus.APPROVED
        reason = comment

    change_status(expense=expense, to_status=new_status, actor=approver, reason=reason)

    if new_status == ExpenseStatus.APPROVED:
        notify_expense_approved(expense, approver)

    return expense


@transaction.atomic
def deny_expense(*, expense_id: UUID, approver, reason: str) -> ExpenseRequest:
    """
    Deny a submitted expense.

    The denial is stored as the approver's decision so that undo clears it.

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        InvalidStatusTransitionError: If the expense is not SUBMITTED
    """
    expense = get_expense_for_update(expense_id)

    if expense.status != ExpenseStatus.SUBMITTED:
        raise InvalidStatusTransitionError("Expense request is not in submitted status")

    _record_decision(expense, approver, ApprovalStatus.DENIED, reason)
    change_status(expense=expense, to_status=ExpenseStatus.DENIED, actor=approver, reason=reason)

    notify_expense_denied(expense, reason)
    return expense


@transaction.atomic
def undo_expense_approval(*, expense_id: UUID, actor) -> ExpenseRequest:
    """
    Return an approved or denied expense to SUBMITTED.

    All expense-level decisions are removed; item decisions are kept.

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        InvalidStatusTransitionError: If the expense is not APPROVED or DENIED
    """
    expense = get_expense_for_update(expense_id)

    if expense.status not in UNDOABLE_STATUSES:
        raise InvalidStatusTransitionError(
            "Can only undo approval/denial for expenses that are approved or denied"
        )

    expense.approvals.all().delete()
    change_status(
        expense=expense,
        to_status=ExpenseStatus.SUBMITTED,
        actor=actor,
        reason='Approval/denial undone',
    )
    return expense


@transaction.atomic
def update_expense_status(*, expense_id: UUID, actor, status: str) -> ExpenseRequest:
    """
    Set a submitted expense to PARTIALLY_APPROVED or CHANGE_REQUESTED after item review.

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        InvalidStatusTransitionError: If the expense is not SUBMITTED
        ValueError: If status is not one of the two allowed targets
    """
    if status not in ADMIN_SET_STATUSES:
        raise ValueError(f"Invalid status. Must be one of: {list(ADMIN_SET_STATUSES)}")

    expense = get_expense_for_update(expense_id)

    if expense.status != ExpenseStatus.SUBMITTED:
        raise InvalidStatusTransitionError("Can only update status of submitted expenses")

    change_status(expense=expense, to_status=status, actor=actor, reason=STATUS_REASONS[status])
    return expense


@transaction.atomic
def admin_request_change(*, expense_id: UUID, admin, comment: str) -> ExpenseRequest:
    """
    Send a submitted or approved expense back to the requester for edits.

    The comment is kept both as an expense note and as the event reason.

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        InvalidStatusTransitionError: If the expense is not SUBMITTED or APPROVED
    """
    expense = get_expense_for_update(expense_id)

    if expense.status not in (ExpenseStatus.SUBMITTED, ExpenseStatus.APPROVED):
        raise InvalidStatusTransitionError(
            "Can only request changes to submitted or approved expenses"
        )

    ExpenseNote.objects.create(
        expense=expense,
        author=admin,
        note=f"Change Requested: {comment}",
    )
    change_status(
        expense=expense,
        to_status=ExpenseStatus.CHANGE_REQUESTED,
        actor=admin,
        reason=comment,
    )

    notify_admin_change_request(expense, admin, comment)
    return expense


@transaction.atomic
def request_expense_change(
    *,
    expense_id: UUID,
    requester,
    comment: Optional[str] = None
) -> ExpenseRequest:
    """
    Let a requester reopen their own approved expense, e.g. to add items.

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        ExpensePermissionError: If the user is not the requester
        InvalidStatusTransitionError: If the expense is not APPROVED
    """
    expense = get_expense_for_update(expense_id)

    if expense.requester_id != requester.id:
        raise ExpensePermissionError("You can only request changes to your own expense requests")

    if expense.status != ExpenseStatus.APPROVED:
        raise InvalidStatusTransitionError("Change requests can only be made for approved expenses")

    comment = comment or 'Requester requested to add more items'
    change_status(
        expense=expense,
        to_status=ExpenseStatus.CHANGE_REQUESTED,
        actor=requester,
        reason=comment,
    )

    notify_requester_change_request(expense, comment)
    return expense


@transaction.atomic
def close_expense(*, expense_id: UUID, actor) -> Tuple[ExpenseRequest, Optional[int]]:
    """
    Close an expense without waiting for a report.

    An unpaid expense is stamped paid with its approved amount.

    Returns:
        (expense, payment_amount_cents) where the amount is None when the
        expense had already been paid

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        InvalidStatusTransitionError: If the expense is not approved, paid or awaiting a report
    """
    expense = get_expense_for_update(expense_id)

    if expense.status not in CLOSABLE_STATUSES:
        raise InvalidStatusTransitionError(
            "Expense request must be approved, paid, or expense report requested to be closed"
        )

    payment_amount_cents = None
    update_fields = ['report_required']
    if expense.paid_at is None:
        payment_amount_cents = calculate_approved_amount(expense)
        expense.paid_at = timezone.now()
        expense.paid_amount_cents = payment_amount_cents
        update_fields += ['paid_at', 'paid_amount_cents']

    expense.report_required = False
    change_status(
        expense=expense,
        to_status=ExpenseStatus.CLOSED,
        actor=actor,
        reason='Expense closed by admin (report requirement bypassed)',
        update_fields=update_fields,
    )
    return expense, payment_amount_cents
