"""
Per-item review of submitted expenses.

Each approver holds at most one live decision per item. Decisions can only
be made while the parent expense is SUBMITTED.
"""

from typing import Optional
from uuid import UUID
import logging

from django.db import transaction

from apps.expenses.models import (
    ExpenseItem,
    ExpenseItemApproval,
    ExpenseStatus,
    ApprovalStatus,
)

from .exceptions import ExpenseItemNotFoundError, InvalidStatusTransitionError

logger = logging.getLogger(__name__)


def _get_reviewable_item(item_id: UUID) -> ExpenseItem:
    try:
        item = ExpenseItem.objects.select_related('expense').get(id=item_id)
    except ExpenseItem.DoesNotExist:
        raise ExpenseItemNotFoundError("Expense item not found")

    if item.expense.status != ExpenseStatus.SUBMITTED:
        raise InvalidStatusTransitionError("Expense request is not in submitted status")
    return item


def _decide(item, approver, status, comment=None, approved_amount_cents=None):
    approval, created = ExpenseItemApproval.objects.update_or_create(
        item=item,
        approver=approver,
        defaults={
            'status': status,
            'comment': comment or None,
            'approved_amount_cents': approved_amount_cents,
        },
    )
    logger.info(
        "Item %s %s by %s (%s)",
        item.id, status, approver.id, 'new' if created else 'updated'
    )
    return approval


@transaction.atomic
def approve_item(
    *,
    item_id: UUID,
    approver,
    comment: Optional[str] = None,
    approved_amount_cents: Optional[int] = None
) -> ExpenseItemApproval:
    """
    Approve an item, optionally for less than its amount.

    Raises:
        ExpenseItemNotFoundError: If the item does not exist
        InvalidStatusTransitionError: If the expense is not SUBMITTED
    """
    item = _get_reviewable_item(item_id)
    if approved_amount_cents is None:
        approved_amount_cents = item.amount_cents
    return _decide(item, approver, ApprovalStatus.APPROVED, comment, approved_amount_cents)


@transaction.atomic
def deny_item(*, item_id: UUID, approver, comment: str) -> ExpenseItemApproval:
    item = _get_reviewable_item(item_id)
    return _decide(item, approver, ApprovalStatus.DENIED, comment)


@transaction.atomic
def request_item_change(*, item_id: UUID, approver, comment: str) -> ExpenseItemApproval:
    item = _get_reviewable_item(item_id)
    return _decide(item, approver, ApprovalStatus.CHANGE_REQUESTED, comment)


@transaction.atomic
def undo_item_approval(*, item_id: UUID, approver) -> int:
    """
    Remove the approver's own decision on an item.

    Returns:
        Number of decisions removed (0 or 1)
    """
    item = _get_reviewable_item(item_id)
    deleted, _ = ExpenseItemApproval.objects.filter(item=item, approver=approver).delete()
    return deleted


def update_item_category(*, item_id: UUID, category: Optional[str]) -> ExpenseItem:
    try:
        item = ExpenseItem.objects.get(id=item_id)
    except ExpenseItem.DoesNotExist:
        raise ExpenseItemNotFoundError("Expense item not found")

    item.category = category or None
    item.save(update_fields=['category'])
    return item
