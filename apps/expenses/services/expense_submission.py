"""Expense submission and resubmission."""

from typing import Optional, List
from uuid import UUID
import logging

from django.db import transaction

from apps.accounts.permissions import Capability, has_capability
from apps.expenses.models import (
    ExpenseRequest,
    ExpenseItem,
    ExpenseStatus,
    Attachment,
)
from apps.expenses.notifications import notify_expense_submitted

from .exceptions import (
    ExpensePermissionError,
    InvalidStatusTransitionError,
    InvalidExpenseDataError,
)
from .expense_queries import get_expense_for_update
from .status_tracking import change_status, record_status_event

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = (ExpenseStatus.SUBMITTED, ExpenseStatus.CHANGE_REQUESTED)


def _create_items(expense: ExpenseRequest, items: List[dict]) -> List[ExpenseItem]:
    if not items:
        raise InvalidExpenseDataError("At least one item is required")
    # Created one by one so attachments can refer to them by position
    return [
        ExpenseItem.objects.create(
            expense=expense,
            description=item['description'],
            category=item.get('category') or None,
            quantity=item['quantity'],
            unit_price_cents=item['unit_price_cents'],
            amount_cents=item['amount_cents'],
        )
        for item in items
    ]


def _create_attachments(
    expense: ExpenseRequest,
    attachments: List[dict],
    items: List[ExpenseItem]
) -> None:
    """
    Store attachment metadata.

    An attachment may point at an item by its 1-based position in the
    submitted item list; positions outside the list are ignored.
    """
    rows = []
    for attachment in attachments:
        item = None
        position = attachment.get('item_index')
        if position and 1 <= position <= len(items):
            item = items[position - 1]
        rows.append(Attachment(
            expense=expense,
            item=item,
            public_id=attachment['public_id'],
            secure_url=attachment['secure_url'],
            mime_type=attachment['mime_type'],
        ))
    Attachment.objects.bulk_create(rows)


@transaction.atomic
def create_expense(
    *,
    requester,
    title: str,
    amount_cents: int,
    team: str,
    campus: str,
    description: str,
    category: str,
    items: List[dict],
    urgency: int = 2,
    notes: Optional[str] = None,
    event_date=None,
    event_name: Optional[str] = None,
    full_event_budget_cents: Optional[int] = None,
    pay_to_external: bool = False,
    payee_name: Optional[str] = None,
    payee_zelle: Optional[str] = None,
    attachments: Optional[List[dict]] = None
) -> ExpenseRequest:
    """
    Submit a new expense request.

    Writes the initial SUBMITTED status event and notifies the active admins
    and the campus pastors of the expense's campus once committed.

    Args:
        requester: Submitting user
        items: Line items (description, quantity, unit_price_cents,
            amount_cents, optional category); at least one
        attachments: Optional upload metadata (public_id, secure_url,
            mime_type, optional 1-based item_index)

    Returns:
        Created ExpenseRequest

    Raises:
        InvalidExpenseDataError: If amount is not positive or items are missing
    """
    if amount_cents <= 0:
        raise InvalidExpenseDataError("Amount must be greater than zero")

    expense = ExpenseRequest.objects.create(
        requester=requester,
        title=title.strip(),
        amount_cents=amount_cents,
        team=team,
        campus=campus,
        description=description,
        notes=notes or None,
        category=category,
        urgency=urgency,
        event_date=event_date,
        event_name=event_name or None,
        full_event_budget_cents=full_event_budget_cents or None,
        pay_to_external=pay_to_external,
        payee_name=(payee_name or None) if pay_to_external else None,
        payee_zelle=(payee_zelle or None) if pay_to_external else None,
        status=ExpenseStatus.SUBMITTED,
    )

    created_items = _create_items(expense, items)
    if attachments:
        _create_attachments(expense, attachments, created_items)

    record_status_event(
        expense=expense,
        from_status=None,
        to_status=ExpenseStatus.SUBMITTED,
        actor=requester,
    )

    notify_expense_submitted(expense)

    logger.info("Expense %s submitted by %s", expense.id, requester.id)
    return expense


@transaction.atomic
def update_expense(
    *,
    expense_id: UUID,
    actor,
    title: str,
    amount_cents: int,
    team: str,
    campus: str,
    description: str,
    category: str,
    items: List[dict],
    urgency: int = 2,
    event_date=None,
    attachments: Optional[List[dict]] = None
) -> ExpenseRequest:
    """
    Edit a submitted or change-requested expense and resubmit it.

    Items are replaced wholesale. Attachments are replaced only when given.

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        ExpensePermissionError: If actor is neither requester nor expense manager
        InvalidStatusTransitionError: If the expense is no longer editable
    """
    expense = get_expense_for_update(expense_id)

    if expense.requester_id != actor.id and not has_capability(actor, Capability.MANAGE_EXPENSES):
        raise ExpensePermissionError("You can only edit your own expense requests")

    if expense.status not in EDITABLE_STATUSES:
        raise InvalidStatusTransitionError("This expense request cannot be edited")

    if amount_cents <= 0:
        raise InvalidExpenseDataError("Amount must be greater than zero")

    expense.title = title.strip()
    expense.amount_cents = amount_cents
    expense.team = team
    expense.campus = campus
    expense.description = description
    expense.category = category
    expense.urgency = urgency
    expense.event_date = event_date

    expense.items.all().delete()
    created_items = _create_items(expense, items)

    if attachments is not None:
        expense.attachments.all().delete()
        _create_attachments(expense, attachments, created_items)

    change_status(
        expense=expense,
        to_status=ExpenseStatus.SUBMITTED,
        actor=actor,
        reason='Expense request updated and resubmitted',
        update_fields=[
            'title', 'amount_cents', 'team', 'campus', 'description',
            'category', 'urgency', 'event_date',
        ],
    )
    return expense
