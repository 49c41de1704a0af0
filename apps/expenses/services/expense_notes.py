"""Notes and pastor remarks on expenses."""

from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import Role
from apps.accounts.permissions import Capability, has_capability
from apps.expenses.models import ExpenseRequest, ExpenseNote, ExpenseStatus, PastorRemark

from .exceptions import (
    ExpenseNotFoundError,
    ExpensePermissionError,
    InvalidStatusTransitionError,
)


def _get(expense_id):
    try:
        return ExpenseRequest.objects.get(id=expense_id)
    except ExpenseRequest.DoesNotExist:
        raise ExpenseNotFoundError("Expense request not found")


def _is_campus_pastor(user, expense) -> bool:
    return user.role == Role.CAMPUS_PASTOR and user.campus == expense.campus


def add_note(*, expense_id: UUID, author, note: str) -> ExpenseNote:
    """
    Add a note to an expense.

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        ExpensePermissionError: If author is not the requester, an expense
            manager or a pastor of the expense's campus
    """
    expense = _get(expense_id)
    allowed = (
        expense.requester_id == author.id
        or has_capability(author, Capability.MANAGE_EXPENSES)
        or _is_campus_pastor(author, expense)
    )
    if not allowed:
        raise ExpensePermissionError("You do not have permission to add notes to this expense")

    return ExpenseNote.objects.create(expense=expense, author=author, note=note.strip())


def list_notes(*, expense_id: UUID, user) -> QuerySet:
    expense = _get(expense_id)
    allowed = (
        expense.requester_id == user.id
        or has_capability(user, Capability.VIEW_ALL_EXPENSES)
        or _is_campus_pastor(user, expense)
    )
    if not allowed:
        raise ExpensePermissionError("You do not have permission to view notes on this expense")

    return expense.expense_notes.select_related('author').order_by('created_at')


@transaction.atomic
def upsert_pastor_remark(*, expense_id: UUID, pastor, remark: str) -> PastorRemark:
    """
    Create or replace the pastor's remark on a submitted expense.

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        ExpensePermissionError: If the expense belongs to another campus
        InvalidStatusTransitionError: If the expense is not SUBMITTED
    """
    expense = _get(expense_id)

    if pastor.campus != expense.campus:
        raise ExpensePermissionError("You can only add remarks to expenses from your campus")

    if expense.status != ExpenseStatus.SUBMITTED:
        raise InvalidStatusTransitionError("Remarks can only be added to submitted expenses")

    pastor_remark, _ = PastorRemark.objects.update_or_create(
        expense=expense,
        pastor=pastor,
        defaults={'remark': remark.strip()},
    )
    return pastor_remark
