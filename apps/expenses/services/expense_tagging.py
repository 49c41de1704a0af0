"""Administrative tags on expenses: paying account and expense type."""

from typing import Optional
from uuid import UUID

from apps.expenses.models import ExpenseRequest

from .exceptions import ExpenseNotFoundError

UNCHANGED = object()


def _get(expense_id):
    try:
        return ExpenseRequest.objects.get(id=expense_id)
    except ExpenseRequest.DoesNotExist:
        raise ExpenseNotFoundError("Expense request not found")


def update_account(*, expense_id: UUID, account: Optional[str]) -> ExpenseRequest:
    expense = _get(expense_id)
    expense.account = account or None
    expense.save(update_fields=['account', 'updated_at'])
    return expense


def update_expense_type(
    *,
    expense_id: UUID,
    expense_type: Optional[str],
    destination_account=UNCHANGED
) -> ExpenseRequest:
    """
    Set the expense type, and the destination account when one is passed.

    Pass destination_account=None to clear it; leave it out to keep it.
    """
    expense = _get(expense_id)
    expense.expense_type = expense_type or None
    update_fields = ['expense_type', 'updated_at']
    if destination_account is not UNCHANGED:
        expense.destination_account = destination_account or None
        update_fields.append('destination_account')
    expense.save(update_fields=update_fields)
    return expense
