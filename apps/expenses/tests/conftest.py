import pytest
from django.utils import timezone

from apps.accounts.models import Campus
from apps.expenses.models import (
    ExpenseRequest,
    ExpenseItem,
    ExpenseStatus,
    ExpenseCategory,
    Team,
    StatusEvent,
)


@pytest.fixture
def expense_factory(leader_user):
    """Return a function creating an expense with one item per amount."""

    def create(
        *,
        requester=None,
        status=ExpenseStatus.SUBMITTED,
        item_amounts=(6000, 4000),
        campus=Campus.DMV,
        title='Sound equipment',
        **extra
    ):
        amount_cents = sum(item_amounts) or 5000
        expense = ExpenseRequest.objects.create(
            requester=requester or leader_user,
            title=title,
            amount_cents=extra.pop('amount_cents', amount_cents),
            team=Team.CCW,
            campus=campus,
            description='Cables and microphone stands',
            category=ExpenseCategory.EQUIPMENT_PURCHASE,
            status=status,
            **extra
        )
        for position, amount in enumerate(item_amounts, start=1):
            ExpenseItem.objects.create(
                expense=expense,
                description=f'Item {position}',
                quantity=1,
                unit_price_cents=amount,
                amount_cents=amount,
            )
        StatusEvent.objects.create(
            expense=expense,
            from_status=None,
            to_status=ExpenseStatus.SUBMITTED,
            actor=expense.requester,
        )
        return expense

    return create


@pytest.fixture
def submitted_expense(expense_factory):
    """Submitted expense with items of 60.00 and 40.00."""
    return expense_factory()


@pytest.fixture
def approved_expense(expense_factory):
    return expense_factory(status=ExpenseStatus.APPROVED)


@pytest.fixture
def paid_expense(expense_factory):
    """Expense paid 100.00 and waiting for its report."""
    return expense_factory(
        status=ExpenseStatus.EXPENSE_REPORT_REQUESTED,
        paid_at=timezone.now(),
        paid_amount_cents=10000,
        report_required=True,
    )


@pytest.fixture
def first_item(submitted_expense):
    return submitted_expense.items.get(description='Item 1')


@pytest.fixture
def expense_payload():
    """Valid body for POST /api/expenses/create/."""
    return {
        'title': 'Youth night snacks',
        'amount_cents': 4500,
        'team': Team.CONNECTIONS_AND_COMMUNITY,
        'campus': Campus.DMV,
        'description': 'Snacks and drinks for youth night',
        'category': ExpenseCategory.FOOD,
        'urgency': 2,
        'items': [
            {'description': 'Pizza', 'quantity': 3, 'unit_price_cents': 1000, 'amount_cents': 3000},
            {'description': 'Drinks', 'quantity': 1, 'unit_price_cents': 1500, 'amount_cents': 1500},
        ],
    }
