import pytest
from django.utils import timezone

from apps.accounts.models import Campus
from apps.expenses.models import (
    ExpenseRequest,
    ExpenseItem,
    ExpenseItemApproval,
    ExpenseStatus,
    ExpenseCategory,
    ApprovalStatus,
    Team,
)
from apps.reports.models import ExpenseReport, ReportStatus


@pytest.fixture
def paid_expense(leader_user, admin_user):
    """
    Expense of 100.00 waiting for its report.

    Item 1 (60.00) was approved at 50.00, item 2 (40.00) in full.
    """
    expense = ExpenseRequest.objects.create(
        requester=leader_user,
        title='Sound equipment',
        amount_cents=10000,
        team=Team.CCW,
        campus=Campus.DMV,
        description='Cables and microphone stands',
        category=ExpenseCategory.EQUIPMENT_PURCHASE,
        status=ExpenseStatus.EXPENSE_REPORT_REQUESTED,
        paid_at=timezone.now(),
        paid_amount_cents=9000,
        report_required=True,
    )
    for description, amount, approved in (('Item 1', 6000, 5000), ('Item 2', 4000, 4000)):
        item = ExpenseItem.objects.create(
            expense=expense,
            description=description,
            quantity=1,
            unit_price_cents=amount,
            amount_cents=amount,
        )
        ExpenseItemApproval.objects.create(
            item=item,
            approver=admin_user,
            status=ApprovalStatus.APPROVED,
            approved_amount_cents=approved,
        )
    return expense


@pytest.fixture
def report_factory(paid_expense):
    def create(*, expense=None, status=ReportStatus.PENDING, title='Sound equipment report'):
        return ExpenseReport.objects.create(
            expense=expense or paid_expense,
            title=title,
            content='Bought cables and stands',
            total_approved_amount_cents=9000,
            total_actual_amount_cents=9000,
            status=status,
        )

    return create


@pytest.fixture
def pending_report(report_factory):
    return report_factory()


def receipt(name, item_id=None, refund=False):
    """Upload metadata for a receipt, as sent by the client."""
    data = {
        'public_id': f'receipts/{name}',
        'secure_url': f'https://files.example.com/receipts/{name}.pdf',
        'mime_type': 'application/pdf',
        'is_refund_receipt': refund,
    }
    if item_id is not None:
        data['item_id'] = item_id
    return data
