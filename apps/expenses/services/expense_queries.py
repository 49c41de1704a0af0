"""Read access to expenses, scoped by what the user may see."""

from datetime import date
from typing import Optional
from uuid import UUID

from django.db.models import Count, Q, QuerySet, Sum
from django.utils import timezone

from apps.accounts.permissions import Capability, has_capability
from apps.expenses.models import ExpenseRequest, ExpenseStatus

from .exceptions import ExpenseNotFoundError, ExpensePermissionError


def get_expense_for_update(expense_id: UUID) -> ExpenseRequest:
    """Lock and return the expense; call inside a transaction."""
    try:
        return ExpenseRequest.objects.select_for_update().get(id=expense_id)
    except ExpenseRequest.DoesNotExist:
        raise ExpenseNotFoundError("Expense request not found")


def get_expense(expense_id: UUID) -> ExpenseRequest:
    """Return the expense with everything the detail view renders."""
    try:
        return (
            ExpenseRequest.objects
            .select_related('requester')
            .prefetch_related(
                'items__approvals__approver',
                'approvals__approver',
                'status_events__actor',
                'attachments',
                'pastor_remarks__pastor',
            )
            .get(id=expense_id)
        )
    except ExpenseRequest.DoesNotExist:
        raise ExpenseNotFoundError("Expense request not found")


def can_view_expense(user, expense: ExpenseRequest) -> bool:
    return expense.requester_id == user.id or has_capability(user, Capability.VIEW_ALL_EXPENSES)


def get_expense_for_user(*, expense_id: UUID, user) -> ExpenseRequest:
    """
    Return an expense the user may see.

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        ExpensePermissionError: If the user is neither the requester nor allowed to view all
    """
    expense = get_expense(expense_id)
    if not can_view_expense(user, expense):
        raise ExpensePermissionError("You do not have permission to view this expense")
    return expense


def visible_expenses(user) -> QuerySet:
    """All expenses for users with VIEW_ALL_EXPENSES, otherwise only their own."""
    queryset = ExpenseRequest.objects.select_related('requester')
    if has_capability(user, Capability.VIEW_ALL_EXPENSES):
        return queryset
    return queryset.filter(requester=user)


def list_expenses(
    *,
    user,
    status: Optional[str] = None,
    team: Optional[str] = None,
    campus: Optional[str] = None,
    search: Optional[str] = None
) -> QuerySet:
    """Filter the user's visible expenses, newest first."""
    queryset = visible_expenses(user)

    if status:
        queryset = queryset.filter(status=status)
    if team:
        queryset = queryset.filter(team=team)
    if campus:
        queryset = queryset.filter(campus=campus)
    if search:
        queryset = queryset.filter(
            Q(title__icontains=search) | Q(description__icontains=search)
        )

    return queryset.order_by('-created_at')


def filter_expenses_for_export(
    *,
    team: Optional[str] = None,
    campus: Optional[str] = None,
    status: Optional[str] = None,
    urgency: Optional[int] = None,
    account: Optional[str] = None,
    expense_type: Optional[str] = None,
    category: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> QuerySet:
    """Expenses matching the export filters; end_date includes the whole day."""
    filters = {
        'team': team,
        'campus': campus,
        'status': status,
        'urgency': urgency,
        'account': account,
        'expense_type': expense_type,
        'category': category,
    }
    queryset = ExpenseRequest.objects.select_related('requester').filter(
        **{field: value for field, value in filters.items() if value not in (None, '')}
    )
    if start_date:
        queryset = queryset.filter(created_at__date__gte=start_date)
    if end_date:
        queryset = queryset.filter(created_at__date__lte=end_date)
    return queryset.order_by('-created_at')


def get_dashboard_stats(*, user, today: Optional[date] = None) -> dict:
    """
    Totals for the dashboard, scoped like list_expenses.

    Returns:
        dict with total_approved_cents, pending_count, monthly_spend_cents,
        team_breakdown (current month) and recent_expenses (ten newest)
    """
    today = today or timezone.localdate()
    month_start = today.replace(day=1)
    queryset = visible_expenses(user)

    total_approved = queryset.filter(
        status=ExpenseStatus.APPROVED
    ).aggregate(total=Sum('amount_cents'))['total'] or 0

    pending_count = queryset.filter(status=ExpenseStatus.SUBMITTED).count()

    this_month = queryset.filter(
        status__in=[ExpenseStatus.APPROVED, ExpenseStatus.PAID],
        created_at__date__gte=month_start,
        created_at__date__lte=today,
    )
    monthly_spend = this_month.aggregate(total=Sum('amount_cents'))['total'] or 0

    team_breakdown = [
        {'team': row['team'], 'total_cents': row['total'] or 0, 'count': row['count']}
        for row in this_month.values('team').annotate(
            total=Sum('amount_cents'),
            count=Count('id'),
        ).order_by('-total')
    ]

    return {
        'total_approved_cents': total_approved,
        'pending_count': pending_count,
        'monthly_spend_cents': monthly_spend,
        'team_breakdown': team_breakdown,
        'recent_expenses': list(queryset.order_by('-created_at')[:10]),
    }
