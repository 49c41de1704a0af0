"""Read access to reports and report notes."""

from typing import Optional
from uuid import UUID

from django.db.models import Q, QuerySet

from apps.accounts.permissions import Capability, has_capability
from apps.reports.models import ExpenseReport, ReportNote

from .exceptions import ReportNotFoundError, ReportPermissionError


def get_report_for_update(report_id: UUID) -> ExpenseReport:
    """Lock and return the report; call inside a transaction."""
    try:
        return ExpenseReport.objects.select_for_update().select_related('expense').get(id=report_id)
    except ExpenseReport.DoesNotExist:
        raise ReportNotFoundError("Expense report not found")


def get_report(report_id: UUID) -> ExpenseReport:
    """Return the report with everything the API renders."""
    try:
        return (
            ExpenseReport.objects
            .select_related('expense__requester')
            .prefetch_related('attachments', 'approved_items', 'approvals__approver', 'report_notes__author')
            .get(id=report_id)
        )
    except ExpenseReport.DoesNotExist:
        raise ReportNotFoundError("Expense report not found")


def can_access_report(user, report: ExpenseReport) -> bool:
    return report.expense.requester_id == user.id or has_capability(user, Capability.VIEW_ALL_EXPENSES)


def list_reports(
    *,
    expense: Optional[UUID] = None,
    status: Optional[str] = None,
    search: Optional[str] = None
) -> QuerySet:
    """
    Filter all reports, newest first.

    search matches the report title and content, and the expense title
    unless the list is already limited to one expense.
    """
    queryset = ExpenseReport.objects.select_related('expense__requester').prefetch_related(
        'attachments', 'approved_items', 'report_notes__author'
    )

    if expense:
        queryset = queryset.filter(expense_id=expense)
    if status:
        queryset = queryset.filter(status=status)
    if search:
        condition = Q(title__icontains=search) | Q(content__icontains=search)
        if not expense:
            condition |= Q(expense__title__icontains=search)
        queryset = queryset.filter(condition)

    return queryset.order_by('-created_at')


def add_report_note(*, report_id: UUID, author, note: str) -> ReportNote:
    """
    Add a note to a report.

    Raises:
        ReportNotFoundError: If the report does not exist
        ReportPermissionError: If author is neither the requester nor allowed to view all expenses
    """
    report = get_report(report_id)
    if not can_access_report(author, report):
        raise ReportPermissionError("You do not have permission to add notes to this report")

    return ReportNote.objects.create(report=report, author=author, note=note.strip())


def list_report_notes(*, report_id: UUID, user) -> QuerySet:
    report = get_report(report_id)
    if not can_access_report(user, report):
        raise ReportPermissionError("You do not have permission to view notes for this report")

    return report.report_notes.select_related('author').order_by('created_at')
