"""
Report review: approve, deny, send back, close.

Closing the last open report of an expense closes the expense in the same
transaction.
"""

from typing import Optional
from uuid import UUID
import logging

from django.db import transaction

from apps.expenses.models import ExpenseRequest, ExpenseStatus, ApprovalStatus
from apps.expenses.services import change_status
from apps.reports.models import ExpenseReport, ReportApproval, ReportStatus
from apps.reports.notifications import notify_report_approved, notify_report_change_requested

from .exceptions import InvalidReportStatusError
from .report_queries import get_report_for_update

logger = logging.getLogger(__name__)

CHANGEABLE_STATUSES = (ReportStatus.PENDING, ReportStatus.APPROVED)
CLOSABLE_STATUSES = (ReportStatus.APPROVED, ReportStatus.PENDING)
EXPENSE_CLOSABLE_STATUSES = (
    ExpenseStatus.APPROVED,
    ExpenseStatus.PARTIALLY_APPROVED,
    ExpenseStatus.PAID,
    ExpenseStatus.EXPENSE_REPORT_REQUESTED,
)


def _decide(report, approver, status, comment=None, approved_amount_cents=None):
    ReportApproval.objects.update_or_create(
        report=report,
        approver=approver,
        defaults={
            'status': status,
            'comment': comment or None,
            'approved_amount_cents': approved_amount_cents,
        },
    )
    report.status = status
    report.save(update_fields=['status', 'updated_at'])
    logger.info("Report %s %s by %s", report.id, status, approver.id)


@transaction.atomic
def approve_report(
    *,
    report_id: UUID,
    approver,
    comment: Optional[str] = None,
    approved_amount_cents: Optional[int] = None
) -> ExpenseReport:
    """
    Approve a pending report and notify the requester.

    Raises:
        ReportNotFoundError: If the report does not exist
        InvalidReportStatusError: If the report is not PENDING
    """
    report = get_report_for_update(report_id)

    if report.status != ReportStatus.PENDING:
        raise InvalidReportStatusError("Report has already been approved or denied")

    _decide(report, approver, ApprovalStatus.APPROVED, comment, approved_amount_cents)
    notify_report_approved(report)
    return report


@transaction.atomic
def deny_report(*, report_id: UUID, approver, comment: str) -> ExpenseReport:
    report = get_report_for_update(report_id)

    if report.status != ReportStatus.PENDING:
        raise InvalidReportStatusError("Report has already been approved or denied")

    _decide(report, approver, ApprovalStatus.DENIED, comment)
    return report


@transaction.atomic
def request_report_change(*, report_id: UUID, admin, comment: str) -> ExpenseReport:
    """
    Send a pending or approved report back to its requester.

    All decisions on the report are cleared so it is reviewed again.

    Raises:
        ReportNotFoundError: If the report does not exist
        InvalidReportStatusError: If the report is not PENDING or APPROVED
    """
    report = get_report_for_update(report_id)

    if report.status not in CHANGEABLE_STATUSES:
        raise InvalidReportStatusError("Changes can only be requested for pending or approved reports")

    report.approvals.all().delete()
    report.status = ReportStatus.CHANGE_REQUESTED
    report.save(update_fields=['status', 'updated_at'])

    notify_report_change_requested(report, comment)

    logger.info("Changes requested on report %s by %s", report.id, admin.id)
    return report


@transaction.atomic
def close_report(*, report_id: UUID, actor) -> dict:
    """
    Close a report, and its expense once every report of the expense is closed.

    The expense is closed only from an approved, paid or report-requested
    status; it then no longer requires a report.

    Returns:
        dict with report and expense_closed (bool)

    Raises:
        ReportNotFoundError: If the report does not exist
        InvalidReportStatusError: If the report is not APPROVED or PENDING
    """
    report = get_report_for_update(report_id)

    if report.status not in CLOSABLE_STATUSES:
        raise InvalidReportStatusError("Report must be approved or pending to be closed")

    report.status = ReportStatus.CLOSED
    report.save(update_fields=['status', 'updated_at'])

    expense = ExpenseRequest.objects.select_for_update().get(id=report.expense_id)
    all_closed = not expense.reports.exclude(status=ReportStatus.CLOSED).exists()

    expense_closed = False
    if all_closed and expense.status in EXPENSE_CLOSABLE_STATUSES:
        expense.report_required = False
        change_status(
            expense=expense,
            to_status=ExpenseStatus.CLOSED,
            actor=actor,
            reason='Expense closed automatically after all reports were closed',
            update_fields=['report_required'],
        )
        expense_closed = True

    return {'report': report, 'expense_closed': expense_closed}
