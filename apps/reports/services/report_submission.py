"""Filing and resubmitting expense reports."""

from typing import List, Optional
from uuid import UUID
import logging

from django.db import transaction

from apps.accounts.permissions import Capability, has_capability
from apps.expenses.models import ExpenseStatus, ApprovalStatus
from apps.expenses.services import get_expense_for_update
from apps.reports.models import (
    ExpenseReport,
    ReportStatus,
    ReportAttachment,
    ApprovedReportItem,
)
from apps.reports.notifications import notify_report_submitted

from .exceptions import (
    ReportPermissionError,
    InvalidReportStatusError,
    MissingAttachmentsError,
)
from .report_queries import get_report_for_update, can_access_report

logger = logging.getLogger(__name__)

REPORTABLE_STATUSES = (ExpenseStatus.PAID, ExpenseStatus.EXPENSE_REPORT_REQUESTED)


def count_required_attachments(expense) -> int:
    """
    One receipt per item approved for a positive amount.

    An expense without items needs a single receipt.
    """
    items = list(expense.items.prefetch_related('approvals'))
    if not items:
        return 1
    return sum(
        1 for item in items
        if any(
            approval.status == ApprovalStatus.APPROVED and (approval.approved_amount_cents or 0) > 0
            for approval in item.approvals.all()
        )
    )


def validate_report_attachments(
    *,
    attachments: List[dict],
    approved_items: List[dict],
    total_approved_amount_cents: int,
    total_actual_amount_cents: int
) -> None:
    """
    Check receipts against the reported spending.

    Every reported item needs a receipt, plus a refund receipt when less was
    spent than approved. A report without items needs one general receipt,
    plus a general refund receipt when it underspent.

    Raises:
        MissingAttachmentsError: Naming the first missing receipt
    """
    if approved_items:
        for item in approved_items:
            item_id = item['id']
            receipts = [a for a in attachments if a.get('item_id') == item_id and not a.get('is_refund_receipt')]
            if not receipts:
                raise MissingAttachmentsError(
                    f"Please include at least one attachment for item: {item['description']}"
                )

            actual = item.get('actual_amount_cents')
            if actual is not None and actual < item['approved_amount_cents']:
                refunds = [a for a in attachments if a.get('item_id') == item_id and a.get('is_refund_receipt')]
                if not refunds:
                    raise MissingAttachmentsError(
                        f"Refund receipts are required for item where less was spent: {item['description']}"
                    )
        return

    general = [a for a in attachments if not a.get('item_id')]
    if not general:
        raise MissingAttachmentsError("Please include at least one attachment for this expense report.")

    if total_actual_amount_cents < total_approved_amount_cents:
        if not any(a.get('is_refund_receipt') for a in general):
            raise MissingAttachmentsError("Refund receipt is required when spending less than approved.")


def _replace_attachments(report, expense, attachments):
    item_ids = {str(pk) for pk in expense.items.values_list('id', flat=True)}
    ReportAttachment.objects.bulk_create([
        ReportAttachment(
            report=report,
            item_id=attachment['item_id'] if str(attachment.get('item_id')) in item_ids else None,
            public_id=attachment['public_id'],
            secure_url=attachment['secure_url'],
            mime_type=attachment['mime_type'],
            is_refund_receipt=attachment.get('is_refund_receipt', False),
        )
        for attachment in attachments
    ])


def _replace_items(report, expense, approved_items):
    item_ids = {str(pk) for pk in expense.items.values_list('id', flat=True)}
    ApprovedReportItem.objects.bulk_create([
        ApprovedReportItem(
            report=report,
            original_item_id=item['id'] if str(item['id']) in item_ids else None,
            description=item['description'],
            approved_amount_cents=item['approved_amount_cents'],
            actual_amount_cents=item.get('actual_amount_cents', item['approved_amount_cents']),
        )
        for item in approved_items
    ])


@transaction.atomic
def create_report(
    *,
    expense_id: UUID,
    user,
    title: str,
    content: str,
    report_date=None,
    notes: Optional[str] = None,
    attachments: Optional[List[dict]] = None,
    approved_items: Optional[List[dict]] = None,
    total_approved_amount_cents: Optional[int] = None,
    total_actual_amount_cents: Optional[int] = None,
    donation_amount_cents: Optional[int] = None
) -> ExpenseReport:
    """
    File a report for a paid expense.

    Args:
        attachments: Upload metadata (public_id, secure_url, mime_type,
            optional item_id and is_refund_receipt)
        approved_items: Per-item approved and actual amounts (id of the
            expense item, description, approved_amount_cents,
            optional actual_amount_cents)

    Raises:
        ExpenseNotFoundError: If the expense does not exist
        ReportPermissionError: If user is neither requester nor allowed to view all expenses
        InvalidReportStatusError: If the expense has not been paid
        MissingAttachmentsError: If fewer receipts than approved items are attached
    """
    expense = get_expense_for_update(expense_id)
    attachments = attachments or []
    approved_items = approved_items or []

    if expense.requester_id != user.id and not has_capability(user, Capability.VIEW_ALL_EXPENSES):
        raise ReportPermissionError("You can only create reports for your own expenses")

    if expense.status not in REPORTABLE_STATUSES:
        raise InvalidReportStatusError("Reports can only be created for paid expenses")

    required = count_required_attachments(expense)
    provided = len(attachments)
    if provided < required:
        raise MissingAttachmentsError(
            f"This expense report requires at least {required} attachment(s). "
            f"Please upload the required documents.",
            required=required,
            provided=provided,
        )

    report_fields = {
        'expense': expense,
        'title': title.strip(),
        'content': content,
        'notes': notes or None,
        'total_approved_amount_cents': total_approved_amount_cents or expense.amount_cents,
        'total_actual_amount_cents': total_actual_amount_cents,
        'donation_amount_cents': donation_amount_cents or None,
    }
    if report_date:
        report_fields['report_date'] = report_date
    report = ExpenseReport.objects.create(**report_fields)

    _replace_attachments(report, expense, attachments)
    _replace_items(report, expense, approved_items)

    notify_report_submitted(report, user)

    logger.info("Report %s filed for expense %s by %s", report.id, expense.id, user.id)
    return report


@transaction.atomic
def update_report(
    *,
    report_id: UUID,
    user,
    title: str,
    content: str,
    report_date=None,
    notes: Optional[str] = None,
    attachments: Optional[List[dict]] = None,
    approved_items: Optional[List[dict]] = None,
    total_approved_amount_cents: Optional[int] = None,
    total_actual_amount_cents: Optional[int] = None,
    donation_amount_cents: Optional[int] = None
) -> ExpenseReport:
    """
    Edit a report sent back for changes and resubmit it as PENDING.

    Attachments and reported items are replaced and existing decisions are
    cleared so the report is reviewed again.

    Raises:
        ReportNotFoundError: If the report does not exist
        ReportPermissionError: If user is neither requester nor allowed to view all expenses
        InvalidReportStatusError: If the report is not CHANGE_REQUESTED
        MissingAttachmentsError: If a receipt or refund receipt is missing
    """
    report = get_report_for_update(report_id)
    attachments = attachments or []
    approved_items = approved_items or []

    if not can_access_report(user, report):
        raise ReportPermissionError("You can only edit reports for your own expenses")

    if report.status != ReportStatus.CHANGE_REQUESTED:
        raise InvalidReportStatusError("Report must be in CHANGE_REQUESTED status to edit")

    approved_total = total_approved_amount_cents or 0
    actual_total = approved_total if total_actual_amount_cents is None else total_actual_amount_cents

    validate_report_attachments(
        attachments=attachments,
        approved_items=approved_items,
        total_approved_amount_cents=approved_total,
        total_actual_amount_cents=actual_total,
    )

    report.attachments.all().delete()
    report.approved_items.all().delete()
    report.approvals.all().delete()

    report.title = title.strip()
    report.content = content
    if notes:
        report.notes = notes
    if report_date:
        report.report_date = report_date
    report.total_approved_amount_cents = approved_total
    report.total_actual_amount_cents = actual_total
    report.donation_amount_cents = donation_amount_cents or None
    report.status = ReportStatus.PENDING
    report.save()

    _replace_attachments(report, report.expense, attachments)
    _replace_items(report, report.expense, approved_items)

    notify_report_submitted(report, user)

    logger.info("Report %s resubmitted by %s", report.id, user.id)
    return report
