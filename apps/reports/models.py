from django.db import models
from django.utils import timezone
import uuid

from apps.expenses.models import ApprovalStatus


class ReportStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    APPROVED = 'APPROVED', 'Approved'
    DENIED = 'DENIED', 'Denied'
    CHANGE_REQUESTED = 'CHANGE_REQUESTED', 'Change Requested'
    CLOSED = 'CLOSED', 'Closed'


class ExpenseReport(models.Model):
    """
    Reconciliation of a paid expense: what was actually spent, with receipts.

    Amounts are snapshots taken when the report is filed; they are not
    recomputed from the expense.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expense = models.ForeignKey(
        'expenses.ExpenseRequest',
        on_delete=models.CASCADE,
        related_name='reports'
    )
    title = models.CharField(max_length=200)
    content = models.TextField()
    notes = models.TextField(blank=True, null=True)
    report_date = models.DateTimeField(default=timezone.now)

    total_approved_amount_cents = models.PositiveIntegerField(null=True, blank=True)
    total_actual_amount_cents = models.PositiveIntegerField(null=True, blank=True)
    donation_amount_cents = models.PositiveIntegerField(null=True, blank=True)

    status = models.CharField(
        max_length=20,
        choices=ReportStatus.choices,
        default=ReportStatus.PENDING
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expense_reports'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['expense', 'status']),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"


class ReportApproval(models.Model):
    """One approver's live decision on a report."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    report = models.ForeignKey(
        ExpenseReport,
        on_delete=models.CASCADE,
        related_name='approvals'
    )
    approver = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='report_approvals'
    )
    status = models.CharField(max_length=20, choices=ApprovalStatus.choices)
    comment = models.TextField(blank=True, null=True)
    approved_amount_cents = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'report_approvals'
        unique_together = [['report', 'approver']]

    def __str__(self):
        return f"{self.approver} {self.status} {self.report}"


class ReportNote(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    report = models.ForeignKey(
        ExpenseReport,
        on_delete=models.CASCADE,
        related_name='report_notes'
    )
    author = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='report_notes'
    )
    note = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'report_notes'
        ordering = ['created_at']

    def __str__(self):
        return f"Note by {self.author} on {self.report_id}"


class ReportAttachment(models.Model):
    """Receipt for a report, optionally tied to one expense item."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    report = models.ForeignKey(
        ExpenseReport,
        on_delete=models.CASCADE,
        related_name='attachments'
    )
    item = models.ForeignKey(
        'expenses.ExpenseItem',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='report_attachments'
    )
    public_id = models.CharField(max_length=255)
    secure_url = models.URLField(max_length=500)
    mime_type = models.CharField(max_length=100)
    is_refund_receipt = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'report_attachments'
        ordering = ['created_at']

    def __str__(self):
        return self.public_id


class ApprovedReportItem(models.Model):
    """Approved vs. actually spent amount of one expense item."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    report = models.ForeignKey(
        ExpenseReport,
        on_delete=models.CASCADE,
        related_name='approved_items'
    )
    original_item = models.ForeignKey(
        'expenses.ExpenseItem',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reported_items'
    )
    description = models.CharField(max_length=500)
    approved_amount_cents = models.PositiveIntegerField()
    actual_amount_cents = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        db_table = 'approved_report_items'

    def __str__(self):
        return self.description
