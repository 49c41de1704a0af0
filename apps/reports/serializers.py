from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer
from apps.expenses.serializers import ExpenseListSerializer
from .models import (
    ExpenseReport,
    ReportStatus,
    ReportApproval,
    ReportNote,
    ReportAttachment,
    ApprovedReportItem,
)


# =============================================================================
# Input Serializers
# =============================================================================

class ReportAttachmentInputSerializer(serializers.Serializer):
    """
    Upload metadata for a report receipt.

    Fields:
        item_id (UUID): Expense item the receipt belongs to; omit for a general receipt
        is_refund_receipt (bool): Receipt for money returned after underspending
    """

    public_id = serializers.CharField(max_length=255)
    secure_url = serializers.URLField(max_length=500)
    mime_type = serializers.CharField(max_length=100)
    item_id = serializers.UUIDField(required=False, allow_null=True)
    is_refund_receipt = serializers.BooleanField(default=False)


class ReportItemInputSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    description = serializers.CharField(max_length=500)
    approved_amount_cents = serializers.IntegerField(min_value=0)
    actual_amount_cents = serializers.IntegerField(min_value=0, required=False)


class ReportContentSerializer(serializers.Serializer):
    """Fields shared by report creation and update."""

    title = serializers.CharField(max_length=200)
    content = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    report_date = serializers.DateTimeField(required=False, allow_null=True)
    attachments = ReportAttachmentInputSerializer(many=True, required=False)
    approved_items = ReportItemInputSerializer(many=True, required=False)
    total_approved_amount_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    total_actual_amount_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    donation_amount_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class ReportCreateSerializer(ReportContentSerializer):
    expense_id = serializers.UUIDField()


class ReportUpdateSerializer(ReportContentSerializer):
    report_id = serializers.UUIDField()


class ReportIdSerializer(serializers.Serializer):
    report_id = serializers.UUIDField()


class ApproveReportSerializer(ReportIdSerializer):
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    approved_amount_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class ReportCommentSerializer(ReportIdSerializer):
    comment = serializers.CharField()


class AddReportNoteSerializer(ReportIdSerializer):
    note = serializers.CharField(max_length=5000)


class ReportFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for report listing.

    Query Parameters:
        expense (UUID): Only reports of this expense
        status (str): Filter by report status
        search (str): Match report title/content or expense title
    """

    expense = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=ReportStatus.choices, required=False)
    search = serializers.CharField(max_length=200, required=False, allow_blank=True)


# =============================================================================
# Output Serializers
# =============================================================================

class ReportAttachmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReportAttachment
        fields = ['id', 'item', 'public_id', 'secure_url', 'mime_type', 'is_refund_receipt', 'created_at']
        read_only_fields = fields


class ApprovedReportItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = ApprovedReportItem
        fields = ['id', 'original_item', 'description', 'approved_amount_cents', 'actual_amount_cents']
        read_only_fields = fields


class ReportApprovalSerializer(serializers.ModelSerializer):
    approver = UserSummarySerializer(read_only=True)

    class Meta:
        model = ReportApproval
        fields = ['id', 'approver', 'status', 'comment', 'approved_amount_cents', 'updated_at']
        read_only_fields = fields


class ReportNoteSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)

    class Meta:
        model = ReportNote
        fields = ['id', 'author', 'note', 'created_at']
        read_only_fields = fields


class ExpenseReportSerializer(serializers.ModelSerializer):
    """Report with its expense summary, receipts, items and notes."""

    expense = ExpenseListSerializer(read_only=True)
    attachments = ReportAttachmentSerializer(many=True, read_only=True)
    approved_items = ApprovedReportItemSerializer(many=True, read_only=True)
    approvals = ReportApprovalSerializer(many=True, read_only=True)
    report_notes = ReportNoteSerializer(many=True, read_only=True)

    class Meta:
        model = ExpenseReport
        fields = [
            'id',
            'expense',
            'title',
            'content',
            'notes',
            'report_date',
            'total_approved_amount_cents',
            'total_actual_amount_cents',
            'donation_amount_cents',
            'status',
            'attachments',
            'approved_items',
            'approvals',
            'report_notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
