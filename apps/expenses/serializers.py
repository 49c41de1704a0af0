from rest_framework import serializers

from apps.accounts.models import Campus
from apps.accounts.serializers import UserSummarySerializer
from .models import (
    ExpenseRequest,
    ExpenseItem,
    ExpenseItemApproval,
    Approval,
    StatusEvent,
    ExpenseNote,
    Attachment,
    PastorRemark,
    Team,
    Account,
    ExpenseType,
    Urgency,
    ExpenseCategory,
    ExpenseStatus,
)


# =============================================================================
# Input Serializers
# =============================================================================

class ExpenseItemInputSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=500)
    category = serializers.ChoiceField(
        choices=ExpenseCategory.choices,
        required=False,
        allow_null=True,
        allow_blank=True
    )
    quantity = serializers.IntegerField(min_value=1)
    unit_price_cents = serializers.IntegerField(min_value=0)
    amount_cents = serializers.IntegerField(min_value=0)


class AttachmentInputSerializer(serializers.Serializer):
    """
    Upload metadata for a receipt or quote.

    Fields:
        item_index (int): Optional 1-based position of the item in `items`
    """

    public_id = serializers.CharField(max_length=255)
    secure_url = serializers.URLField(max_length=500)
    mime_type = serializers.CharField(max_length=100)
    item_index = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class ExpenseBaseInputSerializer(serializers.Serializer):
    """Fields shared by expense creation and update."""

    title = serializers.CharField(max_length=200)
    amount_cents = serializers.IntegerField(min_value=1)
    team = serializers.ChoiceField(choices=Team.choices)
    campus = serializers.ChoiceField(choices=Campus.choices)
    description = serializers.CharField()
    category = serializers.ChoiceField(choices=ExpenseCategory.choices)
    urgency = serializers.ChoiceField(choices=Urgency.choices, default=Urgency.URGENT)
    event_date = serializers.DateField(required=False, allow_null=True)
    items = ExpenseItemInputSerializer(many=True, allow_empty=False)
    attachments = AttachmentInputSerializer(many=True, required=False)

    def validate(self, attrs):
        if attrs['category'] == ExpenseCategory.SPECIAL_EVENTS_AND_PROGRAMS and not attrs.get('event_date'):
            raise serializers.ValidationError({
                'event_date': 'Event date is required for Special Events and Programs'
            })
        return attrs


class ExpenseCreateSerializer(ExpenseBaseInputSerializer):
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    event_name = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)
    full_event_budget_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    pay_to_external = serializers.BooleanField(default=False)
    payee_name = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)
    payee_zelle = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        attrs = super().validate(attrs)

        if attrs.get('event_date'):
            budget = attrs.get('full_event_budget_cents')
            if not (attrs.get('event_name') or '').strip() or not budget:
                raise serializers.ValidationError({
                    'event_name': 'Event name and full event budget are required when event date is provided'
                })
            items_total = sum(item['amount_cents'] for item in attrs['items'])
            if items_total != budget:
                raise serializers.ValidationError({
                    'items': 'Items total must equal the full event budget'
                })

        return attrs


class ExpenseUpdateSerializer(ExpenseBaseInputSerializer):
    expense_id = serializers.UUIDField()


class ExpenseIdSerializer(serializers.Serializer):
    expense_id = serializers.UUIDField()


class ApproveExpenseSerializer(ExpenseIdSerializer):
    stage = serializers.ChoiceField(choices=[1, 2], default=1)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class DenyExpenseSerializer(ExpenseIdSerializer):
    reason = serializers.CharField()


class UpdateExpenseStatusSerializer(ExpenseIdSerializer):
    status = serializers.ChoiceField(
        choices=[ExpenseStatus.PARTIALLY_APPROVED, ExpenseStatus.CHANGE_REQUESTED]
    )


class ExpenseCommentSerializer(ExpenseIdSerializer):
    comment = serializers.CharField()


class RequesterChangeRequestSerializer(ExpenseIdSerializer):
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class MarkPaidSerializer(ExpenseIdSerializer):
    """
    Validate input for marking an expense as paid.

    Fields:
        report_required (bool): Ask the requester for an expense report (default true)
        payment_date (datetime): When the payment was made, defaults to now
        paid_by (str): Optional payer reference
    """

    report_required = serializers.BooleanField(default=True)
    payment_date = serializers.DateTimeField(required=False, allow_null=True)
    paid_by = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)


class UpdateAccountSerializer(ExpenseIdSerializer):
    account = serializers.ChoiceField(choices=Account.choices, allow_null=True, allow_blank=True)


class UpdateExpenseTypeSerializer(ExpenseIdSerializer):
    expense_type = serializers.ChoiceField(choices=ExpenseType.choices, allow_null=True, allow_blank=True)
    destination_account = serializers.ChoiceField(
        choices=Account.choices,
        required=False,
        allow_null=True,
        allow_blank=True
    )


class AddNoteSerializer(ExpenseIdSerializer):
    note = serializers.CharField(max_length=5000)


class PastorRemarkInputSerializer(ExpenseIdSerializer):
    remark = serializers.CharField(max_length=5000)


class ItemIdSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()


class ApproveItemSerializer(ItemIdSerializer):
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    approved_amount_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class ItemCommentSerializer(ItemIdSerializer):
    comment = serializers.CharField()


class UpdateItemCategorySerializer(ItemIdSerializer):
    category = serializers.ChoiceField(choices=ExpenseCategory.choices, allow_null=True, allow_blank=True)


class ExpenseFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for expense listing.

    Query Parameters:
        status (str): Filter by status
        team (str): Filter by team
        campus (str): Filter by campus
        search (str): Match title or description
    """

    status = serializers.ChoiceField(choices=ExpenseStatus.choices, required=False)
    team = serializers.ChoiceField(choices=Team.choices, required=False)
    campus = serializers.ChoiceField(choices=Campus.choices, required=False)
    search = serializers.CharField(max_length=200, required=False, allow_blank=True)


class ExpenseExportFilterSerializer(serializers.Serializer):
    """Validate query parameters for CSV export."""

    team = serializers.ChoiceField(choices=Team.choices, required=False)
    campus = serializers.ChoiceField(choices=Campus.choices, required=False)
    status = serializers.ChoiceField(choices=ExpenseStatus.choices, required=False)
    urgency = serializers.ChoiceField(choices=Urgency.choices, required=False)
    account = serializers.ChoiceField(choices=Account.choices, required=False)
    expense_type = serializers.ChoiceField(choices=ExpenseType.choices, required=False)
    category = serializers.ChoiceField(choices=ExpenseCategory.choices, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        """Validate date range."""
        start_date = attrs.get('start_date')
        end_date = attrs.get('end_date')

        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({
                'end_date': 'End date must be after start date'
            })

        return attrs


# =============================================================================
# Output Serializers
# =============================================================================

class ExpenseItemApprovalSerializer(serializers.ModelSerializer):
    approver = UserSummarySerializer(read_only=True)

    class Meta:
        model = ExpenseItemApproval
        fields = ['id', 'approver', 'status', 'comment', 'approved_amount_cents', 'created_at', 'updated_at']
        read_only_fields = fields


class ExpenseItemSerializer(serializers.ModelSerializer):
    approvals = ExpenseItemApprovalSerializer(many=True, read_only=True)

    class Meta:
        model = ExpenseItem
        fields = [
            'id',
            'description',
            'category',
            'quantity',
            'unit_price_cents',
            'amount_cents',
            'approvals',
            'created_at',
        ]
        read_only_fields = fields


class AttachmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Attachment
        fields = ['id', 'item', 'public_id', 'secure_url', 'mime_type', 'created_at']
        read_only_fields = fields


class ApprovalSerializer(serializers.ModelSerializer):
    approver = UserSummarySerializer(read_only=True)

    class Meta:
        model = Approval
        fields = ['id', 'approver', 'stage', 'status', 'comment', 'decided_at']
        read_only_fields = fields


class StatusEventSerializer(serializers.ModelSerializer):
    actor = UserSummarySerializer(read_only=True)

    class Meta:
        model = StatusEvent
        fields = ['id', 'from_status', 'to_status', 'actor', 'reason', 'created_at']
        read_only_fields = fields


class ExpenseNoteSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)

    class Meta:
        model = ExpenseNote
        fields = ['id', 'author', 'note', 'created_at']
        read_only_fields = fields


class PastorRemarkSerializer(serializers.ModelSerializer):
    pastor = UserSummarySerializer(read_only=True)

    class Meta:
        model = PastorRemark
        fields = ['id', 'pastor', 'remark', 'created_at', 'updated_at']
        read_only_fields = fields


class ExpenseListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    requester = UserSummarySerializer(read_only=True)
    urgency_display = serializers.CharField(source='get_urgency_display', read_only=True)

    class Meta:
        model = ExpenseRequest
        fields = [
            'id',
            'title',
            'amount_cents',
            'team',
            'campus',
            'category',
            'urgency',
            'urgency_display',
            'status',
            'requester',
            'account',
            'expense_type',
            'paid_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ExpenseDetailSerializer(ExpenseListSerializer):
    """Full expense with items, decisions, history and attachments."""

    items = ExpenseItemSerializer(many=True, read_only=True)
    approvals = ApprovalSerializer(many=True, read_only=True)
    status_events = StatusEventSerializer(many=True, read_only=True)
    attachments = AttachmentSerializer(many=True, read_only=True)
    pastor_remarks = PastorRemarkSerializer(many=True, read_only=True)

    class Meta(ExpenseListSerializer.Meta):
        fields = ExpenseListSerializer.Meta.fields + [
            'description',
            'notes',
            'event_date',
            'event_name',
            'full_event_budget_cents',
            'pay_to_external',
            'payee_name',
            'payee_zelle',
            'destination_account',
            'payment_date',
            'paid_amount_cents',
            'paid_by',
            'report_required',
            'items',
            'approvals',
            'status_events',
            'attachments',
            'pastor_remarks',
        ]
        read_only_fields = fields


class TeamBreakdownSerializer(serializers.Serializer):
    team = serializers.CharField()
    total_cents = serializers.IntegerField()
    count = serializers.IntegerField()


class DashboardSerializer(serializers.Serializer):
    total_approved_cents = serializers.IntegerField()
    pending_count = serializers.IntegerField()
    monthly_spend_cents = serializers.IntegerField()
    team_breakdown = TeamBreakdownSerializer(many=True)
    recent_expenses = ExpenseListSerializer(many=True)
