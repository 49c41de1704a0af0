from django.contrib import admin
from django.utils.html import format_html

from .models import (
    ExpenseRequest,
    ExpenseItem,
    ExpenseStatus,
    Approval,
    StatusEvent,
    ExpenseNote,
    Attachment,
    PastorRemark,
)


STATUS_COLORS = {
    ExpenseStatus.SUBMITTED: '#E5A03A',
    ExpenseStatus.PARTIALLY_APPROVED: '#A47449',
    ExpenseStatus.APPROVED: '#6B8E5E',
    ExpenseStatus.DENIED: '#B85C5C',
    ExpenseStatus.CHANGE_REQUESTED: '#8A6FB0',
    ExpenseStatus.PAID: '#4A7A9C',
    ExpenseStatus.EXPENSE_REPORT_REQUESTED: '#4A7A9C',
    ExpenseStatus.CLOSED: '#777777',
}


class ExpenseItemInline(admin.TabularInline):
    model = ExpenseItem
    extra = 0
    fields = ['description', 'category', 'quantity', 'unit_price_cents', 'amount_cents']


class ApprovalInline(admin.TabularInline):
    model = Approval
    extra = 0
    fields = ['approver', 'stage', 'status', 'comment', 'decided_at']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        """Approvals are recorded by the approval workflow."""
        return False


class StatusEventInline(admin.TabularInline):
    """Read-only audit trail."""
    model = StatusEvent
    extra = 0
    fields = ['from_status', 'to_status', 'actor', 'reason', 'created_at']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class AttachmentInline(admin.TabularInline):
    model = Attachment
    extra = 0
    fields = ['item', 'public_id', 'secure_url', 'mime_type']


@admin.register(ExpenseRequest)
class ExpenseRequestAdmin(admin.ModelAdmin):
    """
    Admin interface for expense requests.

    Status changes go through the API so that every transition is audited;
    the status field is read-only here.
    """

    list_display = [
        'title',
        'requester',
        'amount_display',
        'team',
        'campus',
        'status_badge',
        'urgency',
        'created_at',
    ]

    list_filter = ['status', 'team', 'campus', 'urgency', 'account', 'expense_type']

    search_fields = ['title', 'description', 'requester__email', 'requester__name']

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Request', {
            'fields': ('requester', 'title', 'amount_cents', 'team', 'campus', 'category',
                       'urgency', 'description', 'notes')
        }),
        ('Event', {
            'fields': ('event_date', 'event_name', 'full_event_budget_cents'),
            'classes': ('collapse',),
        }),
        ('Payee', {
            'fields': ('pay_to_external', 'payee_name', 'payee_zelle'),
            'classes': ('collapse',),
        }),
        ('Administration', {
            'fields': ('status', 'account', 'expense_type', 'destination_account'),
        }),
        ('Payment', {
            'fields': ('paid_at', 'payment_date', 'paid_amount_cents', 'paid_by', 'report_required'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    readonly_fields = ['status', 'created_at', 'updated_at']

    inlines = [ExpenseItemInline, ApprovalInline, AttachmentInline, StatusEventInline]

    def amount_display(self, obj):
        return f"${obj.amount_cents / 100:.2f}"
    amount_display.short_description = 'Amount'
    amount_display.admin_order_field = 'amount_cents'

    def status_badge(self, obj):
        """Display expense status as colored badge."""
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            STATUS_COLORS.get(obj.status, '#ccc'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'


@admin.register(ExpenseNote)
class ExpenseNoteAdmin(admin.ModelAdmin):
    list_display = ['expense', 'author', 'created_at']
    search_fields = ['note', 'expense__title', 'author__email']


@admin.register(PastorRemark)
class PastorRemarkAdmin(admin.ModelAdmin):
    list_display = ['expense', 'pastor', 'updated_at']
    search_fields = ['remark', 'expense__title', 'pastor__email']
