from django.contrib import admin

from .models import ExpenseReport, ReportAttachment, ApprovedReportItem, ReportNote


class ReportAttachmentInline(admin.TabularInline):
    model = ReportAttachment
    extra = 0
    fields = ['item', 'public_id', 'secure_url', 'mime_type', 'is_refund_receipt']


class ApprovedReportItemInline(admin.TabularInline):
    model = ApprovedReportItem
    extra = 0
    fields = ['original_item', 'description', 'approved_amount_cents', 'actual_amount_cents']


class ReportNoteInline(admin.TabularInline):
    model = ReportNote
    extra = 0
    fields = ['author', 'note', 'created_at']
    readonly_fields = ['created_at']


@admin.register(ExpenseReport)
class ExpenseReportAdmin(admin.ModelAdmin):
    list_display = [
        'title',
        'expense',
        'status',
        'total_approved_amount_cents',
        'total_actual_amount_cents',
        'donation_amount_cents',
        'created_at',
    ]
    list_filter = ['status']
    search_fields = ['title', 'content', 'expense__title']
    ordering = ['-created_at']
    readonly_fields = ['status', 'created_at', 'updated_at']
    inlines = [ApprovedReportItemInline, ReportAttachmentInline, ReportNoteInline]
