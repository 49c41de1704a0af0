from django.contrib import admin

from .models import WishlistItem, WishlistConfirmation, WishlistContribution


class WishlistConfirmationInline(admin.TabularInline):
    model = WishlistConfirmation
    extra = 0
    fields = ['quantity', 'donor_name', 'donor_email', 'note', 'created_at']
    readonly_fields = fields
    can_delete = False


class WishlistContributionInline(admin.TabularInline):
    model = WishlistContribution
    extra = 0
    fields = ['amount_cents', 'donor_name', 'donor_email', 'note', 'created_at']
    readonly_fields = fields
    can_delete = False


@admin.register(WishlistItem)
class WishlistItemAdmin(admin.ModelAdmin):
    list_display = [
        'title',
        'price_cents',
        'quantity_needed',
        'priority',
        'is_active',
        'allow_contributions',
        'created_at',
    ]
    list_filter = ['is_active', 'allow_contributions', 'category']
    search_fields = ['title', 'description']
    ordering = ['-priority', '-created_at']
    inlines = [WishlistConfirmationInline, WishlistContributionInline]
