from rest_framework import serializers

from .models import WishlistItem, WishlistConfirmation, WishlistContribution


# =============================================================================
# Input Serializers
# =============================================================================

class WishlistItemInputSerializer(serializers.Serializer):
    """
    Validate wish list item fields for create and (partial) update.

    Fields:
        price_cents (int): Unit price, must be positive
        quantity_needed (int): Units wanted, must be positive
        allow_contributions (bool): Accept monetary pledges (default false)
    """

    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    price_cents = serializers.IntegerField(min_value=1)
    currency = serializers.CharField(max_length=3, default='USD')
    quantity_needed = serializers.IntegerField(min_value=1)
    purchase_url = serializers.URLField(max_length=500)
    image_url = serializers.URLField(max_length=500, required=False, allow_blank=True, allow_null=True)
    priority = serializers.IntegerField(default=1)
    is_active = serializers.BooleanField(default=True)
    allow_contributions = serializers.BooleanField(default=False)


class DonorSerializer(serializers.Serializer):
    donor_name = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)
    donor_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    note = serializers.CharField(max_length=2000, required=False, allow_blank=True, allow_null=True)


class ConfirmationInputSerializer(DonorSerializer):
    quantity = serializers.IntegerField(
        min_value=1,
        error_messages={'min_value': 'Quantity must be at least 1'}
    )


class ContributionInputSerializer(DonorSerializer):
    amount_cents = serializers.IntegerField(
        min_value=1,
        error_messages={'min_value': 'Please contribute at least $0.01.'}
    )


class AccessCodeRequestSerializer(serializers.Serializer):
    email = serializers.CharField(max_length=254, required=False, allow_blank=True, default='')


class VerifyCodeSerializer(AccessCodeRequestSerializer):
    code = serializers.CharField(max_length=12, required=False, allow_blank=True, default='')


# =============================================================================
# Output Serializers
# =============================================================================

class WishlistItemSerializer(serializers.ModelSerializer):
    """Item with progress; expects a queryset annotated by with_progress()."""

    quantity_confirmed = serializers.IntegerField(read_only=True)
    remaining_quantity = serializers.IntegerField(read_only=True)
    contributed_cents = serializers.IntegerField(read_only=True)
    goal_cents = serializers.IntegerField(read_only=True)
    confirmed_value_cents = serializers.IntegerField(read_only=True)
    remaining_value_cents = serializers.IntegerField(read_only=True)

    class Meta:
        model = WishlistItem
        fields = [
            'id',
            'title',
            'description',
            'category',
            'image_url',
            'purchase_url',
            'price_cents',
            'currency',
            'quantity_needed',
            'priority',
            'is_active',
            'allow_contributions',
            'quantity_confirmed',
            'remaining_quantity',
            'contributed_cents',
            'goal_cents',
            'confirmed_value_cents',
            'remaining_value_cents',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class AdminWishlistItemSerializer(WishlistItemSerializer):
    donors_count = serializers.IntegerField(read_only=True)

    class Meta(WishlistItemSerializer.Meta):
        fields = WishlistItemSerializer.Meta.fields + ['donors_count']
        read_only_fields = fields


class WishlistConfirmationSerializer(serializers.ModelSerializer):
    class Meta:
        model = WishlistConfirmation
        fields = ['id', 'quantity', 'donor_name', 'donor_email', 'note', 'created_at']
        read_only_fields = fields


class WishlistContributionSerializer(serializers.ModelSerializer):
    class Meta:
        model = WishlistContribution
        fields = ['id', 'amount_cents', 'donor_name', 'donor_email', 'note', 'created_at']
        read_only_fields = fields
