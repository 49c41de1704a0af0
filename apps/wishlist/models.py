from django.core.validators import MinValueValidator
from django.db import models
import uuid


class WishlistItem(models.Model):
    """
    Something the church would like donated.

    Confirmed quantity and funded value are never stored on the item; they
    are computed from the confirmation and contribution ledgers.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=100, blank=True, null=True)
    image_url = models.URLField(max_length=500, blank=True, null=True)
    purchase_url = models.URLField(max_length=500)

    price_cents = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    currency = models.CharField(max_length=3, default='USD')
    quantity_needed = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    priority = models.IntegerField(default=1)
    is_active = models.BooleanField(default=True)
    allow_contributions = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'wishlist_items'
        ordering = ['-priority', '-created_at']
        indexes = [
            models.Index(fields=['is_active', '-priority']),
        ]

    def __str__(self):
        return self.title


class WishlistConfirmation(models.Model):
    """A donor's pledge to buy some quantity of an item. Append-only."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    item = models.ForeignKey(
        WishlistItem,
        on_delete=models.CASCADE,
        related_name='confirmations'
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    donor_name = models.CharField(max_length=200, blank=True, null=True)
    donor_email = models.EmailField(blank=True, null=True)
    note = models.TextField(blank=True, null=True)

    # SHA-256 of the client address; raw addresses are not stored
    ip_hash = models.CharField(max_length=64, db_index=True)
    user_agent = models.CharField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'wishlist_confirmations'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.quantity} x {self.item}"


class WishlistContribution(models.Model):
    """A donor's pledge of money toward an item's goal. Append-only."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    item = models.ForeignKey(
        WishlistItem,
        on_delete=models.CASCADE,
        related_name='contributions'
    )
    amount_cents = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    donor_name = models.CharField(max_length=200, blank=True, null=True)
    donor_email = models.EmailField(blank=True, null=True)
    note = models.TextField(blank=True, null=True)

    ip_hash = models.CharField(max_length=64, db_index=True)
    user_agent = models.CharField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'wishlist_contributions'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.amount_cents} cents toward {self.item}"
