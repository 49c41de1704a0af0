"""
Public pledges toward wish list items.

Each pledge locks its item row so that concurrent donors are checked
against the same remaining need.
"""

from datetime import timedelta
from typing import Optional
from uuid import UUID
import hashlib
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.wishlist.models import WishlistItem, WishlistConfirmation, WishlistContribution
from apps.wishlist.notifications import notify_contribution_received

from .catalog import with_progress
from .exceptions import (
    WishlistItemNotFoundError,
    ItemFulfilledError,
    DonationExceedsNeedError,
    RateLimitExceededError,
)

logger = logging.getLogger(__name__)


def hash_ip(ip_address: Optional[str]) -> str:
    return hashlib.sha256((ip_address or 'unknown').encode('utf-8')).hexdigest()


def _check_rate_limit(model, ip_hash, noun):
    window_start = timezone.now() - timedelta(minutes=settings.WISHLIST_RATE_LIMIT_WINDOW_MINUTES)
    recent = model.objects.filter(ip_hash=ip_hash, created_at__gte=window_start).count()
    if recent >= settings.WISHLIST_RATE_LIMIT_COUNT:
        raise RateLimitExceededError(
            f"Too many recent {noun} from this IP. Please try again later."
        )


def _lock_item(item_id, message, **filters):
    # Progress is read only after the row lock is held
    try:
        WishlistItem.objects.select_for_update().only('id').get(id=item_id, is_active=True, **filters)
    except WishlistItem.DoesNotExist:
        raise WishlistItemNotFoundError(message)
    return with_progress(WishlistItem.objects.all()).get(id=item_id)


@transaction.atomic
def confirm_item(
    *,
    item_id: UUID,
    quantity: int,
    ip_address: Optional[str],
    user_agent: str = '',
    donor_name: Optional[str] = None,
    donor_email: Optional[str] = None,
    note: Optional[str] = None
) -> WishlistConfirmation:
    """
    Record a donor's pledge to buy some quantity of an active item.

    Raises:
        WishlistItemNotFoundError: If the item is missing or inactive
        ItemFulfilledError: If the needed quantity is already confirmed
        DonationExceedsNeedError: If quantity is more than still needed
        RateLimitExceededError: If the address confirmed too often recently
    """
    item = _lock_item(item_id, "Item not found or no longer available")

    remaining = item.remaining_quantity
    if remaining <= 0:
        raise ItemFulfilledError("This item has already been fulfilled")
    if quantity > remaining:
        raise DonationExceedsNeedError(
            f"Cannot confirm {quantity} items. Only {remaining} still needed."
        )

    ip_hash = hash_ip(ip_address)
    _check_rate_limit(WishlistConfirmation, ip_hash, 'confirmations')

    confirmation = WishlistConfirmation.objects.create(
        item=item,
        quantity=quantity,
        donor_name=donor_name or None,
        donor_email=donor_email or None,
        note=note or None,
        ip_hash=ip_hash,
        user_agent=(user_agent or 'unknown')[:500],
    )

    logger.info("Confirmation of %s for wish list item %s", quantity, item.id)
    return confirmation


@transaction.atomic
def contribute_to_item(
    *,
    item_id: UUID,
    amount_cents: int,
    ip_address: Optional[str],
    user_agent: str = '',
    donor_name: Optional[str] = None,
    donor_email: Optional[str] = None,
    note: Optional[str] = None
) -> WishlistContribution:
    """
    Record a monetary pledge toward an item's remaining value.

    The donations inbox is emailed once the pledge is committed.

    Raises:
        WishlistItemNotFoundError: If the item is missing, inactive or not
            accepting contributions
        ItemFulfilledError: If the goal is already reached
        DonationExceedsNeedError: If the amount is more than the remaining value
        RateLimitExceededError: If the address contributed too often recently
    """
    item = _lock_item(
        item_id,
        "Item not found or not accepting contributions",
        allow_contributions=True,
    )

    remaining = item.remaining_value_cents
    if remaining <= 0:
        raise ItemFulfilledError("This item has already been fully funded.")
    if amount_cents > remaining:
        raise DonationExceedsNeedError(
            f"This item needs only {remaining} cents more. Please adjust your amount."
        )

    ip_hash = hash_ip(ip_address)
    _check_rate_limit(WishlistContribution, ip_hash, 'contributions')

    contribution = WishlistContribution.objects.create(
        item=item,
        amount_cents=amount_cents,
        donor_name=donor_name or None,
        donor_email=donor_email or None,
        note=note or None,
        ip_hash=ip_hash,
        user_agent=(user_agent or 'unknown')[:500],
    )

    notify_contribution_received(contribution)

    logger.info("Contribution of %s cents for wish list item %s", amount_cents, item.id)
    return contribution
