"""Wish list items and their funding progress."""

from uuid import UUID
import logging

from django.db import transaction
from django.db.models import (
    Count,
    F,
    IntegerField,
    OuterRef,
    QuerySet,
    Subquery,
    Sum,
    Value,
)
from django.db.models.functions import Coalesce, Greatest

from apps.wishlist.models import WishlistItem, WishlistConfirmation, WishlistContribution

from .exceptions import WishlistItemNotFoundError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
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
)


def _ledger_total(model, expression):
    """Per-item aggregate over a ledger table, as a correlated subquery."""
    rows = (
        model.objects
        .filter(item=OuterRef('pk'))
        .order_by()
        .values('item')
        .annotate(total=expression)
        .values('total')
    )
    return Coalesce(Subquery(rows, output_field=IntegerField()), Value(0))


def with_progress(queryset: QuerySet) -> QuerySet:
    """
    Annotate items with progress computed from the ledgers.

    Adds quantity_confirmed, contributed_cents, goal_cents,
    confirmed_value_cents, remaining_value_cents, remaining_quantity
    and donors_count.
    """
    return queryset.annotate(
        quantity_confirmed=_ledger_total(WishlistConfirmation, Sum('quantity')),
        contributed_cents=_ledger_total(WishlistContribution, Sum('amount_cents')),
        confirmations_count=_ledger_total(WishlistConfirmation, Count('id')),
        contributions_count=_ledger_total(WishlistContribution, Count('id')),
    ).annotate(
        goal_cents=F('price_cents') * F('quantity_needed'),
        confirmed_value_cents=F('quantity_confirmed') * F('price_cents') + F('contributed_cents'),
        donors_count=F('confirmations_count') + F('contributions_count'),
    ).annotate(
        remaining_value_cents=Greatest(
            F('goal_cents') - F('confirmed_value_cents'), Value(0), output_field=IntegerField()
        ),
        remaining_quantity=Greatest(
            F('quantity_needed') - F('quantity_confirmed'), Value(0), output_field=IntegerField()
        ),
    )


def list_items(*, active_only: bool = False) -> QuerySet:
    queryset = WishlistItem.objects.all()
    if active_only:
        queryset = queryset.filter(is_active=True)
    return with_progress(queryset).order_by('-priority', '-created_at')


def get_item(item_id: UUID) -> WishlistItem:
    try:
        return with_progress(WishlistItem.objects.all()).get(id=item_id)
    except WishlistItem.DoesNotExist:
        raise WishlistItemNotFoundError("Item not found")


def get_active_item(item_id: UUID) -> WishlistItem:
    """Return an item open to donors, with progress."""
    try:
        return with_progress(WishlistItem.objects.filter(is_active=True)).get(id=item_id)
    except WishlistItem.DoesNotExist:
        raise WishlistItemNotFoundError("Item not found or no longer available")


@transaction.atomic
def create_item(**fields) -> WishlistItem:
    """
    Create a wish list item.

    Args:
        **fields: Validated item fields; text fields are stripped and
            empty optional text is stored as null

    Returns:
        The new item, annotated with progress
    """
    item = WishlistItem.objects.create(**_clean(fields))
    logger.info("Wish list item %s created", item.id)
    return get_item(item.id)


@transaction.atomic
def update_item(*, item_id: UUID, **fields) -> WishlistItem:
    """
    Apply a partial update. Only the given fields change.

    Raises:
        WishlistItemNotFoundError: If the item does not exist
    """
    try:
        item = WishlistItem.objects.select_for_update().get(id=item_id)
    except WishlistItem.DoesNotExist:
        raise WishlistItemNotFoundError("Item not found")

    changes = _clean({key: value for key, value in fields.items() if key in EDITABLE_FIELDS})
    for field, value in changes.items():
        setattr(item, field, value)
    item.save()

    logger.info("Wish list item %s updated: %s", item.id, ', '.join(sorted(changes)))
    return get_item(item.id)


@transaction.atomic
def delete_item(*, item_id: UUID) -> None:
    """Delete an item together with its confirmations and contributions."""
    deleted, _ = WishlistItem.objects.filter(id=item_id).delete()
    if not deleted:
        raise WishlistItemNotFoundError("Item not found")
    logger.info("Wish list item %s deleted", item_id)


def list_contributions(*, item_id: UUID) -> QuerySet:
    if not WishlistItem.objects.filter(id=item_id).exists():
        raise WishlistItemNotFoundError("Item not found")
    return WishlistContribution.objects.filter(item_id=item_id).order_by('-created_at')


def _clean(fields: dict) -> dict:
    cleaned = {}
    for key, value in fields.items():
        if isinstance(value, str):
            value = value.strip()
            if not value and key in ('description', 'category', 'image_url'):
                value = None
        cleaned[key] = value
    return cleaned
