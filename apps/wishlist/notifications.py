import logging

from django.conf import settings
from django.db import transaction

from apps.notifications.mailer import send_email
from apps.notifications.templates import wishlist_contribution_email

logger = logging.getLogger(__name__)


def notify_contribution_received(contribution):
    """Email the donations inbox after the contribution commits."""
    recipient = settings.WISHLIST_NOTIFICATION_EMAIL
    if not recipient:
        logger.info("No wish list notification email configured; skipping contribution email")
        return

    def _send():
        send_email(
            wishlist_contribution_email(
                item_title=contribution.item.title,
                amount_cents=contribution.amount_cents,
                donor_name=contribution.donor_name,
                donor_email=contribution.donor_email,
                note=contribution.note,
            ),
            recipient,
        )

    transaction.on_commit(_send, robust=True)
