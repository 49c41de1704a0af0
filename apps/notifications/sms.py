"""
SMS delivery through Twilio.

When Twilio credentials are not configured the message is only logged.
"""

import logging
from dataclasses import dataclass

from django.conf import settings
from twilio.rest import Client

from .templates import format_cents

logger = logging.getLogger(__name__)


@dataclass
class SmsMessage:
    body: str


def send_sms(message: SmsMessage, to: str) -> bool:
    """Send a text message; returns False on failure instead of raising."""
    if not settings.TWILIO_ACCOUNT_SID or not settings.TWILIO_AUTH_TOKEN:
        logger.info("Twilio not configured, SMS to %s would be sent: %s", to, message.body)
        return True

    if not to:
        logger.warning("Skipping SMS: no recipient")
        return False

    try:
        client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        client.messages.create(
            body=message.body,
            from_=settings.TWILIO_PHONE_NUMBER,
            to=to,
        )
    except Exception:
        logger.exception("Failed to send SMS to %s", to)
        return False
    return True


def expense_submitted_sms(title, amount_cents, requester_name):
    return SmsMessage(
        f"New expense request: {title} ({format_cents(amount_cents)}) "
        f"from {requester_name}. Please review."
    )


def expense_approved_sms(title, amount_cents):
    return SmsMessage(f'Your expense request "{title}" ({format_cents(amount_cents)}) has been approved.')


def expense_denied_sms(title, amount_cents, reason=None):
    suffix = f" Reason: {reason}" if reason else ''
    return SmsMessage(
        f'Your expense request "{title}" ({format_cents(amount_cents)}) has been denied.{suffix}'
    )


def expense_paid_sms(title, amount_cents):
    return SmsMessage(f'Your expense request "{title}" ({format_cents(amount_cents)}) has been paid.')


def reminder_sms(pending_count):
    plural = 's' if pending_count > 1 else ''
    return SmsMessage(f"Reminder: You have {pending_count} pending expense request{plural} to review.")
