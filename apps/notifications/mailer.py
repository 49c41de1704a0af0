"""
Email delivery through Django's mail framework.

Sending is fire-and-forget by default: failures are logged and reported
as a False return value. Callers that must fail when delivery fails use
send_email_or_raise.
"""

import logging
from dataclasses import dataclass

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

from .exceptions import NotificationError

logger = logging.getLogger(__name__)


@dataclass
class EmailTemplate:
    """Rendered email ready to be addressed and sent."""

    subject: str
    text: str
    html: str = ''


def _deliver(template: EmailTemplate, to: str) -> None:
    message = EmailMultiAlternatives(
        subject=template.subject,
        body=template.text,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to],
    )
    if template.html:
        message.attach_alternative(template.html, 'text/html')
    message.send(fail_silently=False)


def send_email(template: EmailTemplate, to: str) -> bool:
    """
    Send an email, logging instead of raising on failure.

    Args:
        template: Rendered email
        to: Recipient address

    Returns:
        True if the message was handed to the backend (or sending is disabled)
    """
    if not to:
        logger.warning("Skipping email '%s': no recipient", template.subject)
        return False

    if settings.DISABLE_EMAIL_NOTIFICATIONS:
        logger.info("Email notifications disabled. Would send '%s' to %s", template.subject, to)
        return True

    try:
        _deliver(template, to)
    except Exception:
        logger.exception("Failed to send email '%s' to %s", template.subject, to)
        return False

    logger.info("Email '%s' sent to %s", template.subject, to)
    return True


def send_email_or_raise(template: EmailTemplate, to: str) -> None:
    """
    Send an email and propagate delivery failures.

    Raises:
        NotificationError: If the backend could not send the message
    """
    if settings.DISABLE_EMAIL_NOTIFICATIONS:
        logger.info("Email notifications disabled. Would send '%s' to %s", template.subject, to)
        return

    try:
        _deliver(template, to)
    except Exception as e:
        logger.exception("Failed to send required email '%s' to %s", template.subject, to)
        raise NotificationError(f"Failed to send email: {str(e)}") from e
