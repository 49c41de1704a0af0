"""Builders for every transactional email the application sends."""

from django.conf import settings
from django.utils.html import escape

from .mailer import EmailTemplate


def format_cents(amount_cents: int) -> str:
    """Format an integer amount of cents as dollars, e.g. 1250 -> '$12.50'."""
    return f"${amount_cents / 100:,.2f}"


def _link(path: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}{path}"


def _html(heading: str, *paragraphs: str) -> str:
    body = ''.join(f'<p>{p}</p>' for p in paragraphs)
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<h2>{escape(heading)}</h2>{body}'
        '<p style="color:#555;font-size:14px;">This is an automated notification.</p>'
        '</div>'
    )


# =============================================================================
# Expense requests
# =============================================================================

def expense_submitted_email(*, approver_name, title, amount_cents, requester_name, urgency_label):
    amount = format_cents(amount_cents)
    return EmailTemplate(
        subject=f"New Expense Request: {title}",
        text=(
            f"Hello {approver_name},\n\n"
            f"{requester_name} submitted a new expense request.\n"
            f"Title: {title}\nAmount: {amount}\nUrgency: {urgency_label}\n\n"
            f"Review it at {_link('/expenses')}"
        ),
        html=_html(
            'New Expense Request',
            f"Hello {escape(approver_name)},",
            f"{escape(requester_name)} submitted <strong>{escape(title)}</strong> for {amount}.",
            f"Urgency: {escape(urgency_label)}",
            f'<a href="{_link("/expenses")}">Review request</a>',
        ),
    )


def expense_approved_email(*, requester_name, title, amount_cents, approver_name):
    amount = format_cents(amount_cents)
    return EmailTemplate(
        subject=f"Expense Request Approved: {title}",
        text=(
            f"Hello {requester_name},\n\n"
            f"Your expense request \"{title}\" ({amount}) was approved by {approver_name}."
        ),
        html=_html(
            'Expense Request Approved',
            f"Hello {escape(requester_name)},",
            f"Your expense request <strong>{escape(title)}</strong> ({amount}) "
            f"was approved by {escape(approver_name)}.",
        ),
    )


def expense_denied_email(*, requester_name, title, amount_cents, reason):
    amount = format_cents(amount_cents)
    return EmailTemplate(
        subject=f"Expense Request Denied: {title}",
        text=(
            f"Hello {requester_name},\n\n"
            f"Your expense request \"{title}\" ({amount}) was denied.\nReason: {reason}"
        ),
        html=_html(
            'Expense Request Denied',
            f"Hello {escape(requester_name)},",
            f"Your expense request <strong>{escape(title)}</strong> ({amount}) was denied.",
            f"Reason: {escape(reason)}",
        ),
    )


def expense_paid_email(*, requester_name, title, amount_cents, report_required):
    amount = format_cents(amount_cents)
    follow_up = (
        "Please submit an expense report with your receipts."
        if report_required else
        "No expense report is required."
    )
    return EmailTemplate(
        subject=f"Expense Request Paid: {title}",
        text=(
            f"Hello {requester_name},\n\n"
            f"Your expense request \"{title}\" has been paid ({amount}).\n{follow_up}"
        ),
        html=_html(
            'Expense Request Paid',
            f"Hello {escape(requester_name)},",
            f"Your expense request <strong>{escape(title)}</strong> has been paid ({amount}).",
            follow_up,
        ),
    )


def expense_change_requested_by_admin_email(*, requester_name, title, comment, admin_name):
    return EmailTemplate(
        subject=f"Changes Requested: {title}",
        text=(
            f"Hello {requester_name},\n\n"
            f"{admin_name} requested changes to your expense request \"{title}\".\n"
            f"Comment: {comment}\n\nUpdate it at {_link('/expenses')}"
        ),
        html=_html(
            'Changes Requested',
            f"Hello {escape(requester_name)},",
            f"{escape(admin_name)} requested changes to <strong>{escape(title)}</strong>.",
            f"Comment: {escape(comment)}",
        ),
    )


def expense_change_requested_by_requester_email(*, approver_name, title, requester_name, comment):
    return EmailTemplate(
        subject=f"Change Requested on Approved Expense: {title}",
        text=(
            f"Hello {approver_name},\n\n"
            f"{requester_name} asked to change the approved expense request \"{title}\".\n"
            f"Comment: {comment}"
        ),
        html=_html(
            'Change Requested on Approved Expense',
            f"Hello {escape(approver_name)},",
            f"{escape(requester_name)} asked to change <strong>{escape(title)}</strong>.",
            f"Comment: {escape(comment)}",
        ),
    )


def reminder_email(*, approver_name, pending_count):
    plural = 's' if pending_count != 1 else ''
    return EmailTemplate(
        subject=f"Reminder: {pending_count} pending expense request{plural}",
        text=(
            f"Hello {approver_name},\n\n"
            f"You have {pending_count} pending expense request{plural} to review.\n"
            f"{_link('/expenses')}"
        ),
        html=_html(
            'Pending Expense Requests',
            f"Hello {escape(approver_name)},",
            f"You have {pending_count} pending expense request{plural} to review.",
        ),
    )


# =============================================================================
# Expense reports
# =============================================================================

def report_submitted_email(*, approver_name, report_title, expense_title, requester_name):
    return EmailTemplate(
        subject=f"Expense Report Submitted: {report_title}",
        text=(
            f"Hello {approver_name},\n\n"
            f"{requester_name} submitted the report \"{report_title}\" "
            f"for the expense \"{expense_title}\"."
        ),
        html=_html(
            'Expense Report Submitted',
            f"Hello {escape(approver_name)},",
            f"{escape(requester_name)} submitted <strong>{escape(report_title)}</strong> "
            f"for {escape(expense_title)}.",
        ),
    )


def report_approved_email(*, requester_name, report_title, expense_title):
    return EmailTemplate(
        subject=f"Expense Report Approved: {report_title}",
        text=(
            f"Hello {requester_name},\n\n"
            f"Your report \"{report_title}\" for \"{expense_title}\" was approved."
        ),
        html=_html(
            'Expense Report Approved',
            f"Hello {escape(requester_name)},",
            f"Your report <strong>{escape(report_title)}</strong> for "
            f"{escape(expense_title)} was approved.",
        ),
    )


def report_change_requested_email(*, requester_name, report_title, comment):
    return EmailTemplate(
        subject=f"Changes Requested on Report: {report_title}",
        text=(
            f"Hello {requester_name},\n\n"
            f"Changes were requested on your report \"{report_title}\".\nComment: {comment}"
        ),
        html=_html(
            'Changes Requested on Report',
            f"Hello {escape(requester_name)},",
            f"Changes were requested on <strong>{escape(report_title)}</strong>.",
            f"Comment: {escape(comment)}",
        ),
    )


# =============================================================================
# Accounts
# =============================================================================

def verification_email(*, name, token):
    url = _link(f'/verify?token={token}')
    return EmailTemplate(
        subject="Verify your email address",
        text=(
            f"Hello {name},\n\n"
            f"Please verify your email address by opening the link below:\n{url}\n\n"
            "The link expires in 24 hours."
        ),
        html=_html(
            'Verify your email address',
            f"Hello {escape(name)},",
            f'<a href="{url}">Verify email address</a>',
            "The link expires in 24 hours.",
        ),
    )


def password_reset_email(*, name, token):
    url = _link(f'/reset-password?token={token}')
    return EmailTemplate(
        subject="Reset your password",
        text=(
            f"Hello {name},\n\n"
            f"Use the link below to reset your password:\n{url}\n\n"
            "The link expires in one hour. Ignore this email if you did not ask for it."
        ),
        html=_html(
            'Reset your password',
            f"Hello {escape(name)},",
            f'<a href="{url}">Reset password</a>',
            "The link expires in one hour.",
        ),
    )


# =============================================================================
# Wish list
# =============================================================================

def wishlist_access_code_email(*, code, ttl_minutes):
    return EmailTemplate(
        subject="Your wish list access code",
        text=f"Your access code is {code}. It expires in {ttl_minutes} minutes.",
        html=_html(
            'Wish list access code',
            f"Your access code is <strong>{code}</strong>.",
            f"It expires in {ttl_minutes} minutes.",
        ),
    )


def wishlist_contribution_email(*, item_title, amount_cents, donor_name, donor_email, note):
    donor_label = (donor_name or '').strip() or 'Anonymous donor'
    amount = format_cents(amount_cents)
    text = f"New contribution\n\nItem: {item_title}\nAmount: {amount}\nDonor: {donor_label}"
    extra = []
    if donor_email:
        text += f"\nEmail: {donor_email}"
        extra.append(f"Donor email: {escape(donor_email)}")
    if note:
        text += f"\nNote: {note}"
        extra.append(f"Note: {escape(note)}")
    return EmailTemplate(
        subject=f"New Wish List Contribution: {item_title}",
        text=text,
        html=_html(
            'New Contribution Received',
            f"{escape(donor_label)} just contributed toward an item.",
            f"Item: <strong>{escape(item_title)}</strong>",
            f"Amount: {amount}",
            *extra,
        ),
    )
