"""Status transitions and their audit trail."""

from typing import Iterable, Optional
import logging

from apps.expenses.models import ExpenseRequest, StatusEvent

logger = logging.getLogger(__name__)


def record_status_event(
    *,
    expense: ExpenseRequest,
    from_status: Optional[str],
    to_status: str,
    actor,
    reason: Optional[str] = None
) -> StatusEvent:
    """Append one audit event for an expense."""
    return StatusEvent.objects.create(
        expense=expense,
        from_status=from_status,
        to_status=to_status,
        actor=actor,
        reason=reason or None,
    )


def change_status(
    *,
    expense: ExpenseRequest,
    to_status: str,
    actor,
    reason: Optional[str] = None,
    update_fields: Iterable[str] = ()
) -> StatusEvent:
    """
    Move an expense to a new status and record the transition.

    Must run inside the caller's transaction so that the status change and
    its event are committed together.

    Args:
        expense: Expense, usually locked with select_for_update
        to_status: Target ExpenseStatus value
        actor: User performing the transition
        reason: Optional reason stored on the event
        update_fields: Other fields already set on the instance to persist

    Returns:
        The created StatusEvent
    """
    from_status = expense.status
    expense.status = to_status
    expense.save(update_fields=['status', 'updated_at', *update_fields])

    logger.info(
        "Expense %s moved %s -> %s by %s",
        expense.id, from_status, to_status, getattr(actor, 'id', None)
    )
    return record_status_event(
        expense=expense,
        from_status=from_status,
        to_status=to_status,
        actor=actor,
        reason=reason,
    )
