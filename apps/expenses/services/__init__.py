"""Services for expenses business logic."""

from .exceptions import (
    ExpensesServiceError,
    ExpenseNotFoundError,
    ExpenseItemNotFoundError,
    ExpensePermissionError,
    InvalidStatusTransitionError,
    AlreadyPaidError,
    NoAdditionalPaymentError,
    InvalidExpenseDataError,
)
from .status_tracking import record_status_event, change_status
from .expense_queries import (
    get_expense_for_update,
    get_expense,
    can_view_expense,
    get_expense_for_user,
    visible_expenses,
    list_expenses,
    filter_expenses_for_export,
    get_dashboard_stats,
)
from .expense_submission import create_expense, update_expense
from .payment import approved_item_amount, calculate_approved_amount, mark_expense_paid
from .expense_workflow import (
    approve_expense,
    deny_expense,
    undo_expense_approval,
    update_expense_status,
    admin_request_change,
    request_expense_change,
    close_expense,
)
from .item_approvals import (
    approve_item,
    deny_item,
    request_item_change,
    undo_item_approval,
    update_item_category,
)
from .expense_tagging import UNCHANGED, update_account, update_expense_type
from .expense_notes import add_note, list_notes, upsert_pastor_remark
from .csv_export import iter_expense_csv, get_csv_filename
from .reminders import get_stale_expenses, send_pending_reminders

__all__ = [
    # Exceptions
    'ExpensesServiceError',
    'ExpenseNotFoundError',
    'ExpenseItemNotFoundError',
    'ExpensePermissionError',
    'InvalidStatusTransitionError',
    'AlreadyPaidError',
    'NoAdditionalPaymentError',
    'InvalidExpenseDataError',
    # Services
    'record_status_event',
    'change_status',
    'get_expense_for_update',
    'get_expense',
    'can_view_expense',
    'get_expense_for_user',
    'visible_expenses',
    'list_expenses',
    'filter_expenses_for_export',
    'get_dashboard_stats',
    'create_expense',
    'update_expense',
    'approved_item_amount',
    'calculate_approved_amount',
    'mark_expense_paid',
    'approve_expense',
    'deny_expense',
    'undo_expense_approval',
    'update_expense_status',
    'admin_request_change',
    'request_expense_change',
    'close_expense',
    'approve_item',
    'deny_item',
    'request_item_change',
    'undo_item_approval',
    'update_item_category',
    'UNCHANGED',
    'update_account',
    'update_expense_type',
    'add_note',
    'list_notes',
    'upsert_pastor_remark',
    'iter_expense_csv',
    'get_csv_filename',
    'get_stale_expenses',
    'send_pending_reminders',
]
