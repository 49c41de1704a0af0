"""Services for expense report business logic."""

from .exceptions import (
    ReportsServiceError,
    ReportNotFoundError,
    ReportPermissionError,
    InvalidReportStatusError,
    MissingAttachmentsError,
)
from .report_queries import (
    get_report_for_update,
    get_report,
    can_access_report,
    list_reports,
    add_report_note,
    list_report_notes,
)
from .report_submission import (
    count_required_attachments,
    validate_report_attachments,
    create_report,
    update_report,
)
from .report_review import (
    approve_report,
    deny_report,
    request_report_change,
    close_report,
)

__all__ = [
    # Exceptions
    'ReportsServiceError',
    'ReportNotFoundError',
    'ReportPermissionError',
    'InvalidReportStatusError',
    'MissingAttachmentsError',
    # Services
    'get_report_for_update',
    'get_report',
    'can_access_report',
    'list_reports',
    'add_report_note',
    'list_report_notes',
    'count_required_attachments',
    'validate_report_attachments',
    'create_report',
    'update_report',
    'approve_report',
    'deny_report',
    'request_report_change',
    'close_report',
]
