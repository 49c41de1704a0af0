"""Domain-specific exceptions for report services."""


class ReportsServiceError(Exception):
    """Base exception for report services."""
    pass


class ReportNotFoundError(ReportsServiceError):
    """Raised when expense report does not exist."""
    pass


class ReportPermissionError(ReportsServiceError):
    """Raised when the acting user may not touch this report."""
    pass


class InvalidReportStatusError(ReportsServiceError):
    """Raised when the report or its expense is in the wrong status for the action."""
    pass


class MissingAttachmentsError(ReportsServiceError):
    """
    Raised when a report does not carry the receipts it needs.

    required and provided are set when the shortfall is a simple count.
    """

    def __init__(self, message, required=None, provided=None):
        super().__init__(message)
        self.required = required
        self.provided = provided
