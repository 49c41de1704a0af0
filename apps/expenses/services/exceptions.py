"""Domain-specific exceptions for expense services."""


class ExpensesServiceError(Exception):
    """Base exception for expense services."""
    pass


class ExpenseNotFoundError(ExpensesServiceError):
    """Raised when expense request does not exist."""
    pass


class ExpenseItemNotFoundError(ExpensesServiceError):
    """Raised when expense item does not exist."""
    pass


class ExpensePermissionError(ExpensesServiceError):
    """Raised when the acting user may not touch this expense."""
    pass


class InvalidStatusTransitionError(ExpensesServiceError):
    """Raised when the expense is not in a status that allows the action."""
    pass


class AlreadyPaidError(InvalidStatusTransitionError):
    """Raised when marking an expense paid a second time."""
    pass


class NoAdditionalPaymentError(ExpensesServiceError):
    """Raised when a follow-up payment is requested but nothing is owed."""
    pass


class InvalidExpenseDataError(ExpensesServiceError):
    """Raised when submitted expense data breaks a business rule."""
    pass
