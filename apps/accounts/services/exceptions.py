"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Raised when user registration fails."""
    pass


class RegistrationEmailError(AccountsServiceError):
    """Raised when the verification email for a new account cannot be sent."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when the account is pending approval or suspended."""
    pass


class InvalidTokenError(AccountsServiceError):
    """Raised when verification/reset token is invalid or expired."""
    pass


class TokenAlreadyUsedError(InvalidTokenError):
    """Raised when a single-use token is presented a second time."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    pass


class EmailNotVerifiedError(AccountsServiceError):
    """Raised when an action requires a verified email address."""
    pass


class PasswordAlreadySetError(AccountsServiceError):
    """Raised when setting an initial password twice."""
    pass


class InvalidUserStateError(AccountsServiceError):
    """Raised when a lifecycle action does not apply to the user's status."""
    pass
