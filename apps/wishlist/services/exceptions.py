class WishlistServiceError(Exception):
    """Base exception for wish list service errors."""
    pass


class WishlistItemNotFoundError(WishlistServiceError):
    """Raised when an item does not exist or is not open to donors."""
    pass


class ItemFulfilledError(WishlistServiceError):
    """Raised when nothing more is needed for an item."""
    pass


class DonationExceedsNeedError(WishlistServiceError):
    """Raised when a pledge is larger than what is still needed."""
    pass


class RateLimitExceededError(WishlistServiceError):
    """Raised when one address pledges too often."""
    pass


class AccessCodeError(WishlistServiceError):
    """Base exception for the emailed access code flow."""
    pass


class EmailNotAllowedError(AccessCodeError):
    """Raised when an email is not on the wish list admin allow-list."""
    pass


class NoPendingCodeError(AccessCodeError):
    """Raised when no code was issued for the email."""
    pass


class AccessCodeExpiredError(AccessCodeError):
    """Raised when the issued code is past its expiry."""
    pass


class InvalidAccessCodeError(AccessCodeError):
    """Raised when the code does not match."""
    pass


class TooManyCodeAttemptsError(AccessCodeError):
    """Raised when a pending code has had too many wrong guesses."""
    pass
