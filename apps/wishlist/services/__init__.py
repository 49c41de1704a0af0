from .exceptions import (
    WishlistServiceError,
    WishlistItemNotFoundError,
    ItemFulfilledError,
    DonationExceedsNeedError,
    RateLimitExceededError,
    AccessCodeError,
    EmailNotAllowedError,
    NoPendingCodeError,
    AccessCodeExpiredError,
    InvalidAccessCodeError,
    TooManyCodeAttemptsError,
)
from .catalog import (
    with_progress,
    list_items,
    get_item,
    get_active_item,
    create_item,
    update_item,
    delete_item,
    list_contributions,
)
from .donations import hash_ip, confirm_item, contribute_to_item
from .access import (
    normalize_email,
    is_email_allowed,
    issue_access_code,
    verify_access_code,
    has_wishlist_access,
)

__all__ = [
    # Exceptions
    'WishlistServiceError',
    'WishlistItemNotFoundError',
    'ItemFulfilledError',
    'DonationExceedsNeedError',
    'RateLimitExceededError',
    'AccessCodeError',
    'EmailNotAllowedError',
    'NoPendingCodeError',
    'AccessCodeExpiredError',
    'InvalidAccessCodeError',
    'TooManyCodeAttemptsError',
    # Services
    'with_progress',
    'list_items',
    'get_item',
    'get_active_item',
    'create_item',
    'update_item',
    'delete_item',
    'list_contributions',
    'hash_ip',
    'confirm_item',
    'contribute_to_item',
    'normalize_email',
    'is_email_allowed',
    'issue_access_code',
    'verify_access_code',
    'has_wishlist_access',
]
