"""
Errors raised by the storefront core.

Every error carries a short machine code and a message that can be shown to
the acting user as-is. The storefront boundary turns them into failed
command results; none of them is fatal.
"""


class StoreError(Exception):
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    """Missing or invalid input, raised before anything is written."""
    code = "validation"


class DuplicateAccountError(StoreError):
    code = "duplicate_account"


class AuthenticationError(StoreError):
    code = "authentication"


class IneligibleError(StoreError):
    """Khata attempted before enough prepaid orders."""
    code = "ineligible"


class EmptyCartError(StoreError):
    code = "empty_cart"


class NotLoggedInError(StoreError):
    code = "not_logged_in"


class RoleError(StoreError):
    """A customer-only command was invoked for a shopkeeper, or the reverse."""
    code = "role"


class NotFoundError(StoreError):
    code = "not_found"
