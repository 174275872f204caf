"""
Common Error Constants and Exceptions

User-facing messages live here so the view, the router and the tests agree on
the exact wording.
"""

# Panel alerts
MSG_SELECT_ITEMS = "Please select items to checkout."
MSG_ITEM_FAILED = "Failed to process an item. Please try again."
MSG_CHECKOUT_ERROR = "An error occurred during checkout. Please try again."
MSG_CHECKOUT_SUCCESS = "Checkout successful"
MSG_CART_EMPTY = "Your cart is empty."

# Request errors
ERROR_NO_SESSION = "No signed-in user in session"
ERROR_UNAUTHORIZED = "Unauthorized"
ERROR_CART_ITEM_NOT_FOUND = "Cart item not found"


class NoSessionError(Exception):
    """Raised when a cart panel is opened without a signed-in user."""

    def __init__(self, message: str = ERROR_NO_SESSION):
        super().__init__(message)


class CartApiError(ValueError):
    """
    A call to the content API failed.

    `status_code` is the HTTP status for non-success responses and None for
    transport failures (timeouts, refused connections, ...).
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_transport_error(self) -> bool:
        return self.status_code is None
