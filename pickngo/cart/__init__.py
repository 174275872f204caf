"""Cart package: models and the cart panel view-model."""
from .models import CartItem, TransactionRecord
from .view import CartView, CheckoutResult, CheckoutStatus

__all__ = [
    "CartItem",
    "TransactionRecord",
    "CartView",
    "CheckoutResult",
    "CheckoutStatus",
]
