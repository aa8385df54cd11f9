"""
Checkout module package exports.

- CheckoutController
- CheckoutView
- CartItemsTableModel
- PaymentSplitForm
"""

from .controller import CheckoutController
from .view import CheckoutView
from .model import CartItemsTableModel
from .payment_split_form import PaymentSplitForm

__all__ = [
    "CheckoutController",
    "CheckoutView",
    "CartItemsTableModel",
    "PaymentSplitForm",
]
