# backend/services/errors.py
"""Failures raised by the checkout and order services.

Every error carries a stable ``code`` for clients and a human-readable
``message``. Routes never show anything else to the caller.
"""


class CheckoutError(Exception):
    code = "CHECKOUT_FAILED"
    default_message = "Checkout failed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class OrderingDisabled(CheckoutError):
    code = "ORDERING_DISABLED"
    default_message = "Online ordering is not currently available"


class MissingField(CheckoutError):
    code = "MISSING_FIELD"


class CartExpired(CheckoutError):
    code = "CART_EXPIRED"
    default_message = "Your cart has expired, please add the items again"


class EmptyCart(CheckoutError):
    code = "EMPTY_CART"
    default_message = "Cart is empty"


class AllItemsGone(CheckoutError):
    code = "ALL_ITEMS_GONE"
    default_message = "None of the books in your cart are available any more"


class BookNotFound(CheckoutError):
    code = "BOOK_NOT_FOUND"
    default_message = "Book not found"


class InsufficientStock(CheckoutError):
    code = "INSUFFICIENT_STOCK"
    default_message = "Insufficient stock"


class ConcurrentModification(CheckoutError):
    code = "CONCURRENT_MODIFICATION"
    default_message = "The store is busy right now, please try again"


class OrderFailed(CheckoutError):
    code = "ORDER_FAILED"
    default_message = "Failed to create order"


class PaymentAlreadyUsed(CheckoutError):
    code = "PAYMENT_ALREADY_USED"
    default_message = "Payment has already been used for another order"


class OrderNotFound(CheckoutError):
    code = "ORDER_NOT_FOUND"
    default_message = "Order not found"


class InvalidStatusTransition(CheckoutError):
    code = "INVALID_STATUS_TRANSITION"


# Codes reported by the payment verifier (it returns results, it does not raise)
PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
PAYMENT_STATUS_INVALID = "PAYMENT_STATUS_INVALID"
AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
CURRENCY_MISMATCH = "CURRENCY_MISMATCH"
GATEWAY_ERROR = "GATEWAY_ERROR"

# Non-fatal, reported alongside a successful checkout
PRICE_DRIFT = "PRICE_DRIFT"


class CartLimitExceeded(CheckoutError):
    code = "CART_LIMIT_EXCEEDED"


class ItemNotInCart(CheckoutError):
    code = "ITEM_NOT_IN_CART"
    default_message = "Item not found in cart"


class InquiriesClosed(CheckoutError):
    code = "INQUIRIES_CLOSED"
    default_message = "Inquiries are not accepted when online ordering is enabled"


class InquiryFailed(CheckoutError):
    code = "INQUIRY_FAILED"
    default_message = "Failed to submit inquiry"


class InquiryNotFound(CheckoutError):
    code = "INQUIRY_NOT_FOUND"
    default_message = "Inquiry not found"
