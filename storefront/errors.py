# storefront/errors.py
"""Client-facing error types.

Every ``StorefrontError`` knows its HTTP status and the message that is safe
to show to a client. ``main.py`` renders them as ``{"error", "detail"}``.
"""


class StorefrontError(Exception):
    status_code = 500
    title = "Request failed"

    @property
    def public_detail(self) -> str:
        return str(self)


class CheckoutError(StorefrontError):
    status_code = 400
    title = "Checkout failed"


class EmptyCartError(CheckoutError):
    def __init__(self, message: str = "Order items is empty"):
        super().__init__(message)


class ProductNotFoundError(CheckoutError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class InsufficientStockError(CheckoutError):
    def __init__(self, message: str = "Cannot place order: not enough stock for this product"):
        super().__init__(message)


class QuantityTooLargeError(CheckoutError):
    def __init__(self, product_id: int, quantity: int, limit: int):
        self.product_id = product_id
        self.quantity = quantity
        super().__init__(f"Quantity {quantity} for product {product_id} is over the limit of {limit} per line")


class CheckoutFailedError(CheckoutError):
    """Unexpected failure. The underlying message is kept for logs only."""

    status_code = 500

    @property
    def public_detail(self) -> str:
        return "Checkout could not be completed"


class SequencerExhaustedError(CheckoutError):
    status_code = 503

    def __init__(self, message: str = "OrderIdSeq not available"):
        super().__init__(message)


class OrderNotFoundError(StorefrontError):
    status_code = 404
    title = "Order not found"

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"OrderID not found: {order_id}")


class QuoteError(StorefrontError):
    status_code = 400
    title = "Quote failed"


class QuoteProductNotFoundError(QuoteError):
    status_code = 404

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class StockGuardError(Exception):
    """Raised inside the transaction when a decrement would oversell."""
