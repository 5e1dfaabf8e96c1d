"""
Cart Errors

Error message constants and the exception taxonomy used by cart operations.
None of these cross the CartManager boundary: each is caught by the operation
that raised it and turned into a notification.
"""

from cartsync.models import NotificationKind

# Inventory errors
ERROR_FETCH_FAILED = "Inventory request failed"
ERROR_INVALID_PAYLOAD = "Inventory returned an invalid payload"

# Cart errors
ERROR_PRODUCT_NOT_IN_CART = "Product not in cart"
ERROR_PRODUCT_OUT_OF_STOCK = "Requested quantity out of stock"
ERROR_INVALID_AMOUNT = "Amount must be at least 1"

# Storage errors
ERROR_SNAPSHOT_WRITE = "Cart snapshot could not be saved"
ERROR_SNAPSHOT_CORRUPT = "Cart snapshot is corrupt"


class CartError(Exception):
    """
    Base class for recoverable cart failures.

    `kind` is the notification emitted for this failure. When None, the
    operation that caught it emits its own error kind instead.
    """

    kind: NotificationKind | None = None

    def __init__(self, message: str, product_id: int | None = None):
        super().__init__(message)
        self.message = message
        self.product_id = product_id

    def notification_kind(self, default: NotificationKind) -> NotificationKind:
        return self.kind if self.kind is not None else default


class FetchFailure(CartError):
    """Inventory source unreachable, errored or returned garbage."""


class NotFound(CartError):
    """Operation targets a product id that is not in the cart."""

    def __init__(self, product_id: int):
        super().__init__(ERROR_PRODUCT_NOT_IN_CART, product_id)


class OutOfStock(CartError):
    """Requested amount exceeds available stock."""

    kind = NotificationKind.OUT_OF_STOCK

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(ERROR_PRODUCT_OUT_OF_STOCK, product_id)
        self.requested = requested
        self.available = available


class InvalidAmount(CartError):
    """Requested amount is below 1."""

    def __init__(self, product_id: int, amount: int):
        super().__init__(ERROR_INVALID_AMOUNT, product_id)
        self.amount = amount


class PersistenceError(CartError):
    """Snapshot write failed; memory keeps the previous cart."""

    kind = NotificationKind.PERSISTENCE_ERROR


__all__ = [
    "CartError",
    "FetchFailure",
    "NotFound",
    "OutOfStock",
    "InvalidAmount",
    "PersistenceError",
    "ERROR_FETCH_FAILED",
    "ERROR_INVALID_PAYLOAD",
    "ERROR_PRODUCT_NOT_IN_CART",
    "ERROR_PRODUCT_OUT_OF_STOCK",
    "ERROR_INVALID_AMOUNT",
    "ERROR_SNAPSHOT_WRITE",
    "ERROR_SNAPSHOT_CORRUPT",
]
