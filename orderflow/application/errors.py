"""Business-rule failures raised by the order service.

The set is closed: every rejection the service can produce is one of the
classes below. The API layer maps them to HTTP responses using ``status_code``
and ``code``; nothing here knows about HTTP beyond that number.
"""

from typing import Any, Dict


class OrderServiceError(Exception):
    code = "order_error"
    status_code = 400
    message = "Order operation failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.detail, "code": self.code}


class AccountNotFound(OrderServiceError):
    code = "account_not_found"
    status_code = 404
    message = "Account not found"


class ProductNotFound(OrderServiceError):
    code = "product_not_found"
    status_code = 404
    message = "Product not found"


class ProductUnavailable(OrderServiceError):
    code = "product_unavailable"
    status_code = 409
    message = "Product is not available"


class InventoryMissing(OrderServiceError):
    code = "inventory_missing"
    status_code = 404
    message = "Inventory not found for this product"


class InsufficientStock(OrderServiceError):
    code = "insufficient_stock"
    status_code = 409

    def __init__(self, available: int):
        self.available = available
        super().__init__(f"Insufficient stock. Only {available} items available.")

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "available": self.available}


class OrderNotFound(OrderServiceError):
    code = "order_not_found"
    status_code = 404
    message = "Order not found"


class OrderAlreadyCancelled(OrderServiceError):
    code = "order_already_cancelled"
    status_code = 409
    message = "Order is already cancelled"


class OrderNotCancellable(OrderServiceError):
    code = "order_not_cancellable"
    status_code = 409

    def __init__(self, from_status: str):
        self.from_status = from_status
        super().__init__(f"Cannot cancel order that has been {from_status}")

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "from_status": self.from_status}


class UnauthorizedAccess(OrderServiceError):
    code = "unauthorized_access"
    status_code = 403
    message = "Order not found or unauthorized access"
