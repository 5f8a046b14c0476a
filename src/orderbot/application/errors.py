from __future__ import annotations

from typing import Any


class OrderingError(Exception):
    """Base class for failures the conversational layer can explain to the user."""

    code = "ORDERING_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class InvalidInputError(OrderingError):
    code = "VALIDATION_ERROR"


class NotFoundError(OrderingError):
    code = "NOT_FOUND"


class OrderNotFoundError(NotFoundError):
    code = "ORDER_NOT_FOUND"


class OrderItemNotFoundError(NotFoundError):
    code = "ORDER_ITEM_NOT_FOUND"


class MenuNotFoundError(NotFoundError):
    code = "MENU_NOT_FOUND"


class InsufficientStockError(OrderingError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"insufficient stock for product {product_id}: requested={requested}, available={available}",
            details={"productId": product_id, "requested": requested, "available": available},
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InventoryMissingError(OrderingError):
    code = "INVENTORY_MISSING"

    def __init__(self, product_id: str) -> None:
        super().__init__(
            f"no inventory record for product {product_id}",
            details={"productId": product_id},
        )
        self.product_id = product_id


class PreconditionFailedError(OrderingError):
    code = "PRECONDITION_FAILED"


class EmptyOrderError(PreconditionFailedError):
    code = "EMPTY_ORDER"


class MissingContactError(PreconditionFailedError):
    code = "MISSING_CONTACT"


class MissingShippingError(PreconditionFailedError):
    code = "MISSING_SHIPPING"


class MissingAddressError(PreconditionFailedError):
    code = "MISSING_ADDRESS"


class MissingPaymentError(PreconditionFailedError):
    code = "MISSING_PAYMENT"


class OrderNotEditableError(PreconditionFailedError):
    code = "ORDER_NOT_EDITABLE"


class OrderConflictError(OrderingError):
    code = "CONFLICT"
