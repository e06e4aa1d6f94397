"""
Typed errors raised by the order core.

Every error carries a stable ``code`` so the API layer can map it to a
transport status without string matching.
"""
from __future__ import annotations


class ShopError(Exception):
    """Base class for expected, recoverable domain errors."""

    code = "SHOP_ERROR"

    def __init__(self, message: str, **details):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFound(ShopError):
    """Customer, product or order does not exist."""

    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id):
        super().__init__(
            f"{resource} {resource_id} not found",
            resource=resource,
            resource_id=str(resource_id),
        )
        self.resource = resource
        self.resource_id = resource_id


class ValidationError(ShopError, ValueError):
    """Request is malformed: empty items, bad quantity, unknown status..."""

    code = "VALIDATION_ERROR"


class InsufficientStock(ShopError):
    """Requested quantity exceeds the stock on hand."""

    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_name: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for product {product_name}: "
            f"requested {requested}, available {available}",
            product_name=product_name,
            requested=requested,
            available=available,
        )
        self.product_name = product_name
        self.requested = requested
        self.available = available


class InvalidStatusTransition(ShopError):
    """Status change not allowed by the order state machine."""

    code = "INVALID_STATE"

    def __init__(self, current, target):
        super().__init__(
            f"Cannot move order from {current.value} to {target.value}",
            current=current.value,
            target=target.value,
        )
        self.current = current
        self.target = target


class NotCancellable(InvalidStatusTransition):
    """Cancellation of a delivered or already cancelled order."""

    code = "NOT_CANCELLABLE"

    def __init__(self, current, target):
        super().__init__(current, target)
        self.message = f"Order in status {current.value} cannot be cancelled"
        self.args = (self.message,)


class Conflict(ShopError):
    """Unique constraint clash, e.g. an email already registered."""

    code = "CONFLICT"


class Unauthenticated(ShopError):
    """No known caller identity on the request."""

    code = "UNAUTHENTICATED"


class PermissionDenied(ShopError):
    """Caller is known but not allowed to perform the operation."""

    code = "FORBIDDEN"
