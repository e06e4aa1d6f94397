"""
Domain model for Order aggregate.

State machine:
    PENDING -> CONFIRMED -> SHIPPED -> DELIVERED, any forward move allowed
    CANCELLED is reachable from every non-terminal state.
    DELIVERED and CANCELLED are terminal.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from shop.domain.exceptions import (
    InvalidStatusTransition,
    NotCancellable,
    ValidationError,
)


class OrderStatus(str, Enum):
    """Order status enumeration."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {
        OrderStatus.CONFIRMED,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def parse_status(value: str | OrderStatus) -> OrderStatus:
    """Resolve a status name, rejecting anything outside the enum."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().upper())
    except ValueError:
        valid = ", ".join(status.value for status in OrderStatus)
        raise ValidationError(
            f"Invalid order status '{value}'. Valid values: {valid}",
            status=str(value),
            valid_values=[status.value for status in OrderStatus],
        ) from None


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _VALID_TRANSITIONS[current]


def ensure_transition(current: OrderStatus, target: OrderStatus) -> None:
    """Single gate for every status change."""
    if can_transition(current, target):
        return
    if target == OrderStatus.CANCELLED:
        raise NotCancellable(current, target)
    raise InvalidStatusTransition(current, target)


class OrderItem:
    """Order line: a snapshot of the product at the time of ordering."""

    def __init__(
        self,
        product_id: UUID,
        product_name: str,
        quantity: int,
        unit_price: Decimal,
        id: UUID | None = None,
    ):
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError("Quantity must be an integer", quantity=str(quantity))
        if quantity <= 0:
            raise ValidationError("Quantity must be positive", quantity=quantity)
        if unit_price < 0:
            raise ValidationError("Price must be non-negative", unit_price=str(unit_price))

        self.id = id or uuid4()
        self._product_id = product_id
        self._product_name = product_name
        self._quantity = quantity
        self._unit_price = unit_price

    @property
    def product_id(self) -> UUID:
        return self._product_id

    @property
    def product_name(self) -> str:
        return self._product_name

    @property
    def quantity(self) -> int:
        return self._quantity

    @property
    def unit_price(self) -> Decimal:
        return self._unit_price

    @property
    def subtotal(self) -> Decimal:
        """Calculate item subtotal."""
        return self._unit_price * self._quantity


class Order:
    """Order aggregate root."""

    def __init__(
        self,
        id: UUID | None = None,
        customer_id: UUID | None = None,
        items: list[OrderItem] | None = None,
        status: OrderStatus = OrderStatus.PENDING,
        order_date: datetime | None = None,
    ):
        self.id = id or uuid4()
        self._customer_id = customer_id
        self._items = list(items or [])
        self._status = status
        self._order_date = order_date

    @property
    def customer_id(self) -> UUID | None:
        return self._customer_id

    @property
    def items(self) -> list[OrderItem]:
        """Get order items (immutable)."""
        return list(self._items)

    @property
    def status(self) -> OrderStatus:
        """Get order status."""
        return self._status

    @property
    def order_date(self) -> datetime | None:
        return self._order_date

    @property
    def is_placed(self) -> bool:
        return self._order_date is not None

    @property
    def is_terminal(self) -> bool:
        return self._status in TERMINAL_STATUSES

    @property
    def total_amount(self) -> Decimal:
        """Calculate total order amount."""
        return sum((item.subtotal for item in self._items), Decimal("0.00"))

    def add_item(
        self,
        product_id: UUID,
        product_name: str,
        quantity: int,
        unit_price: Decimal,
    ) -> OrderItem:
        """Add item to an order that has not been placed yet."""
        if self.is_placed:
            raise ValidationError("Cannot add items to a placed order", order_id=str(self.id))

        item = OrderItem(product_id, product_name, quantity, unit_price)
        self._items.append(item)
        return item

    def place(self, order_date: datetime) -> None:
        """Seal the item list and stamp the order date."""
        if self.is_placed:
            raise ValidationError("Order has already been placed", order_id=str(self.id))
        if not self._items:
            raise ValidationError("Order must contain at least one item")

        self._order_date = order_date
        self._status = OrderStatus.PENDING

    def transition_to(self, target: OrderStatus) -> None:
        ensure_transition(self._status, target)
        self._status = target

    def confirm(self) -> None:
        self.transition_to(OrderStatus.CONFIRMED)

    def ship(self) -> None:
        self.transition_to(OrderStatus.SHIPPED)

    def deliver(self) -> None:
        self.transition_to(OrderStatus.DELIVERED)

    def cancel(self) -> None:
        """Cancel order. Stock restoration is the caller's unit of work."""
        self.transition_to(OrderStatus.CANCELLED)

    def quantities_by_product(self) -> dict[UUID, int]:
        """Summed quantity per product across all lines."""
        totals: dict[UUID, int] = {}
        for item in self._items:
            totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity
        return totals
