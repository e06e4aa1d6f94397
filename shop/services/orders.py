"""
Application services for order operations.
"""
from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from django.conf import settings
from django.db import OperationalError, transaction
from django.utils import timezone

from shop.domain.exceptions import InsufficientStock, NotFound, ValidationError
from shop.domain.order import Order, OrderStatus, parse_status
from shop.infra.repositories import (
    CustomerRepository,
    OrderPage,
    OrderRepository,
    ProductRepository,
)
from shop.infra.retry import retry_with_backoff
from shop.services.compensation import CancellationService


logger = logging.getLogger(__name__)


def clamp_page(limit: int | None, offset: int | None) -> tuple[int, int]:
    """Normalise paging arguments against the configured bounds."""
    if limit is None:
        limit = settings.SHOP_DEFAULT_PAGE_SIZE
    if offset is None:
        offset = 0
    if limit <= 0:
        raise ValidationError("limit must be positive", limit=limit)
    if offset < 0:
        raise ValidationError("offset must not be negative", offset=offset)
    return min(limit, settings.SHOP_MAX_PAGE_SIZE), offset


def _parse_uuid(value, field_name: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid id", **{field_name: str(value)}) from None


def _parse_quantity(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Quantity must be a positive integer", quantity=str(value))
    if value <= 0:
        raise ValidationError("Quantity must be a positive integer", quantity=value)
    return value


class OrderService:
    """Service for order operations."""

    def __init__(
        self,
        order_repo: OrderRepository | None = None,
        product_repo: ProductRepository | None = None,
        customer_repo: CustomerRepository | None = None,
        cancellation: CancellationService | None = None,
    ):
        self.order_repo = order_repo or OrderRepository()
        self.product_repo = product_repo or ProductRepository()
        self.customer_repo = customer_repo or CustomerRepository()
        self.cancellation = cancellation or CancellationService(
            order_repo=self.order_repo,
            product_repo=self.product_repo,
        )

    @retry_with_backoff(max_retries=3, initial_delay=0.05, max_delay=1.0, exceptions=(OperationalError,))
    @transaction.atomic
    def create_order(
        self,
        customer_id: UUID | str,
        items: list[dict],
    ) -> Order:
        """Place an order, reserving stock for every line in one unit of work.

        ``items`` is a list of ``{"product_id": ..., "quantity": ...}`` in
        display order. Either every line is reserved and the order persisted,
        or nothing changes.
        """
        customer_id = _parse_uuid(customer_id, "customer_id")
        if not items:
            raise ValidationError("Order must contain at least one item")

        requested = [
            (_parse_uuid(item.get("product_id"), "product_id"), _parse_quantity(item.get("quantity")))
            for item in items
        ]

        customer = self.customer_repo.get_by_id(customer_id)
        if not customer:
            raise NotFound("Customer", customer_id)

        products = self.product_repo.lock_many(product_id for product_id, _ in requested)

        order = Order(customer_id=customer.id)
        touched = {}
        for product_id, quantity in requested:
            product = products.get(product_id)
            if product is None:
                raise NotFound("Product", product_id)
            if product.stock_quantity < quantity:
                raise InsufficientStock(product.name, quantity, product.stock_quantity)

            product.stock_quantity -= quantity
            touched[product.id] = product
            order.add_item(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_price=product.price,
            )

        for product in touched.values():
            self.product_repo.save_stock(product)

        order.place(timezone.now())
        self.order_repo.save(order)

        logger.info(
            "order_created",
            extra={
                "order_id": str(order.id),
                "customer_id": str(customer.id),
                "items_count": len(order.items),
                "total_amount": str(order.total_amount),
            },
        )
        return order

    def update_order_status(self, order_id: UUID | str, status: str | OrderStatus) -> Order:
        """Administrative status change guarded by the order state machine.

        Any forward move is allowed. Moving to CANCELLED goes through
        cancellation so stock is restored.
        """
        order_id = _parse_uuid(order_id, "order_id")
        target = parse_status(status)

        if target == OrderStatus.CANCELLED:
            return self.cancellation.cancel_order(order_id)
        return self._move_order(order_id, target)

    @retry_with_backoff(max_retries=3, initial_delay=0.05, max_delay=1.0, exceptions=(OperationalError,))
    @transaction.atomic
    def _move_order(self, order_id: UUID, target: OrderStatus) -> Order:
        order = self.order_repo.get_by_id(order_id, for_update=True)
        if not order:
            raise NotFound("Order", order_id)

        previous = order.status
        order.transition_to(target)
        self.order_repo.save(order)

        logger.info(
            "order_status_updated",
            extra={
                "order_id": str(order.id),
                "from_status": previous.value,
                "to_status": target.value,
            },
        )
        return order

    def cancel_order(self, order_id: UUID | str) -> Order:
        """Cancel order and return its reserved stock."""
        return self.cancellation.cancel_order(_parse_uuid(order_id, "order_id"))

    def get_order(self, order_id: UUID | str) -> Order:
        """Get order by ID."""
        order_id = _parse_uuid(order_id, "order_id")
        order = self.order_repo.get_by_id(order_id)
        if not order:
            raise NotFound("Order", order_id)
        return order

    def list_orders(self, limit: int | None = None, offset: int | None = None) -> OrderPage:
        limit, offset = clamp_page(limit, offset)
        return self.order_repo.list_all(limit=limit, offset=offset)

    def get_orders_by_customer(
        self,
        customer_id: UUID | str,
        limit: int | None = None,
        offset: int | None = None,
    ) -> OrderPage:
        """Get orders by customer with pagination."""
        customer_id = _parse_uuid(customer_id, "customer_id")
        limit, offset = clamp_page(limit, offset)
        if not self.customer_repo.get_by_id(customer_id):
            raise NotFound("Customer", customer_id)
        return self.order_repo.get_by_customer(customer_id, limit=limit, offset=offset)

    def get_orders_by_status(
        self,
        status: str | OrderStatus,
        limit: int | None = None,
        offset: int | None = None,
    ) -> OrderPage:
        target = parse_status(status)
        limit, offset = clamp_page(limit, offset)
        return self.order_repo.get_by_status(target, limit=limit, offset=offset)

    def get_orders_by_date_range(
        self,
        start: datetime,
        end: datetime,
        limit: int | None = None,
        offset: int | None = None,
    ) -> OrderPage:
        """Orders placed between ``start`` and ``end``, both inclusive."""
        if start > end:
            raise ValidationError(
                "start must not be after end",
                start=start.isoformat(),
                end=end.isoformat(),
            )
        limit, offset = clamp_page(limit, offset)
        return self.order_repo.get_by_date_range(start, end, limit=limit, offset=offset)
