"""
Compensation for cancelled orders: give reserved stock back to the catalog.
"""
from __future__ import annotations

import logging
from uuid import UUID

from django.db import OperationalError, transaction

from shop.domain.exceptions import NotFound
from shop.domain.order import Order, OrderStatus, ensure_transition
from shop.infra.repositories import OrderRepository, ProductRepository
from shop.infra.retry import retry_with_backoff


logger = logging.getLogger(__name__)


class CancellationService:
    """Service for cancelling orders (mirror of order creation)."""

    def __init__(
        self,
        order_repo: OrderRepository | None = None,
        product_repo: ProductRepository | None = None,
    ):
        self.order_repo = order_repo or OrderRepository()
        self.product_repo = product_repo or ProductRepository()

    @retry_with_backoff(max_retries=3, initial_delay=0.05, max_delay=1.0, exceptions=(OperationalError,))
    @transaction.atomic
    def cancel_order(self, order_id: UUID) -> Order:
        """Cancel order and restore stock for every line.

        The order row is locked first, so a concurrent second cancellation
        waits and then sees CANCELLED instead of restoring stock twice.
        """
        order = self.order_repo.get_by_id(order_id, for_update=True)
        if not order:
            raise NotFound("Order", order_id)

        previous = order.status
        ensure_transition(previous, OrderStatus.CANCELLED)

        restore = order.quantities_by_product()
        products = self.product_repo.lock_many(restore.keys())
        for product_id, quantity in restore.items():
            product = products.get(product_id)
            if product is None:
                # order items PROTECT their products, so this is corruption
                raise RuntimeError(f"Product {product_id} of order {order.id} is missing")
            product.stock_quantity += quantity
            self.product_repo.save_stock(product)

        order.cancel()
        self.order_repo.save(order)

        logger.info(
            "order_cancelled",
            extra={
                "order_id": str(order.id),
                "customer_id": str(order.customer_id),
                "from_status": previous.value,
                "items_count": len(order.items),
            },
        )
        return order
