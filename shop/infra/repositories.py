"""
Infrastructure repositories for domain entities.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from django.contrib.auth.hashers import make_password
from django.db import transaction
from django.db.models import Count, Q, QuerySet, Sum

from shop.domain.order import Order, OrderItem, OrderStatus
from shop.infra.locks import lock_order, lock_products
from shop.infra.models import (
    CustomerORM,
    OrderItemORM,
    OrderORM,
    ProductORM,
)

logger = logging.getLogger(__name__)


@dataclass
class OrderPage:
    """One page of orders plus the size of the full result set."""
    items: list[Order] = field(default_factory=list)
    total_count: int = 0
    limit: int = 50
    offset: int = 0


class CustomerRepository:
    """Repository for Customer entities."""

    def get_by_id(self, customer_id: UUID | str) -> CustomerORM | None:
        """Get customer by ID."""
        return CustomerORM.objects.filter(id=customer_id).first()

    def get_by_email(self, email: str) -> CustomerORM | None:
        return CustomerORM.objects.filter(email__iexact=email).first()

    def email_exists(self, email: str) -> bool:
        return CustomerORM.objects.filter(email__iexact=email).exists()

    def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str | None = None,
        role: str = "USER",
    ) -> UUID:
        """Create new customer."""
        new_customer = CustomerORM.objects.create(
            first_name=first_name,
            last_name=last_name,
            email=email.lower(),
            password=make_password(password),
            role=role,
        )
        return new_customer.id


class ProductRepository:
    """Repository for catalog products."""

    def get_by_id(self, product_id: UUID | str) -> ProductORM | None:
        return ProductORM.objects.filter(id=product_id).first()

    def lock_many(self, product_ids) -> dict[UUID, ProductORM]:
        """Lock product rows for a stock read-modify-write."""
        return lock_products(product_ids)

    def save_stock(self, product: ProductORM) -> None:
        if product.stock_quantity < 0:
            raise ValueError(
                f"Stock for product {product.id} cannot be negative: {product.stock_quantity}"
            )
        product.save(update_fields=["stock_quantity", "updated_at"])

    def search(
        self,
        category: str | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[ProductORM], int]:
        queryset = ProductORM.objects.all()
        if category:
            queryset = queryset.filter(category__iexact=category)
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(description__icontains=search)
            )
        queryset = queryset.order_by("name", "id")
        return list(queryset[offset:offset + limit]), queryset.count()

    def below_stock(self, threshold: int) -> list[ProductORM]:
        return list(
            ProductORM.objects
            .filter(stock_quantity__lt=threshold)
            .order_by("stock_quantity", "name")
        )


class OrderRepository:
    """Repository for Order aggregate."""

    def get_by_id(self, order_id: UUID | str, for_update: bool = False) -> Order | None:
        """Get order by ID with items (no N+1).

        With ``for_update`` the order row stays locked until the surrounding
        transaction ends.
        """
        if for_update:
            order_orm = lock_order(order_id)
            if order_orm is None:
                return None
            return self._to_domain(order_orm)

        order_orm = (
            OrderORM.objects
            .prefetch_related("items")
            .filter(id=order_id)
            .first()
        )
        if order_orm is None:
            return None
        return self._to_domain(order_orm)

    def list_all(self, limit: int = 50, offset: int = 0) -> OrderPage:
        return self._page(OrderORM.objects.all(), limit, offset)

    def get_by_customer(self, customer_id: UUID, limit: int = 50, offset: int = 0) -> OrderPage:
        """Get orders by customer with pagination."""
        return self._page(OrderORM.objects.filter(customer_id=customer_id), limit, offset)

    def get_by_status(self, status: OrderStatus, limit: int = 50, offset: int = 0) -> OrderPage:
        return self._page(OrderORM.objects.filter(status=status.value), limit, offset)

    def get_by_date_range(
        self,
        start: datetime,
        end: datetime,
        limit: int = 50,
        offset: int = 0,
    ) -> OrderPage:
        return self._page(
            OrderORM.objects.filter(order_date__gte=start, order_date__lte=end),
            limit,
            offset,
        )

    def count_by_status(self) -> dict[OrderStatus, int]:
        counts = {status: 0 for status in OrderStatus}
        rows = OrderORM.objects.values("status").annotate(count=Count("id")).order_by()
        for row in rows:
            counts[OrderStatus(row["status"])] = row["count"]
        return counts

    def sum_total_amount(self, exclude: tuple[OrderStatus, ...] = ()) -> Decimal:
        queryset = OrderORM.objects.exclude(status__in=[status.value for status in exclude])
        total = queryset.aggregate(total=Sum("total_amount"))["total"]
        return total if total is not None else Decimal("0.00")

    @transaction.atomic
    def save(self, order: Order) -> UUID:
        """Save order aggregate.

        Items are written only when the order row is first created; a placed
        order never changes its lines.
        """
        if not order.items:
            raise ValueError(f"Order {order.id} has no items and cannot be saved")
        if not order.is_placed:
            raise ValueError(f"Order {order.id} has not been placed")

        order_orm, created = OrderORM.objects.update_or_create(
            id=order.id,
            defaults={
                "status": order.status.value,
                "total_amount": order.total_amount,
            },
            create_defaults={
                "customer_id": order.customer_id,
                "order_date": order.order_date,
                "status": order.status.value,
                "total_amount": order.total_amount,
            },
        )

        if created:
            for position, item in enumerate(order.items):
                OrderItemORM.objects.create(
                    id=item.id,
                    order=order_orm,
                    product_id=item.product_id,
                    position=position,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )

        return order_orm.id

    def _page(self, queryset: QuerySet, limit: int, offset: int) -> OrderPage:
        total_count = queryset.count()
        orders_orm = (
            queryset
            .prefetch_related("items")
            .order_by("-order_date", "-id")[offset:offset + limit]
        )
        return OrderPage(
            items=[self._to_domain(order_orm) for order_orm in orders_orm],
            total_count=total_count,
            limit=limit,
            offset=offset,
        )

    def _to_domain(self, order_orm: OrderORM) -> Order:
        """Convert ORM model to domain entity."""
        # Build items list directly (bypass add_item() which is closed once placed)
        items = [
            OrderItem(
                id=item_orm.id,
                product_id=item_orm.product_id,
                product_name=item_orm.product_name,
                quantity=item_orm.quantity,
                unit_price=item_orm.unit_price,
            )
            for item_orm in order_orm.items.all()
        ]

        return Order(
            id=order_orm.id,
            customer_id=order_orm.customer_id,
            items=items,
            status=OrderStatus(order_orm.status),
            order_date=order_orm.order_date,
        )
